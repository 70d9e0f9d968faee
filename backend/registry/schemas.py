"""Pydantic request schemas used by the API.

Schemas keep API input shapes stable. They only check types and the
unsigned range of `graduation_year`; presence of the text fields is
validated by `RegistryService` so callers get its typed failures.
"""

from pydantic import BaseModel, Field

U32_MAX = 2 ** 32 - 1


class InstitutionPayload(BaseModel):
    """Payload for registering an institution."""
    name: str
    address: str


class StudentPayload(BaseModel):
    """Payload for registering a student."""
    name: str
    email: str


class CredentialPayload(BaseModel):
    """Request format for issuing a credential."""
    student_id: int = Field(ge=0)
    institution_id: int = Field(ge=0)
    course: str
    degree: str
    graduation_year: int = Field(ge=0, le=U32_MAX)


class VerifyPayload(BaseModel):
    """Student/institution pair to verify."""
    student_id: int = Field(ge=0)
    institution_id: int = Field(ge=0)
