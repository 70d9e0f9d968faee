"""SQLModel data models.

This module defines the registry's database tables using SQLModel.
Identifiers are issued by `IdGenerator` rather than by the database,
so every primary key is explicit and never auto-incremented.
Timestamps are integer nanoseconds from the service clock.
"""

from enum import Enum

from sqlmodel import SQLModel, Field


class Institution(SQLModel, table=True):
    """An issuing institution."""
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    name: str
    address: str
    created_at: int


class Student(SQLModel, table=True):
    """A student who may hold credentials."""
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    name: str
    email: str
    created_at: int


class Credential(SQLModel, table=True):
    """A credential issued by an institution to a student.

    `student_id` and `institution_id` are checked for existence when the
    credential is created; the indexes back existence and verification
    lookups.
    """
    id: int = Field(primary_key=True, sa_column_kwargs={"autoincrement": False})
    student_id: int = Field(foreign_key="student.id", index=True)
    institution_id: int = Field(foreign_key="institution.id", index=True)
    course: str
    degree: str
    graduation_year: int
    issued_at: int


class IdentityCounter(SQLModel, table=True):
    """Persisted state of the shared identifier counter (a single row)."""
    __tablename__ = "identity_counter"

    name: str = Field(primary_key=True)
    next_value: int


class EntityKind(str, Enum):
    INSTITUTION = "institution"
    STUDENT = "student"
    CREDENTIAL = "credential"

    @property
    def model(self):
        return _KIND_MODELS[self]

    @property
    def plural(self) -> str:
        return f"{self.value}s"


_KIND_MODELS = {
    EntityKind.INSTITUTION: Institution,
    EntityKind.STUDENT: Student,
    EntityKind.CREDENTIAL: Credential,
}
