"""Typed failures returned by registry operations.

Caller-facing failures derive from `RegistryError` and carry a short
`kind` tag plus a human-readable message. Internal invariant violations
derive from `RuntimeError` and are never mapped to client errors.
"""


class RegistryError(Exception):
    kind = "Error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "detail": self.message}


class InvalidPayload(RegistryError):
    """Caller-supplied fields failed presence validation."""
    kind = "InvalidPayload"


class NotFound(RegistryError):
    """A lookup by id, reference or verification criteria found nothing."""
    kind = "NotFound"


class IdentifierExhausted(RuntimeError):
    """The shared identifier counter reached its storage limit."""


class DuplicateRecord(RuntimeError):
    """A record was inserted at a key that is already taken."""
