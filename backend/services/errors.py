"""
services/errors.py - Error taxonomy raised by the entity core.

The core raises these synchronously and never catches them; the HTTP layer
translates them in main.py.
"""


class FarmError(Exception):
    """Base class for every error raised by the entity core."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFound(FarmError):
    """An id does not exist in the targeted collection."""

    status_code = 404

    @classmethod
    def for_id(cls, kind: str, entity_id: str) -> "NotFound":
        return cls(f"{kind.rstrip('s').replace('_', ' ').capitalize()} {entity_id} not found")


class ValidationError(FarmError):
    """Missing required field, enum value outside its set, or a broken reference shape."""

    status_code = 422


class PreconditionFailed(NotFound):
    """The referenced engineer is missing or not active."""

    status_code = 409
