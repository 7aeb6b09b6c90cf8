"""Error types raised by the wear-tracking core.

Every error carries a human-readable message that is safe to surface to the
caller verbatim. The HTTP layer maps each type onto a status code:

    ValidationError      -> 400 (rejected before any mutation)
    NotFoundError        -> 404 (no retry)
    ConcurrencyConflict  -> 409 (retry with fresh data)
"""

from typing import Any


class BikeWearError(Exception):
    """Base class for all domain errors."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API responses and structured logs."""
        return {"error": type(self).__name__, "message": self.message, **self.details}


class ValidationError(BikeWearError):
    """Input was rejected before any state was changed."""


class NotFoundError(BikeWearError):
    """A bike, component, interval or ride id does not exist."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id} not found", entity=entity, entity_id=entity_id)
        self.entity = entity
        self.entity_id = entity_id


class ConcurrencyConflict(BikeWearError):
    """Another writer changed the same row first."""

    def __init__(self, entity: str, entity_id: str | None = None) -> None:
        message = f"{entity} was modified concurrently; reload and retry"
        super().__init__(message, entity=entity, entity_id=entity_id)
        self.entity = entity
        self.entity_id = entity_id
