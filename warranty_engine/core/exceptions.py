"""
Engine error taxonomy.

A failed coverage check is not an exception; it comes back as a
CoverageResult or ClaimFilingResult.
"""
from typing import Any, Dict, Optional


class WarrantyEngineError(Exception):
    """Base exception for lifecycle engine errors."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(WarrantyEngineError):
    """A referenced entity id does not exist."""

    @classmethod
    def for_entity(cls, entity: str, entity_id: Any) -> "NotFoundError":
        return cls(f"{entity} not found", {"entity": entity, "id": entity_id})


class InvalidInputError(WarrantyEngineError):
    """A required field is missing or malformed, or an enum value is unknown."""


class InvalidStateError(WarrantyEngineError):
    """The operation is not allowed from the record's current state."""
