"""
Base Schema Classes for Pydantic Models

RULE: Lifecycle operations accept typed commands (BaseCommand subclasses),
never free-form patches. Results read from ORM models inherit from
BaseResponseSchema.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Any, Mapping, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from warranty_engine.core.exceptions import InvalidInputError


C = TypeVar("C", bound="BaseCommand")


def _describe_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


class BaseCommand(BaseModel):
    """
    Base class for operation inputs.

    Commands can be constructed directly (already-typed callers) or through
    parse(), which turns pydantic validation failures into InvalidInputError.
    """
    model_config = ConfigDict(
        # Allow extra fields to be ignored (forward compatibility)
        extra='ignore',
        str_strip_whitespace=True,
        use_enum_values=False,
    )

    @classmethod
    def parse(cls: Type[C], payload: Mapping[str, Any]) -> C:
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise InvalidInputError(
                f"Invalid {cls.__name__}: {_describe_errors(exc)}",
                {"errors": exc.errors(include_url=False)},
            ) from exc

    @classmethod
    def coerce(cls: Type[C], payload: Any) -> C:
        """Accept either a built command or a raw mapping."""
        if isinstance(payload, cls):
            return payload
        if payload is None:
            payload = {}
        return cls.parse(payload)


class BaseResponseSchema(BaseModel):
    """
    Base class for all response schemas that read from ORM models.

    Usage:
        class ClaimResponse(BaseResponseSchema):
            claim_id: str
            status: str
    """
    model_config = ConfigDict(
        from_attributes=True,
        json_encoders={
            Decimal: float,
            datetime: lambda v: v.isoformat() if v else None,
            date: lambda v: v.isoformat() if v else None,
        },
        populate_by_name=True,
    )
