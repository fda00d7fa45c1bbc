"""
Enum Utilities for VARCHAR-based Status Fields

STORAGE STANDARD:
━━━━━━━━━━━━━━━━━
• Database: VARCHAR(30) - NOT a database ENUM
• SQLAlchemy: String(30) with Mapped[str]
• Pydantic: Python Enum for command validation
• Case: All enum values stored in lowercase (snake_case)

DATA FLOW:
━━━━━━━━━━
INPUT (command):
    Pydantic Enum → .value → String → Database
    Example: IssueType.POWER_SURGE → "power_surge" → VARCHAR

OUTPUT (reading records):
    Database → String → compare with Enum.value
"""

from enum import Enum
from typing import Any, Optional, TypeVar, Type


T = TypeVar('T', bound=Enum)


def get_enum_value(value: Any) -> Optional[str]:
    """
    Safely get string value from an enum or string.

    Examples:
        >>> get_enum_value(ClaimStatus.APPROVED)
        'approved'
        >>> get_enum_value("approved")
        'approved'
    """
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    return str(value)


def to_enum(value: Any, enum_class: Type[T]) -> Optional[T]:
    """
    Convert a string value to an enum instance, or None if unknown.

    Examples:
        >>> to_enum("approved", ClaimStatus)
        ClaimStatus.APPROVED
        >>> to_enum("bogus", ClaimStatus)
        None
    """
    if value is None:
        return None
    if isinstance(value, enum_class):
        return value
    try:
        return enum_class(value)
    except (ValueError, KeyError):
        return None


def enum_values(enum_class: Type[Enum]) -> list:
    """Get all values from an enum class."""
    return [e.value for e in enum_class]


def enum_comment(enum_class: Type[Enum]) -> str:
    """
    Generate a comment string for VARCHAR column.

    Examples:
        >>> enum_comment(RepairOrderStatus)
        'scheduled, completed, cancelled'
    """
    return ", ".join(enum_values(enum_class))
