"""
Identifier Service for human-readable record numbers.

FORMAT:
    Each model declares an ``id_template`` such as ``WRN-10001``. The part
    after the last dash gives the zero-padded width of the numeric suffix.

ALGORITHM:
    next = max(numeric suffix of every existing identifier) + 1
    Identifiers whose suffix does not parse are ignored.
    With no records at all, the template suffix itself seeds the sequence.

USAGE:
    from warranty_engine.services.identifier_service import IdentifierService

    async def create_claim(db: AsyncSession):
        claim_id = await IdentifierService(db).next_identifier(Claim)
        # Returns: CLM-20002 on an empty table, CLM-20043 after CLM-20042
"""

import logging
from typing import Iterable, Optional, Tuple, Type

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.database import Base

logger = logging.getLogger(__name__)


def split_template(template: str) -> Tuple[str, str]:
    """Split ``PREFIX-0001`` into (``PREFIX``, ``0001``)."""
    prefix, sep, digits = template.rpartition("-")
    if not sep or not digits:
        raise ValueError(f"Invalid identifier template '{template}'")
    return prefix, digits


def parse_suffix(identifier: Optional[str]) -> Optional[int]:
    """Numeric suffix after the last dash, or None when it does not parse."""
    if not identifier:
        return None
    suffix = identifier.rsplit("-", 1)[-1]
    if not suffix.isdigit():
        return None
    return int(suffix)


def format_identifier(template: str, number: int) -> str:
    prefix, digits = split_template(template)
    return f"{prefix}-{str(number).zfill(len(digits))}"


def compute_next_identifier(template: str, existing: Iterable[Optional[str]]) -> str:
    """
    Compute the identifier following ``existing`` for a template.

    Examples:
        >>> compute_next_identifier("WRN-10001", ["WRN-10001", "WRN-10002", "WRN-10005"])
        'WRN-10006'
        >>> compute_next_identifier("PRD-001", [])
        'PRD-002'
    """
    existing = list(existing)
    if not existing:
        _, digits = split_template(template)
        return format_identifier(template, int(digits) + 1)

    numbers = [n for n in (parse_suffix(i) for i in existing) if n is not None]
    return format_identifier(template, max(numbers, default=0) + 1)


class IdentifierService:
    """Assigns the next sequential identifier for a model."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def next_identifier(self, model: Type[Base]) -> str:
        template = model.id_template
        pk_column = inspect(model).primary_key[0]

        result = await self.db.execute(select(pk_column))
        identifier = compute_next_identifier(template, result.scalars().all())

        logger.debug(f"Next {model.__name__} identifier: {identifier}")
        return identifier
