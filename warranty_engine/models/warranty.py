"""Warranty contract model."""
from enum import Enum
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Date, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from warranty_engine.core.enum_utils import enum_comment
from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import JSONType, MoneyType


class WarrantyStatus(str, Enum):
    """Warranty status enum."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


# Coverage applied when a warranty is registered without explicit details
DEFAULT_COVERAGE_DETAILS = {
    "mechanicalFailure": True,
    "electricalFailure": True,
    "accidentalDamage": False,
    "cosmeticDamage": False,
    "foodSpoilage": False,
    "powerSurge": False,
}


class Warranty(Base, TimestampMixin):
    """Warranty held by one customer on one product unit."""

    __tablename__ = "warranties"

    id_template = "WRN-10001"

    warranty_id: Mapped[str] = mapped_column(String(20), primary_key=True)

    customer_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("customers.customer_id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("products.product_id"), nullable=False, index=True
    )
    serial_number: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # Purchase
    purchase_date: Mapped[date] = mapped_column(Date, nullable=False)
    purchase_price: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    retailer: Mapped[Optional[str]] = mapped_column(String(200))
    retailer_store_id: Mapped[Optional[str]] = mapped_column(String(50))

    # Coverage
    warranty_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    coverage_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    coverage_end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    deductible: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    max_coverage_amount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    premium_paid: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    coverage_details: Mapped[Optional[dict]] = mapped_column(JSONType)  # {"mechanicalFailure": true, ...}

    status: Mapped[str] = mapped_column(
        String(20),
        default=WarrantyStatus.ACTIVE.value,
        index=True,
        comment=enum_comment(WarrantyStatus),
    )
    claim_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Cancellation
    cancellation_date: Mapped[Optional[date]] = mapped_column(Date)
    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text)

    def covers_date(self, on_date: date) -> bool:
        """Check if a date falls inside the inclusive coverage window."""
        return self.coverage_start_date <= on_date <= self.coverage_end_date

    def __repr__(self):
        return f"<Warranty {self.warranty_id} ({self.status})>"
