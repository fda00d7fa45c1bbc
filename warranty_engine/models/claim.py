"""Warranty claim model."""
from enum import Enum
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Date, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from warranty_engine.core.enum_utils import enum_comment
from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import MoneyType


class ClaimStatus(str, Enum):
    """Claim status enum. Transitions live in claim_state_machine."""
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    DENIED = "denied"
    IN_REPAIR = "in_repair"
    COMPLETED = "completed"
    CLOSED = "closed"


# Claims that still need work (used by listings and dashboards)
OPEN_CLAIM_STATUSES = (
    ClaimStatus.PENDING_APPROVAL,
    ClaimStatus.APPROVED,
    ClaimStatus.IN_REPAIR,
)


class IssueType(str, Enum):
    """Reported failure type."""
    MECHANICAL_FAILURE = "mechanical_failure"
    ELECTRICAL_FAILURE = "electrical_failure"
    ACCIDENTAL_DAMAGE = "accidental_damage"
    COSMETIC_DAMAGE = "cosmetic_damage"
    FOOD_SPOILAGE = "food_spoilage"
    POWER_SURGE = "power_surge"
    OTHER = "other"


# IssueType -> Warranty.coverage_details key. OTHER has no flag and is always covered.
ISSUE_TYPE_COVERAGE_KEYS = {
    IssueType.MECHANICAL_FAILURE: "mechanicalFailure",
    IssueType.ELECTRICAL_FAILURE: "electricalFailure",
    IssueType.ACCIDENTAL_DAMAGE: "accidentalDamage",
    IssueType.COSMETIC_DAMAGE: "cosmeticDamage",
    IssueType.FOOD_SPOILAGE: "foodSpoilage",
    IssueType.POWER_SURGE: "powerSurge",
}


class ClaimPriority(str, Enum):
    """Claim priority enum."""
    STANDARD = "standard"
    HIGH = "high"
    URGENT = "urgent"


class Claim(Base, TimestampMixin):
    """Claim filed against a warranty."""

    __tablename__ = "claims"

    id_template = "CLM-20001"

    claim_id: Mapped[str] = mapped_column(String(20), primary_key=True)

    # References
    warranty_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("warranties.warranty_id"), nullable=False, index=True
    )
    customer_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("customers.customer_id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("products.product_id"), nullable=False, index=True
    )
    service_center_id: Mapped[Optional[str]] = mapped_column(
        String(20), ForeignKey("service_centers.service_center_id")
    )
    technician_id: Mapped[Optional[str]] = mapped_column(
        String(20), ForeignKey("technicians.technician_id")
    )
    repair_order_id: Mapped[Optional[str]] = mapped_column(String(20))

    # Issue
    issue_type: Mapped[str] = mapped_column(
        String(30), nullable=False, index=True, comment=enum_comment(IssueType)
    )
    issue_category: Mapped[str] = mapped_column(String(100), default="")
    description: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(
        String(20), default=ClaimPriority.STANDARD.value, comment=enum_comment(ClaimPriority)
    )
    claim_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Status
    status: Mapped[str] = mapped_column(
        String(30),
        default=ClaimStatus.PENDING_APPROVAL.value,
        index=True,
        comment=enum_comment(ClaimStatus),
    )
    denial_reason: Mapped[Optional[str]] = mapped_column(Text)

    # Financials
    deductible_collected: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    estimated_repair_cost: Mapped[Optional[Decimal]] = mapped_column(MoneyType)
    actual_repair_cost: Mapped[Optional[Decimal]] = mapped_column(MoneyType)

    # Resolution
    resolution: Mapped[Optional[str]] = mapped_column(String(50))  # repair, replace, refund
    resolution_date: Mapped[Optional[date]] = mapped_column(Date)
    customer_satisfaction_score: Mapped[Optional[int]] = mapped_column(Integer)

    notes: Mapped[Optional[str]] = mapped_column(Text)

    def __repr__(self):
        return f"<Claim {self.claim_id} ({self.status})>"
