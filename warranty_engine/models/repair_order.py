"""Repair order model."""
from enum import Enum
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, Date, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from warranty_engine.core.enum_utils import enum_comment
from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import JSONType, MoneyType


class RepairOrderStatus(str, Enum):
    """Repair order status enum. Transitions live in repair_order_state_machine."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RepairOrder(Base, TimestampMixin):
    """Repair job dispatched to a service center for one claim."""

    __tablename__ = "repair_orders"

    id_template = "RPR-30001"

    repair_order_id: Mapped[str] = mapped_column(String(20), primary_key=True)

    claim_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("claims.claim_id"), nullable=False, index=True
    )

    # Denormalized from the claim for lookups
    warranty_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    customer_id: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    product_id: Mapped[str] = mapped_column(String(20), nullable=False)

    # Assignment
    service_center_id: Mapped[str] = mapped_column(
        String(20), ForeignKey("service_centers.service_center_id"), nullable=False, index=True
    )
    technician_id: Mapped[Optional[str]] = mapped_column(
        String(20), ForeignKey("technicians.technician_id"), index=True
    )

    order_type: Mapped[str] = mapped_column(String(30), default="repair")
    status: Mapped[str] = mapped_column(
        String(20),
        default=RepairOrderStatus.SCHEDULED.value,
        index=True,
        comment=enum_comment(RepairOrderStatus),
    )

    # Scheduling
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False)
    completion_date: Mapped[Optional[date]] = mapped_column(Date)

    # Work
    diagnosis: Mapped[Optional[str]] = mapped_column(Text, default="")
    work_performed: Mapped[Optional[str]] = mapped_column(Text)
    parts_used: Mapped[Optional[list]] = mapped_column(JSONType)  # [{"part_number", "description", "quantity", "unit_cost", "total_cost"}]
    technician_notes: Mapped[Optional[str]] = mapped_column(Text, default="")

    # Costs
    labor_hours: Mapped[Optional[Decimal]] = mapped_column(Numeric(6, 2))
    labor_rate: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    labor_cost: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    parts_cost: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    travel_fee: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    total_cost: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    covered_amount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))
    deductible_collected: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))

    # Customer sign-off
    customer_signature: Mapped[bool] = mapped_column(Boolean, default=False)
    customer_satisfaction_score: Mapped[Optional[int]] = mapped_column(Integer)

    follow_up_required: Mapped[bool] = mapped_column(Boolean, default=False)
    warranty_on_repair_days: Mapped[int] = mapped_column(Integer, default=90)

    cancellation_reason: Mapped[Optional[str]] = mapped_column(Text)

    @property
    def is_open(self) -> bool:
        return self.status == RepairOrderStatus.SCHEDULED.value

    def __repr__(self):
        return f"<RepairOrder {self.repair_order_id} ({self.status})>"
