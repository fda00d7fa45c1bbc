"""Repair order commands."""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date
from decimal import Decimal

from warranty_engine.schemas.base import BaseCommand


class PartUsed(BaseModel):
    """Part consumed by a repair."""
    part_number: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0)
    unit_cost: Optional[Decimal] = Field(None, ge=0)
    total_cost: Optional[Decimal] = Field(None, ge=0)

    def line_cost(self) -> Decimal:
        """total_cost when present, else unit_cost x quantity (missing or 0 counts as 1)."""
        if self.total_cost:
            return self.total_cost
        return (self.unit_cost or Decimal("0")) * (self.quantity or 1)


class CreateRepairOrderCommand(BaseCommand):
    """Dispatch a repair for a claim."""
    claim_id: str = Field(..., min_length=1)
    service_center_id: str = Field(..., min_length=1)
    scheduled_date: date
    technician_id: Optional[str] = None
    order_type: str = "repair"
    diagnosis: Optional[str] = ""
    travel_fee: Decimal = Field(Decimal("0"), ge=0)
    deductible_collected: Decimal = Field(Decimal("0"), ge=0)


class CompleteRepairOrderCommand(BaseCommand):
    """Completion report from the technician."""
    work_performed: Optional[str] = None  # Required; checked by the service
    parts_used: List[PartUsed] = Field(default_factory=list)
    labor_hours: Optional[Decimal] = Field(None, gt=0)
    technician_notes: Optional[str] = ""
    resolution: Optional[str] = None
    satisfaction_score: Optional[int] = Field(None, ge=1, le=5)
    completion_date: Optional[date] = None


class CancelRepairOrderCommand(BaseCommand):
    """Cancel a scheduled repair."""
    reason: str = "Cancelled"


class RepairOrderListFilter(BaseCommand):
    """Filters for repair order listings."""
    status: Optional[str] = None
    service_center_id: Optional[str] = None
    technician_id: Optional[str] = None
    customer_id: Optional[str] = None
    open_only: bool = False
