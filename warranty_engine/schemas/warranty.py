"""Warranty registration schemas."""
from pydantic import Field, model_validator
from typing import Optional, Dict
from datetime import date
from decimal import Decimal

from warranty_engine.models.warranty import WarrantyStatus
from warranty_engine.schemas.base import BaseCommand


class RegisterWarrantyCommand(BaseCommand):
    """Register a warranty for a purchased product unit."""
    customer_id: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    serial_number: str = Field(..., min_length=1)
    purchase_date: date
    warranty_type: str = Field(..., min_length=1)
    coverage_end_date: date
    coverage_start_date: Optional[date] = None  # Defaults to purchase_date
    purchase_price: Decimal = Field(Decimal("0"), ge=0)
    retailer: Optional[str] = ""
    retailer_store_id: Optional[str] = ""
    deductible: Decimal = Field(Decimal("0"), ge=0)
    max_coverage_amount: Optional[Decimal] = Field(None, ge=0)  # Defaults to purchase_price
    premium_paid: Decimal = Field(Decimal("0"), ge=0)
    coverage_details: Optional[Dict[str, bool]] = None

    @model_validator(mode="after")
    def check_coverage_window(self):
        start = self.coverage_start_date or self.purchase_date
        if start > self.coverage_end_date:
            raise ValueError("coverage_start_date must be on or before coverage_end_date")
        return self


class CancelWarrantyCommand(BaseCommand):
    """Cancel an active warranty."""
    reason: str = "Customer request"
    cancellation_date: Optional[date] = None


class WarrantyListFilter(BaseCommand):
    """Filters for warranty listings."""
    status: Optional[WarrantyStatus] = None
    customer_id: Optional[str] = None
    product_id: Optional[str] = None
    warranty_type: Optional[str] = None
    expiring_within_days: Optional[int] = Field(None, ge=0)
