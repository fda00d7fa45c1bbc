"""Claim lifecycle commands and responses."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, date
from decimal import Decimal

from warranty_engine.models.claim import IssueType, ClaimPriority
from warranty_engine.schemas.base import BaseCommand, BaseResponseSchema
from warranty_engine.schemas.coverage import CoverageResult


# ==================== COMMANDS ====================

class FileClaimCommand(BaseCommand):
    """File a new claim against a warranty."""
    warranty_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    product_id: Optional[str] = None  # Resolved from the warranty when omitted
    issue_type: IssueType
    issue_category: Optional[str] = ""
    description: str = Field(..., min_length=1)
    priority: ClaimPriority = ClaimPriority.STANDARD
    claim_date: Optional[date] = None
    notes: Optional[str] = ""


class ApproveClaimCommand(BaseCommand):
    """Approve a pending claim and optionally pre-assign repair resources."""
    estimated_repair_cost: Optional[Decimal] = Field(None, ge=0)
    service_center_id: Optional[str] = None
    technician_id: Optional[str] = None
    deductible_collected: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = None


class DenyClaimCommand(BaseCommand):
    """Deny a claim."""
    reason: str = "Does not meet coverage criteria"
    notes: Optional[str] = None


class CloseClaimCommand(BaseCommand):
    """Close a completed claim."""
    satisfaction_score: Optional[int] = Field(None, ge=1, le=5)


class ClaimListFilter(BaseCommand):
    """Filters for claim listings."""
    status: Optional[str] = None
    customer_id: Optional[str] = None
    warranty_id: Optional[str] = None
    issue_type: Optional[IssueType] = None
    open_only: bool = False


# ==================== RESPONSES ====================

class ClaimResponse(BaseResponseSchema):
    """Claim snapshot."""
    claim_id: str
    warranty_id: str
    customer_id: str
    product_id: str
    issue_type: str
    issue_category: Optional[str] = None
    description: str
    priority: str
    claim_date: date
    status: str
    deductible_collected: Optional[Decimal] = None
    estimated_repair_cost: Optional[Decimal] = None
    actual_repair_cost: Optional[Decimal] = None
    resolution: Optional[str] = None
    resolution_date: Optional[date] = None
    denial_reason: Optional[str] = None
    service_center_id: Optional[str] = None
    technician_id: Optional[str] = None
    repair_order_id: Optional[str] = None
    customer_satisfaction_score: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class ClaimFilingResult(BaseModel):
    """
    Outcome of file_claim.

    When the warranty fails the filing preconditions, filed is False, claim
    is None and coverage explains why.
    """
    filed: bool
    coverage: CoverageResult
    claim: Optional[ClaimResponse] = None
    message: Optional[str] = None
