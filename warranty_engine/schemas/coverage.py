"""Coverage verification schemas."""
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import date
from decimal import Decimal

from warranty_engine.models.claim import IssueType
from warranty_engine.schemas.base import BaseCommand


class VerifyCoverageRequest(BaseCommand):
    """Pre-check before filing a claim."""
    warranty_id: str = Field(..., min_length=1)
    claim_date: Optional[date] = None
    issue_type: Optional[IssueType] = None


class WarrantySummary(BaseModel):
    """Warranty terms returned with a coverage decision."""
    warranty_id: str
    warranty_type: str
    coverage_end_date: date
    deductible: Decimal
    max_coverage_amount: Decimal
    coverage_details: Dict[str, bool] = Field(default_factory=dict)
    claims_this_year: int
    max_claims_per_year: Optional[int] = None


class CoverageResult(BaseModel):
    """
    Outcome of coverage verification.

    covered=False is the NotCovered outcome; it always carries a reason.
    """
    covered: bool
    reason: str
    warranty: Optional[WarrantySummary] = None
