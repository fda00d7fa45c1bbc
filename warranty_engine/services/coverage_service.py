"""
Coverage Verification Service.

Decides whether a claim against a warranty is permissible on a date and for
an issue type. Checks run in order and stop at the first failure:

    1. warranty exists
    2. warranty is active
    3. claim date inside the coverage window
    4. claims filed this calendar year below the product limit
    5. issue type enabled in the warranty's coverage details

Claim filing enforces 1-3 only (check_filing_preconditions). Steps 4-5 are
advisory and surface through verify() before a claim is filed.
"""
import logging
from datetime import date
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.core.enum_utils import get_enum_value, to_enum
from warranty_engine.models.claim import Claim, IssueType, ISSUE_TYPE_COVERAGE_KEYS
from warranty_engine.models.product import Product
from warranty_engine.models.warranty import Warranty, WarrantyStatus
from warranty_engine.schemas.coverage import CoverageResult, VerifyCoverageRequest, WarrantySummary
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


REASON_NOT_FOUND = "Warranty not found"
REASON_BEFORE_START = "Claim date before coverage start"
REASON_EXPIRED = "Warranty has expired"
REASON_CONFIRMED = "Coverage confirmed"


class CoverageService:
    """Coverage checks for warranties."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    async def check_filing_preconditions(
        self,
        warranty_id: str,
        claim_date: Optional[date] = None,
        for_update: bool = False,
    ) -> Tuple[Optional[Warranty], Optional[str]]:
        """
        Run the mandatory checks (existence, status, coverage window).

        Returns (warranty, None) when the claim may be filed, otherwise
        (warranty or None, reason). for_update locks the warranty row
        for the rest of the caller's transaction.
        """
        warranty = await self.store.get(Warranty, warranty_id, for_update=for_update)
        if not warranty:
            return None, REASON_NOT_FOUND

        if warranty.status != WarrantyStatus.ACTIVE.value:
            return warranty, f"Warranty status is '{warranty.status}'"

        effective_date = claim_date or date.today()
        if not warranty.covers_date(effective_date):
            if effective_date < warranty.coverage_start_date:
                return warranty, REASON_BEFORE_START
            return warranty, REASON_EXPIRED

        return warranty, None

    async def count_claims_this_year(self, warranty_id: str, today: Optional[date] = None) -> int:
        """Claims against the warranty dated in the current calendar year."""
        year = (today or date.today()).year
        return await self.store.count(
            Claim,
            Claim.warranty_id == warranty_id,
            Claim.claim_date >= date(year, 1, 1),
            Claim.claim_date <= date(year, 12, 31),
        )

    async def verify(self, request: VerifyCoverageRequest) -> CoverageResult:
        """Full coverage pre-check. Never raises for a not-covered outcome."""
        request = VerifyCoverageRequest.coerce(request)
        warranty, reason = await self.check_filing_preconditions(
            request.warranty_id, request.claim_date
        )
        if reason:
            logger.info(f"Coverage check for {request.warranty_id}: not covered ({reason})")
            return CoverageResult(covered=False, reason=reason)

        product = await self.store.get(Product, warranty.product_id)
        claims_this_year = await self.count_claims_this_year(warranty.warranty_id)
        max_claims = product.max_claims_per_year if product else None

        if max_claims is not None and claims_this_year >= max_claims:
            reason = f"Maximum claims per year ({max_claims}) already reached"
            logger.info(f"Coverage check for {warranty.warranty_id}: not covered ({reason})")
            return CoverageResult(covered=False, reason=reason)

        summary = WarrantySummary(
            warranty_id=warranty.warranty_id,
            warranty_type=warranty.warranty_type,
            coverage_end_date=warranty.coverage_end_date,
            deductible=warranty.deductible,
            max_coverage_amount=warranty.max_coverage_amount,
            coverage_details=warranty.coverage_details or {},
            claims_this_year=claims_this_year,
            max_claims_per_year=max_claims,
        )

        if request.issue_type and not self.is_issue_covered(warranty, request.issue_type):
            issue = get_enum_value(request.issue_type)
            return CoverageResult(
                covered=False,
                reason=f"Coverage for '{issue}' is not included in this warranty plan",
                warranty=summary,
            )

        return CoverageResult(covered=True, reason=REASON_CONFIRMED, warranty=summary)

    @staticmethod
    def is_issue_covered(warranty: Warranty, issue_type) -> bool:
        """Issue types without a coverage flag (OTHER) are always covered."""
        if warranty.coverage_details is None:
            return True
        key = ISSUE_TYPE_COVERAGE_KEYS.get(to_enum(issue_type, IssueType))
        if key is None:
            return True
        return bool(warranty.coverage_details.get(key))
