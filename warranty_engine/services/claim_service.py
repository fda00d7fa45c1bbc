"""Claim lifecycle service: filing, approval, denial and closure."""
import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.core.enum_utils import get_enum_value
from warranty_engine.core.exceptions import InvalidStateError, NotFoundError
from warranty_engine.models.claim import Claim, ClaimStatus, OPEN_CLAIM_STATUSES
from warranty_engine.models.customer import Customer
from warranty_engine.models.product import Product
from warranty_engine.models.repair_order import RepairOrder
from warranty_engine.models.service_center import ServiceCenter
from warranty_engine.models.technician import Technician
from warranty_engine.models.warranty import Warranty
from warranty_engine.schemas.claim import (
    FileClaimCommand, ApproveClaimCommand, DenyClaimCommand, CloseClaimCommand,
    ClaimListFilter, ClaimResponse, ClaimFilingResult,
)
from warranty_engine.schemas.coverage import CoverageResult
from warranty_engine.services import claim_state_machine
from warranty_engine.services.coverage_service import CoverageService
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


FILED_MESSAGE = (
    "Claim filed successfully. Status: pending_approval. "
    "A representative will contact you within 1-2 business days."
)


class ClaimService:
    """Service for claim lifecycle operations."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)
        self.coverage = CoverageService(db, self.store)

    async def _get_claim(self, claim_id: str) -> Claim:
        claim = await self.store.get(Claim, claim_id)
        if not claim:
            raise NotFoundError.for_entity("Claim", claim_id)
        return claim

    # ==================== FILING ====================

    async def file_claim(self, command: FileClaimCommand) -> ClaimFilingResult:
        """
        File a claim against a warranty.

        Only the mandatory coverage checks (existence, status, window) gate
        filing; claims-per-year and issue-type coverage are left to approval.
        A failed check is returned as filed=False, not raised.

        The claim insert and both counter increments commit together.
        """
        command = FileClaimCommand.coerce(command)
        async with self.store.transaction():
            warranty, reason = await self.coverage.check_filing_preconditions(
                command.warranty_id, command.claim_date, for_update=True
            )
            if reason:
                logger.warning(f"Claim rejected for warranty {command.warranty_id}: {reason}")
                return ClaimFilingResult(
                    filed=False,
                    coverage=CoverageResult(covered=False, reason=reason),
                    message=f"Warranty verification failed: {reason}",
                )

            customer = await self.store.get(Customer, command.customer_id, for_update=True)
            if not customer:
                raise NotFoundError.for_entity("Customer", command.customer_id)

            claim = await self.store.create(
                Claim,
                warranty_id=warranty.warranty_id,
                customer_id=customer.customer_id,
                product_id=command.product_id or warranty.product_id,
                issue_type=get_enum_value(command.issue_type),
                issue_category=command.issue_category or "",
                description=command.description,
                priority=get_enum_value(command.priority),
                claim_date=command.claim_date or date.today(),
                status=ClaimStatus.PENDING_APPROVAL.value,
                deductible_collected=Decimal("0"),
                estimated_repair_cost=None,
                actual_repair_cost=None,
                resolution=None,
                resolution_date=None,
                notes=command.notes or "",
            )

            await self.store.increment(Warranty, warranty.warranty_id, "claim_count")
            await self.store.increment(Customer, customer.customer_id, "total_claims")

        logger.info(f"Claim {claim.claim_id} filed against warranty {warranty.warranty_id}")
        return ClaimFilingResult(
            filed=True,
            coverage=CoverageResult(covered=True, reason="Coverage confirmed"),
            claim=ClaimResponse.model_validate(claim),
            message=FILED_MESSAGE,
        )

    # ==================== TRANSITIONS ====================

    async def approve_claim(self, claim_id: str, command: Optional[ApproveClaimCommand] = None) -> Claim:
        """Approve a pending claim and record the optional repair assignment."""
        command = ApproveClaimCommand.coerce(command)
        async with self.store.transaction():
            claim = await self._get_claim(claim_id)
            if not claim_state_machine.can_approve(claim.status):
                logger.warning(f"Approve rejected for {claim_id}: status is {claim.status}")
                raise InvalidStateError(
                    f"Claim is not pending approval (current: {claim.status})",
                    {"claim_id": claim_id, "current_status": claim.status},
                )

            if command.service_center_id and not await self.store.get(ServiceCenter, command.service_center_id):
                raise NotFoundError.for_entity("Service center", command.service_center_id)
            if command.technician_id and not await self.store.get(Technician, command.technician_id):
                raise NotFoundError.for_entity("Technician", command.technician_id)

            claim = await self.store.update(Claim, claim_id, {
                "status": ClaimStatus.APPROVED.value,
                "estimated_repair_cost": command.estimated_repair_cost,
                "service_center_id": command.service_center_id,
                "technician_id": command.technician_id,
                "deductible_collected": command.deductible_collected,
                "notes": command.notes or claim.notes,
            })

        logger.info(f"Claim {claim_id} approved")
        return claim

    async def deny_claim(self, claim_id: str, command: Optional[DenyClaimCommand] = None) -> Claim:
        """Deny a claim from any non-terminal state."""
        command = DenyClaimCommand.coerce(command)
        async with self.store.transaction():
            claim = await self._get_claim(claim_id)
            claim_state_machine.validate_transition(claim.status, ClaimStatus.DENIED)

            claim = await self.store.update(Claim, claim_id, {
                "status": ClaimStatus.DENIED.value,
                "denial_reason": command.reason,
                "resolution_date": date.today(),
                "notes": command.notes or claim.notes,
            })

        logger.info(f"Claim {claim_id} denied: {command.reason}")
        return claim

    async def close_claim(self, claim_id: str, command: Optional[CloseClaimCommand] = None) -> Claim:
        """Close a completed claim, optionally recording a satisfaction score."""
        command = CloseClaimCommand.coerce(command)
        async with self.store.transaction():
            claim = await self._get_claim(claim_id)
            claim_state_machine.validate_transition(claim.status, ClaimStatus.CLOSED)

            changes: Dict[str, Any] = {"status": ClaimStatus.CLOSED.value}
            if command.satisfaction_score is not None:
                changes["customer_satisfaction_score"] = command.satisfaction_score
            claim = await self.store.update(Claim, claim_id, changes)

        logger.info(f"Claim {claim_id} closed")
        return claim

    # ==================== QUERIES ====================

    async def list_claims(self, filters: Optional[ClaimListFilter] = None) -> List[Claim]:
        """List claims, newest first."""
        filters = ClaimListFilter.coerce(filters)

        conditions = []
        if filters.status:
            conditions.append(Claim.status == filters.status)
        if filters.customer_id:
            conditions.append(Claim.customer_id == filters.customer_id)
        if filters.warranty_id:
            conditions.append(Claim.warranty_id == filters.warranty_id)
        if filters.issue_type:
            conditions.append(Claim.issue_type == get_enum_value(filters.issue_type))
        if filters.open_only:
            conditions.append(Claim.status.in_([s.value for s in OPEN_CLAIM_STATUSES]))

        return await self.store.list(Claim, *conditions, newest_first=True)

    async def get_claim_detail(self, claim_id: str) -> Dict[str, Any]:
        """Claim with its customer, product, warranty and repair order."""
        claim = await self._get_claim(claim_id)
        return {
            "claim": claim,
            "customer": await self.store.get(Customer, claim.customer_id),
            "product": await self.store.get(Product, claim.product_id),
            "warranty": await self.store.get(Warranty, claim.warranty_id),
            "repair_order": await self.store.get(RepairOrder, claim.repair_order_id),
        }
