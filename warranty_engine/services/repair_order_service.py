"""
Repair Order Service

Handles the repair order lifecycle and writes the outcome back to the
parent claim:

    create    -> claim moves to in_repair and records the order id
    complete  -> costs computed, claim moves to completed
    cancel    -> order cancelled, claim left as is

Cost computation on completion:
    parts_cost   = sum(total_cost or unit_cost * quantity)   # quantity defaults to 1
    labor_cost   = labor_hours * labor_rate                  # hours default to the order's, then 1
    total_cost   = round2(parts_cost + labor_cost + travel_fee)
    covered      = max(0, total_cost - deductible_collected)
"""
import logging
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.config import settings
from warranty_engine.core.exceptions import InvalidInputError, InvalidStateError, NotFoundError
from warranty_engine.models.claim import Claim, ClaimStatus
from warranty_engine.models.repair_order import RepairOrder, RepairOrderStatus
from warranty_engine.models.service_center import ServiceCenter
from warranty_engine.models.technician import Technician
from warranty_engine.schemas.repair_order import (
    CreateRepairOrderCommand, CompleteRepairOrderCommand, CancelRepairOrderCommand,
    RepairOrderListFilter, PartUsed,
)
from warranty_engine.services import claim_state_machine, repair_order_state_machine
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


CENT = Decimal("0.01")


def compute_parts_cost(parts: List[PartUsed]) -> Decimal:
    return sum((part.line_cost() for part in parts), Decimal("0"))


class RepairOrderService:
    """Service for repair order operations."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    async def _get_order(self, order_id: str) -> RepairOrder:
        order = await self.store.get(RepairOrder, order_id)
        if not order:
            raise NotFoundError.for_entity("Repair order", order_id)
        return order

    # ==================== CREATE ====================

    async def create_repair_order(self, command: CreateRepairOrderCommand) -> RepairOrder:
        """Dispatch a repair for a pending or approved claim."""
        command = CreateRepairOrderCommand.coerce(command)
        async with self.store.transaction():
            claim = await self.store.get(Claim, command.claim_id)
            if not claim:
                raise NotFoundError.for_entity("Claim", command.claim_id)
            if not claim_state_machine.can_dispatch_repair(claim.status):
                logger.warning(f"Repair order rejected for {claim.claim_id}: status is {claim.status}")
                raise InvalidStateError(
                    f"Claim status '{claim.status}' does not allow repair order creation",
                    {"claim_id": claim.claim_id, "current_status": claim.status},
                )

            center = await self.store.get(ServiceCenter, command.service_center_id)
            if not center:
                raise NotFoundError.for_entity("Service center", command.service_center_id)
            if command.technician_id and not await self.store.get(Technician, command.technician_id):
                raise NotFoundError.for_entity("Technician", command.technician_id)

            labor_rate = center.labor_rate or Decimal(str(settings.DEFAULT_LABOR_RATE))

            order = await self.store.create(
                RepairOrder,
                claim_id=claim.claim_id,
                warranty_id=claim.warranty_id,
                customer_id=claim.customer_id,
                product_id=claim.product_id,
                service_center_id=center.service_center_id,
                technician_id=command.technician_id,
                scheduled_date=command.scheduled_date,
                order_type=command.order_type or "repair",
                status=RepairOrderStatus.SCHEDULED.value,
                diagnosis=command.diagnosis or "",
                work_performed=None,
                parts_used=[],
                parts_cost=Decimal("0"),
                labor_hours=None,
                labor_rate=labor_rate,
                labor_cost=Decimal("0"),
                travel_fee=command.travel_fee,
                total_cost=Decimal("0"),
                covered_amount=Decimal("0"),
                deductible_collected=command.deductible_collected,
                customer_signature=False,
                follow_up_required=False,
                warranty_on_repair_days=90,
                technician_notes="",
            )

            claim_state_machine.validate_transition(claim.status, ClaimStatus.IN_REPAIR)
            await self.store.update(Claim, claim.claim_id, {
                "status": ClaimStatus.IN_REPAIR.value,
                "repair_order_id": order.repair_order_id,
            })

        logger.info(
            f"Repair order {order.repair_order_id} scheduled for claim {claim.claim_id} "
            f"at {center.service_center_id}"
        )
        return order

    # ==================== COMPLETE ====================

    async def complete_repair_order(
        self,
        order_id: str,
        command: CompleteRepairOrderCommand,
    ) -> RepairOrder:
        """
        Complete a repair order and close out the claim's repair.

        Raises:
            NotFoundError: unknown order
            InvalidStateError: order already completed or cancelled, or the
                claim can no longer move to completed
            InvalidInputError: work_performed missing
        """
        command = CompleteRepairOrderCommand.coerce(command)
        async with self.store.transaction():
            order = await self._get_order(order_id)
            if order.status == RepairOrderStatus.COMPLETED.value:
                logger.warning(f"Repair order {order_id} is already completed")
                raise InvalidStateError(
                    "Repair order is already completed",
                    {"repair_order_id": order_id, "current_status": order.status},
                )
            repair_order_state_machine.validate_transition(order.status, RepairOrderStatus.COMPLETED)

            if not (command.work_performed or "").strip():
                raise InvalidInputError(
                    "work_performed description is required to complete the order",
                    {"repair_order_id": order_id, "field": "work_performed"},
                )

            parts_cost = compute_parts_cost(command.parts_used)
            labor_hours = command.labor_hours or order.labor_hours or Decimal("1")
            labor_cost = Decimal(labor_hours) * Decimal(order.labor_rate)
            travel_fee = order.travel_fee or Decimal("0")

            total_cost = (parts_cost + labor_cost + travel_fee).quantize(CENT, rounding=ROUND_HALF_UP)
            deductible = order.deductible_collected or Decimal("0")
            covered_amount = max(Decimal("0"), total_cost - deductible).quantize(CENT, rounding=ROUND_HALF_UP)

            completion_date = command.completion_date or date.today()
            resolution = command.resolution or "repair"

            changes: Dict[str, Any] = {
                "status": RepairOrderStatus.COMPLETED.value,
                "work_performed": command.work_performed,
                "parts_used": [part.model_dump(exclude_none=True) for part in command.parts_used],
                "parts_cost": parts_cost.quantize(CENT, rounding=ROUND_HALF_UP),
                "labor_hours": labor_hours,
                "labor_cost": labor_cost.quantize(CENT, rounding=ROUND_HALF_UP),
                "total_cost": total_cost,
                "covered_amount": covered_amount,
                "technician_notes": command.technician_notes or "",
                "customer_signature": True,
                "completion_date": completion_date,
            }
            if command.satisfaction_score is not None:
                changes["customer_satisfaction_score"] = command.satisfaction_score
            order = await self.store.update(RepairOrder, order_id, changes)

            claim = await self.store.get(Claim, order.claim_id)
            if claim:
                claim_state_machine.validate_transition(claim.status, ClaimStatus.COMPLETED)
                await self.store.update(Claim, claim.claim_id, {
                    "status": ClaimStatus.COMPLETED.value,
                    "actual_repair_cost": total_cost,
                    "resolution": resolution,
                    "resolution_date": completion_date,
                })

        logger.info(
            f"Repair order {order_id} completed: total {total_cost}, covered {covered_amount}"
        )
        return order

    # ==================== CANCEL ====================

    async def cancel_repair_order(
        self,
        order_id: str,
        command: Optional[CancelRepairOrderCommand] = None,
    ) -> RepairOrder:
        """
        Cancel a scheduled repair order.

        The parent claim keeps its current status.
        """
        command = CancelRepairOrderCommand.coerce(command)
        async with self.store.transaction():
            order = await self._get_order(order_id)
            repair_order_state_machine.validate_transition(order.status, RepairOrderStatus.CANCELLED)

            order = await self.store.update(RepairOrder, order_id, {
                "status": RepairOrderStatus.CANCELLED.value,
                "cancellation_reason": command.reason,
            })

        logger.info(f"Repair order {order_id} cancelled: {command.reason}")
        return order

    # ==================== QUERIES ====================

    async def list_repair_orders(
        self,
        filters: Optional[RepairOrderListFilter] = None,
    ) -> List[RepairOrder]:
        """List repair orders, newest first."""
        filters = RepairOrderListFilter.coerce(filters)

        conditions = []
        if filters.status:
            conditions.append(RepairOrder.status == filters.status)
        if filters.service_center_id:
            conditions.append(RepairOrder.service_center_id == filters.service_center_id)
        if filters.technician_id:
            conditions.append(RepairOrder.technician_id == filters.technician_id)
        if filters.customer_id:
            conditions.append(RepairOrder.customer_id == filters.customer_id)
        if filters.open_only:
            conditions.append(RepairOrder.status == RepairOrderStatus.SCHEDULED.value)

        return await self.store.list(RepairOrder, *conditions, newest_first=True)
