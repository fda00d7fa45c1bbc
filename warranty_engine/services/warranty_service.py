"""Warranty registration, cancellation and listing."""
import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.core.enum_utils import get_enum_value
from warranty_engine.core.exceptions import InvalidStateError, NotFoundError
from warranty_engine.models.claim import Claim
from warranty_engine.models.customer import Customer
from warranty_engine.models.product import Product
from warranty_engine.models.warranty import Warranty, WarrantyStatus, DEFAULT_COVERAGE_DETAILS
from warranty_engine.schemas.warranty import (
    RegisterWarrantyCommand, CancelWarrantyCommand, WarrantyListFilter,
)
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


class WarrantyService:
    """Service for warranty operations."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    async def register_warranty(self, command: RegisterWarrantyCommand) -> Warranty:
        """
        Register a warranty and bump the customer's warranty count.

        coverage_start_date defaults to purchase_date; max_coverage_amount
        defaults to purchase_price; coverage_details to the standard plan.
        """
        command = RegisterWarrantyCommand.coerce(command)
        async with self.store.transaction():
            customer = await self.store.get(Customer, command.customer_id, for_update=True)
            if not customer:
                raise NotFoundError.for_entity("Customer", command.customer_id)
            if not await self.store.get(Product, command.product_id):
                raise NotFoundError.for_entity("Product", command.product_id)

            warranty = await self.store.create(
                Warranty,
                customer_id=command.customer_id,
                product_id=command.product_id,
                serial_number=command.serial_number,
                purchase_date=command.purchase_date,
                purchase_price=command.purchase_price,
                retailer=command.retailer or "",
                retailer_store_id=command.retailer_store_id or "",
                warranty_type=command.warranty_type,
                coverage_start_date=command.coverage_start_date or command.purchase_date,
                coverage_end_date=command.coverage_end_date,
                deductible=command.deductible,
                max_coverage_amount=(
                    command.max_coverage_amount
                    if command.max_coverage_amount is not None
                    else command.purchase_price
                ),
                premium_paid=command.premium_paid,
                coverage_details=(
                    dict(command.coverage_details)
                    if command.coverage_details is not None
                    else dict(DEFAULT_COVERAGE_DETAILS)
                ),
                status=WarrantyStatus.ACTIVE.value,
                claim_count=0,
            )

            await self.store.increment(Customer, customer.customer_id, "total_warranties")

        logger.info(f"Warranty {warranty.warranty_id} registered for customer {customer.customer_id}")
        return warranty

    async def cancel_warranty(
        self,
        warranty_id: str,
        command: Optional[CancelWarrantyCommand] = None,
    ) -> Warranty:
        """Cancel an active warranty. Cancelled warranties never reactivate."""
        command = CancelWarrantyCommand.coerce(command)
        async with self.store.transaction():
            warranty = await self.store.get(Warranty, warranty_id)
            if not warranty:
                raise NotFoundError.for_entity("Warranty", warranty_id)
            if warranty.status != WarrantyStatus.ACTIVE.value:
                logger.warning(f"Cancel rejected for {warranty_id}: status is {warranty.status}")
                raise InvalidStateError(
                    f"Warranty is not active (current status: {warranty.status})",
                    {"warranty_id": warranty_id, "current_status": warranty.status},
                )

            warranty = await self.store.update(Warranty, warranty_id, {
                "status": WarrantyStatus.CANCELLED.value,
                "cancellation_date": command.cancellation_date or date.today(),
                "cancellation_reason": command.reason,
            })

        logger.info(f"Warranty {warranty_id} cancelled: {command.reason}")
        return warranty

    async def get_warranty(self, warranty_id: str) -> Warranty:
        warranty = await self.store.get(Warranty, warranty_id)
        if not warranty:
            raise NotFoundError.for_entity("Warranty", warranty_id)
        return warranty

    async def list_warranty_claims(self, warranty_id: str) -> List[Claim]:
        await self.get_warranty(warranty_id)
        return await self.store.list(Claim, Claim.warranty_id == warranty_id, newest_first=True)

    async def list_warranties(self, filters: Optional[WarrantyListFilter] = None) -> List[Warranty]:
        filters = WarrantyListFilter.coerce(filters)

        conditions = []
        if filters.status:
            conditions.append(Warranty.status == get_enum_value(filters.status))
        if filters.customer_id:
            conditions.append(Warranty.customer_id == filters.customer_id)
        if filters.product_id:
            conditions.append(Warranty.product_id == filters.product_id)
        if filters.warranty_type:
            conditions.append(Warranty.warranty_type == filters.warranty_type)
        if filters.expiring_within_days is not None:
            cutoff = date.today() + timedelta(days=filters.expiring_within_days)
            conditions.append(Warranty.status == WarrantyStatus.ACTIVE.value)
            conditions.append(Warranty.coverage_end_date <= cutoff)

        return await self.store.list(Warranty, *conditions)
