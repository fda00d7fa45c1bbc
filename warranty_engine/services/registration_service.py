"""
Registration Service for customers, catalog products and the service network.

These records carry no lifecycle of their own; the service assigns
identifiers and the policy defaults the lifecycle engine depends on.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.config import settings
from warranty_engine.core.enum_utils import get_enum_value
from warranty_engine.core.exceptions import InvalidInputError, NotFoundError
from warranty_engine.models.customer import Customer
from warranty_engine.models.product import Product
from warranty_engine.models.service_center import ServiceCenter
from warranty_engine.models.technician import Technician
from warranty_engine.schemas.registration import (
    CustomerCreate, ProductCreate, ServiceCenterCreate, TechnicianCreate,
)
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


class RegistrationService:
    """Creates the parties and catalog entries claims refer to."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    # ==================== CUSTOMERS ====================

    async def register_customer(self, data: CustomerCreate) -> Customer:
        """Register a customer. Email addresses are unique."""
        data = CustomerCreate.coerce(data)
        email = str(data.email).lower()
        async with self.store.transaction():
            existing = await self.store.list(Customer, Customer.email == email)
            if existing:
                raise InvalidInputError(
                    "A customer with this email already exists",
                    {"email": email, "customer_id": existing[0].customer_id},
                )

            customer = await self.store.create(
                Customer,
                first_name=data.first_name,
                last_name=data.last_name,
                email=email,
                phone=data.phone,
                address=data.address,
                preferred_contact=get_enum_value(data.preferred_contact),
                customer_tier=get_enum_value(data.customer_tier),
                total_warranties=0,
                total_claims=0,
                active=True,
                notes=data.notes or "",
            )

        logger.info(f"Customer {customer.customer_id} registered")
        return customer

    # ==================== PRODUCTS ====================

    async def add_product(self, data: ProductCreate) -> Product:
        data = ProductCreate.coerce(data)
        async with self.store.transaction():
            product = await self.store.create(
                Product,
                sku=data.sku,
                name=data.name,
                category=data.category,
                brand=data.brand,
                model_number=data.model_number,
                msrp=data.msrp,
                standard_warranty_months=data.standard_warranty_months,
                parts_warranty_months=data.parts_warranty_months,
                labor_warranty_months=data.labor_warranty_months,
                replacement_cost_threshold=(
                    data.replacement_cost_threshold or settings.DEFAULT_REPLACEMENT_THRESHOLD
                ),
                max_claims_per_year=data.max_claims_per_year or settings.DEFAULT_MAX_CLAIMS_PER_YEAR,
                common_failures=list(data.common_failures),
                average_repair_cost=data.average_repair_cost,
                active=True,
            )

        logger.info(f"Product {product.product_id} ({product.sku}) added")
        return product

    # ==================== SERVICE NETWORK ====================

    async def register_service_center(self, data: ServiceCenterCreate) -> ServiceCenter:
        data = ServiceCenterCreate.coerce(data)
        async with self.store.transaction():
            center = await self.store.create(
                ServiceCenter,
                name=data.name,
                center_type=get_enum_value(data.center_type),
                contact_name=data.contact_name,
                phone=data.phone,
                email=data.email or "",
                address=data.address,
                specializations=list(data.specializations),
                brands=list(data.brands),
                certifications=list(data.certifications),
                coverage_radius=data.coverage_radius,
                rating=data.rating,
                avg_response_days=data.avg_response_days,
                avg_completion_days=0,
                labor_rate=data.labor_rate or Decimal(str(settings.DEFAULT_LABOR_RATE)),
                active=True,
            )

        logger.info(f"Service center {center.service_center_id} registered")
        return center

    async def add_technician(self, data: TechnicianCreate) -> Technician:
        """Add a technician to an existing service center."""
        data = TechnicianCreate.coerce(data)
        async with self.store.transaction():
            if not await self.store.get(ServiceCenter, data.service_center_id):
                raise NotFoundError.for_entity("Service center", data.service_center_id)

            technician = await self.store.create(
                Technician,
                service_center_id=data.service_center_id,
                first_name=data.first_name,
                last_name=data.last_name,
                employee_id=data.employee_id or "",
                phone=data.phone or "",
                email=data.email or "",
                specializations=list(data.specializations),
                certified_brands=list(data.certified_brands),
                years_experience=data.years_experience,
                rating=data.rating,
                active_orders=0,
                total_completed=0,
                available=True,
            )

        logger.info(f"Technician {technician.technician_id} added to {data.service_center_id}")
        return technician

    async def set_technician_availability(
        self,
        technician_id: str,
        available: Optional[bool] = None,
    ) -> Technician:
        """Set a technician's availability, or toggle it when not given."""
        async with self.store.transaction():
            technician = await self.store.get(Technician, technician_id)
            if not technician:
                raise NotFoundError.for_entity("Technician", technician_id)

            if available is None:
                available = not technician.available
            technician = await self.store.update(Technician, technician_id, {"available": available})

        logger.info(
            f"Technician {technician_id} marked as {'available' if available else 'unavailable'}"
        )
        return technician

    async def list_center_technicians(
        self,
        service_center_id: str,
        available_only: bool = False,
    ) -> List[Technician]:
        if not await self.store.get(ServiceCenter, service_center_id):
            raise NotFoundError.for_entity("Service center", service_center_id)

        conditions = [Technician.service_center_id == service_center_id]
        if available_only:
            conditions.append(Technician.available.is_(True))
        return await self.store.list(Technician, *conditions)
