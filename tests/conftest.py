"""
Shared fixtures: an in-memory SQLite database per test and a seeded catalog.

Fixtures hand out identifiers rather than ORM objects. A rolled-back
transaction expires every loaded instance, so tests re-read records with
reload() after an operation is expected to fail.
"""
import asyncio
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

from warranty_engine.database import build_engine, build_session_factory, init_db
from warranty_engine.services import (
    EntityStore, CoverageService, ClaimService, RepairOrderService,
    DispatchService, ReportService, WarrantyService, RegistrationService,
)


@pytest_asyncio.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = build_session_factory(engine)
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db):
    return EntityStore(db, lock=asyncio.Lock())


@pytest.fixture
def reload(db):
    """Fetch a fresh copy of a record from the database."""
    async def _reload(model, entity_id):
        return await db.get(model, entity_id, populate_existing=True)
    return _reload


# ==================== SERVICES ====================

@pytest.fixture
def coverage_service(db, store):
    return CoverageService(db, store)


@pytest.fixture
def claim_service(db, store):
    return ClaimService(db, store)


@pytest.fixture
def repair_service(db, store):
    return RepairOrderService(db, store)


@pytest.fixture
def dispatch_service(db, store):
    return DispatchService(db, store)


@pytest.fixture
def report_service(db, store):
    return ReportService(db, store)


@pytest.fixture
def warranty_service(db, store):
    return WarrantyService(db, store)


@pytest.fixture
def registration_service(db, store):
    return RegistrationService(db, store)


# ==================== SEED DATA ====================

@pytest.fixture
def today():
    return date.today()


@pytest_asyncio.fixture
async def catalog(registration_service, warranty_service, today):
    """One customer, refrigerator, service center with a technician, and an active warranty."""
    customer = await registration_service.register_customer({
        "first_name": "Dana",
        "last_name": "Whitfield",
        "email": "dana.whitfield@example.com",
        "phone": "512-555-0142",
        "address": {"street": "14 Elm St", "city": "Austin", "state": "TX", "zip": "78701"},
    })
    product = await registration_service.add_product({
        "sku": "WRF555SDFZ",
        "name": "French Door Refrigerator",
        "category": "Refrigerators",
        "brand": "Whirlpool",
        "model_number": "WRF555SDFZ",
        "msrp": "1200.00",
        "average_repair_cost": "300.00",
    })
    center = await registration_service.register_service_center({
        "name": "Austin Appliance Pros",
        "contact_name": "Rita Gomez",
        "phone": "512-555-0100",
        "address": {"street": "900 Congress Ave", "city": "Austin", "state": "TX", "zip": "78701"},
        "specializations": ["Refrigerators", "Washers"],
        "brands": ["Whirlpool", "LG"],
        "rating": 5,
        "avg_response_days": 2,
    })
    technician = await registration_service.add_technician({
        "first_name": "Sam",
        "last_name": "Ortiz",
        "service_center_id": center.service_center_id,
        "specializations": ["Refrigerators"],
        "certified_brands": ["Whirlpool"],
    })
    warranty = await warranty_service.register_warranty({
        "customer_id": customer.customer_id,
        "product_id": product.product_id,
        "serial_number": "WHR-0001-XYZ",
        "purchase_date": today - timedelta(days=30),
        "purchase_price": "800.00",
        "warranty_type": "extended",
        "coverage_end_date": today + timedelta(days=335),
        "deductible": "50.00",
        "premium_paid": "149.99",
    })

    return SimpleNamespace(
        customer_id=customer.customer_id,
        product_id=product.product_id,
        center_id=center.service_center_id,
        technician_id=technician.technician_id,
        warranty_id=warranty.warranty_id,
    )


@pytest.fixture
def file_claim(claim_service, catalog):
    """File a claim against the catalog warranty and return its id."""
    async def _file(**overrides):
        payload = {
            "warranty_id": catalog.warranty_id,
            "customer_id": catalog.customer_id,
            "issue_type": "mechanical_failure",
            "description": "Compressor cycles constantly and freezer is warm",
        }
        payload.update(overrides)
        result = await claim_service.file_claim(payload)
        assert result.filed, result.coverage.reason
        return result.claim.claim_id
    return _file


@pytest.fixture
def approved_claim(claim_service, file_claim):
    async def _approved(estimated_repair_cost=Decimal("250.00"), **overrides):
        claim_id = await file_claim(**overrides)
        await claim_service.approve_claim(claim_id, {"estimated_repair_cost": estimated_repair_cost})
        return claim_id
    return _approved
