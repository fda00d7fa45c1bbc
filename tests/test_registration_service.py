"""
Unit Tests for Customer, Product and Service Network Registration
"""

from decimal import Decimal

import pytest

from warranty_engine.core.exceptions import InvalidInputError, NotFoundError
from warranty_engine.models import Technician


class TestCustomers:

    async def test_register_customer(self, registration_service):
        customer = await registration_service.register_customer({
            "first_name": "Ana",
            "last_name": "Lopez",
            "email": "Ana.Lopez@Example.com",
            "customer_tier": "premium",
        })

        assert customer.customer_id == "CUST-0002"
        assert customer.email == "ana.lopez@example.com"
        assert customer.customer_tier == "premium"
        assert customer.preferred_contact == "email"
        assert customer.total_warranties == 0
        assert customer.full_name == "Ana Lopez"

    async def test_duplicate_email_case_insensitive(self, registration_service):
        await registration_service.register_customer({
            "first_name": "Ana", "last_name": "Lopez", "email": "ana@example.com",
        })

        with pytest.raises(InvalidInputError) as exc_info:
            await registration_service.register_customer({
                "first_name": "Ann", "last_name": "Lopez", "email": "ANA@example.com",
            })
        assert exc_info.value.details["customer_id"] == "CUST-0002"

    @pytest.mark.parametrize("payload", [
        {"first_name": "Ana", "last_name": "Lopez", "email": "not-an-email"},
        {"first_name": "", "last_name": "Lopez", "email": "ana@example.com"},
        {"first_name": "Ana", "last_name": "Lopez", "email": "ana@example.com", "customer_tier": "gold"},
    ])
    async def test_invalid_customer(self, registration_service, payload):
        with pytest.raises(InvalidInputError):
            await registration_service.register_customer(payload)


class TestProducts:

    async def test_policy_defaults(self, registration_service):
        product = await registration_service.add_product({
            "sku": "LG-WM4000", "name": "Front Load Washer", "category": "Washers",
            "brand": "LG", "model_number": "WM4000HWA",
        })

        assert product.product_id == "PRD-002"
        assert product.replacement_cost_threshold == 0.70
        assert product.max_claims_per_year == 2
        assert product.msrp == Decimal("0")
        assert product.active is True

    async def test_explicit_policy(self, registration_service):
        product = await registration_service.add_product({
            "sku": "GE-JB645", "name": "Electric Range", "category": "Ranges",
            "brand": "GE", "model_number": "JB645RKSS",
            "replacement_cost_threshold": 0.5, "max_claims_per_year": 4,
            "common_failures": ["bake element"],
        })

        assert product.replacement_cost_threshold == 0.5
        assert product.max_claims_per_year == 4
        assert product.common_failures == ["bake element"]

    async def test_threshold_must_be_a_fraction(self, registration_service):
        with pytest.raises(InvalidInputError):
            await registration_service.add_product({
                "sku": "X", "name": "X", "category": "X", "brand": "X", "model_number": "X",
                "replacement_cost_threshold": 1.5,
            })


class TestServiceNetwork:

    async def test_service_center_default_labor_rate(self, registration_service):
        center = await registration_service.register_service_center({
            "name": "Valley Appliance",
            "contact_name": "Kim Tran",
            "phone": "602-555-0177",
            "address": {"city": "Phoenix", "state": "AZ"},
        })

        assert center.service_center_id == "SVC-002"
        assert center.labor_rate == Decimal("85.00")
        assert center.state == "AZ"
        assert center.center_type == "authorized"
        assert center.active is True

    async def test_rating_out_of_range(self, registration_service):
        with pytest.raises(InvalidInputError):
            await registration_service.register_service_center({
                "name": "Bad", "contact_name": "Bad", "phone": "0", "address": {}, "rating": 6,
            })

    async def test_add_technician(self, registration_service, catalog):
        technician = await registration_service.add_technician({
            "first_name": "Jo",
            "last_name": "Park",
            "service_center_id": catalog.center_id,
            "years_experience": 7,
        })

        assert technician.technician_id == "TECH-003"
        assert technician.available is True
        assert technician.full_name == "Jo Park"

    async def test_technician_needs_existing_center(self, registration_service, store):
        with pytest.raises(NotFoundError):
            await registration_service.add_technician({
                "first_name": "Jo", "last_name": "Park", "service_center_id": "SVC-999",
            })
        assert await store.count(Technician) == 0

    async def test_availability_set_and_toggle(self, registration_service, catalog):
        technician = await registration_service.set_technician_availability(catalog.technician_id, False)
        assert technician.available is False

        technician = await registration_service.set_technician_availability(catalog.technician_id)
        assert technician.available is True

        with pytest.raises(NotFoundError):
            await registration_service.set_technician_availability("TECH-999")

    async def test_list_center_technicians(self, registration_service, catalog):
        second = await registration_service.add_technician({
            "first_name": "Lee", "last_name": "Wu", "service_center_id": catalog.center_id,
        })
        await registration_service.set_technician_availability(second.technician_id, False)

        everyone = await registration_service.list_center_technicians(catalog.center_id)
        available = await registration_service.list_center_technicians(catalog.center_id, available_only=True)

        assert [t.technician_id for t in everyone] == [catalog.technician_id, second.technician_id]
        assert [t.technician_id for t in available] == [catalog.technician_id]

        with pytest.raises(NotFoundError):
            await registration_service.list_center_technicians("SVC-999")
