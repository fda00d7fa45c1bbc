"""
Unit Tests for Reports

Dashboard, claims analysis, warranty expiration, service center KPIs,
replacement candidates and product claim statistics.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from warranty_engine.core.exceptions import NotFoundError


@pytest.fixture
def add_warranty(warranty_service, catalog, today):
    async def _add(serial, end_in_days, **overrides):
        payload = {
            "customer_id": catalog.customer_id,
            "product_id": catalog.product_id,
            "serial_number": serial,
            "purchase_date": today - timedelta(days=400),
            "warranty_type": "extended",
            "coverage_end_date": today + timedelta(days=end_in_days),
        }
        payload.update(overrides)
        warranty = await warranty_service.register_warranty(payload)
        return warranty.warranty_id
    return _add


@pytest.fixture
def completed_claim(claim_service, repair_service, file_claim, catalog, today):
    """A claim repaired for 205.00 with a 50.00 deductible."""
    async def _completed(completion_date=None, satisfaction_score=None):
        claim_id = await file_claim()
        await claim_service.approve_claim(claim_id, {"deductible_collected": "50.00"})
        order = await repair_service.create_repair_order({
            "claim_id": claim_id,
            "service_center_id": catalog.center_id,
            "scheduled_date": today,
            "travel_fee": "5.00",
            "deductible_collected": "50.00",
        })
        await repair_service.complete_repair_order(order.repair_order_id, {
            "work_performed": "Replaced evaporator fan",
            "parts_used": [{"unit_cost": "10.00", "quantity": 3}],
            "labor_hours": "2",
            "completion_date": completion_date or today,
        })
        if satisfaction_score is not None:
            await claim_service.close_claim(claim_id, {"satisfaction_score": satisfaction_score})
        return claim_id
    return _completed


class TestDashboard:

    async def test_dashboard_counts(self, report_service, file_claim, approved_claim, add_warranty):
        await file_claim()
        await approved_claim()
        await add_warranty("WHR-SOON", 10)

        dashboard = await report_service.dashboard()

        assert dashboard["claims"]["total"] == 2
        assert dashboard["claims"]["by_status"] == {"pending_approval": 1, "approved": 1}
        assert dashboard["warranties"]["total"] == 2
        assert dashboard["warranties"]["total_premium_revenue"] == Decimal("149.99")
        assert dashboard["alerts"] == {
            "open_claims": 2,
            "warranties_expiring_soon": 1,
            "open_repair_orders": 0,
            "pending_approval": 1,
        }
        assert dashboard["customers"] == {"total": 1, "active": 1}
        assert dashboard["service_centers"]["active"] == 1
        assert dashboard["service_centers"]["available_technicians"] == 1

    async def test_dashboard_repair_costs(self, report_service, completed_claim):
        await completed_claim()

        claims = (await report_service.dashboard())["claims"]

        assert claims["total_repair_cost"] == Decimal("205.00")
        assert claims["avg_repair_cost"] == Decimal("205.00")
        assert claims["by_resolution"] == {"repair": 1}

    async def test_empty_dashboard(self, report_service):
        dashboard = await report_service.dashboard()

        assert dashboard["claims"]["total"] == 0
        assert dashboard["claims"]["avg_repair_cost"] == Decimal("0.00")
        assert dashboard["alerts"]["open_claims"] == 0

    async def test_warranty_summary(self, report_service, warranty_service, catalog, add_warranty):
        await add_warranty("WHR-MFR", 100, warranty_type="manufacturer")
        await warranty_service.cancel_warranty(catalog.warranty_id)

        summary = await report_service.warranty_summary()

        assert summary["total"] == 2
        assert summary["by_status"] == {"cancelled": 1, "active": 1}
        assert summary["by_type"] == {"extended": 1, "manufacturer": 1}


class TestClaimsSummary:

    async def test_financials_use_resolved_claims(self, report_service, completed_claim, file_claim):
        await completed_claim(satisfaction_score=4)
        await file_claim(issue_type="electrical_failure")

        summary = await report_service.claims_summary()

        assert summary["total"] == 2
        assert summary["period"] == {"from": "all", "to": "all"}
        assert summary["financials"] == {
            "total_repair_cost": Decimal("205.00"),
            "total_deductibles_collected": Decimal("50.00"),
            "avg_repair_cost": Decimal("205.00"),
            "net_claim_cost": Decimal("155.00"),
        }
        assert summary["satisfaction"] == {"avg_score": 4.0, "response_count": 1}
        assert summary["by_issue_type"] == {"mechanical_failure": 1, "electrical_failure": 1}
        assert summary["by_issue_category"] == {"unspecified": 2}

    async def test_by_month(self, report_service, file_claim, today):
        await file_claim()

        summary = await report_service.claims_summary()

        assert summary["by_month"] == {today.strftime("%Y-%m"): 1}

    async def test_date_range(self, report_service, file_claim, catalog, today):
        await file_claim(claim_date=today - timedelta(days=20))
        await file_claim()

        recent = await report_service.claims_summary(date_from=today - timedelta(days=5))
        none = await report_service.claims_summary(date_from=today + timedelta(days=1))

        assert recent["total"] == 1
        assert recent["period"]["from"] == (today - timedelta(days=5)).isoformat()
        assert none["total"] == 0
        assert none["satisfaction"]["avg_score"] is None
        assert none["financials"]["avg_repair_cost"] == Decimal("0.00")


class TestWarrantyExpiration:

    async def test_soonest_first_within_window(self, report_service, add_warranty, catalog):
        late = await add_warranty("WHR-60", 60)
        lapsed = await add_warranty("WHR-PAST", -5)
        soon = await add_warranty("WHR-10", 10)
        await add_warranty("WHR-200", 200)

        report = await report_service.warranty_expiration()

        assert report["look_ahead_days"] == 90
        assert report["count"] == 3
        assert [row["warranty_id"] for row in report["data"]] == [lapsed, soon, late]
        assert [row["days_until_expiration"] for row in report["data"]] == [-5, 10, 60]
        assert report["data"][1]["customer_name"] == "Dana Whitfield"
        assert report["data"][1]["product_category"] == "Refrigerators"

    async def test_custom_window_and_cancelled_excluded(self, report_service, warranty_service,
                                                        add_warranty):
        soon = await add_warranty("WHR-10", 10)
        cancelled = await add_warranty("WHR-20", 20)
        await warranty_service.cancel_warranty(cancelled)

        report = await report_service.warranty_expiration(30)

        assert [row["warranty_id"] for row in report["data"]] == [soon]


class TestServiceCenterPerformance:

    async def test_center_kpis(self, report_service, repair_service, completed_claim,
                               approved_claim, catalog, today):
        await completed_claim(completion_date=today + timedelta(days=3))
        order = await repair_service.create_repair_order({
            "claim_id": await approved_claim(),
            "service_center_id": catalog.center_id,
            "scheduled_date": today,
        })
        await repair_service.cancel_repair_order(order.repair_order_id)

        [row] = await report_service.service_center_performance()

        assert row["service_center_id"] == catalog.center_id
        assert row["state"] == "TX"
        assert row["total_orders"] == 2
        assert row["completed_orders"] == 1
        assert row["active_orders"] == 0
        assert row["avg_completion_days"] == 3.0
        assert row["total_revenue"] == Decimal("205.00")
        assert row["technician_count"] == 1
        assert row["available_technicians"] == 1

    async def test_center_without_orders(self, report_service, catalog):
        [row] = await report_service.service_center_performance()

        assert row["total_orders"] == 0
        assert row["avg_completion_days"] == 0.0
        assert row["total_revenue"] == Decimal("0.00")


class TestReplacementCandidates:

    async def test_recommendation_bands(self, report_service, approved_claim):
        replace_id = await approved_claim(estimated_repair_cost=Decimal("720.00"))
        evaluate_id = await approved_claim(estimated_repair_cost=Decimal("600.00"))
        await approved_claim(estimated_repair_cost=Decimal("400.00"))

        candidates = {c["claim_id"]: c for c in await report_service.replacement_candidates()}

        assert set(candidates) == {replace_id, evaluate_id}
        assert candidates[replace_id]["recommendation"] == "replace"
        assert candidates[replace_id]["repair_to_purchase_ratio"] == 90
        assert candidates[replace_id]["replacement_threshold_pct"] == 70
        assert candidates[evaluate_id]["recommendation"] == "evaluate"
        assert candidates[evaluate_id]["repair_to_purchase_ratio"] == 75
        assert candidates[evaluate_id]["purchase_price"] == Decimal("800.00")

    async def test_falls_back_to_msrp_and_average_cost(self, report_service, registration_service,
                                                       add_warranty, file_claim):
        product = await registration_service.add_product({
            "sku": "MXW6230", "name": "Over-the-Range Microwave", "category": "Microwaves",
            "brand": "Whirlpool", "model_number": "MXW6230", "msrp": "1000.00",
            "average_repair_cost": "950.00",
        })
        warranty_id = await add_warranty("MW-1", 100, product_id=product.product_id)
        claim_id = await file_claim(warranty_id=warranty_id)

        [candidate] = await report_service.replacement_candidates()

        assert candidate["claim_id"] == claim_id
        assert candidate["purchase_price"] == Decimal("1000.00")
        assert candidate["repair_estimate"] == Decimal("950.00")
        assert candidate["recommendation"] == "replace"

    async def test_closed_out_claims_excluded(self, report_service, claim_service, approved_claim):
        claim_id = await approved_claim(estimated_repair_cost=Decimal("780.00"))
        await claim_service.deny_claim(claim_id)

        assert await report_service.replacement_candidates() == []


class TestProductClaimStats:

    async def test_claim_rate(self, report_service, file_claim, add_warranty, catalog):
        await add_warranty("WHR-2", 100)
        await file_claim()
        await file_claim(issue_type="electrical_failure")
        await file_claim(issue_type="electrical_failure", priority="high")

        stats = await report_service.product_claim_stats(catalog.product_id)

        assert stats["total_warranties_registered"] == 2
        assert stats["total_claims"] == 3
        assert stats["claims_by_issue_type"] == {"mechanical_failure": 1, "electrical_failure": 2}
        assert stats["claim_rate"] == 1.5

    async def test_product_without_warranties(self, report_service, registration_service):
        product = await registration_service.add_product({
            "sku": "DW-1", "name": "Dishwasher", "category": "Dishwashers",
            "brand": "Bosch", "model_number": "SHX878",
        })

        stats = await report_service.product_claim_stats(product.product_id)

        assert stats["total_claims"] == 0
        assert stats["claim_rate"] == 0.0

    async def test_unknown_product(self, report_service):
        with pytest.raises(NotFoundError):
            await report_service.product_claim_stats("PRD-999")
