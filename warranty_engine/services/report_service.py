"""
Report Service - read-only aggregates over current engine state.

Every public report runs under EntityStore.read_consistent(), so a report
never sees a half-applied lifecycle update.
"""
import logging
from collections import Counter
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.config import settings
from warranty_engine.core.exceptions import NotFoundError
from warranty_engine.database import utc_now
from warranty_engine.models.claim import Claim, ClaimStatus, OPEN_CLAIM_STATUSES
from warranty_engine.models.customer import Customer
from warranty_engine.models.product import Product
from warranty_engine.models.repair_order import RepairOrder, RepairOrderStatus
from warranty_engine.models.service_center import ServiceCenter
from warranty_engine.models.technician import Technician
from warranty_engine.models.warranty import Warranty, WarrantyStatus
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


CENT = Decimal("0.01")
TENTH = Decimal("0.1")

# Claims whose repair has finished (closed claims were completed first)
RESOLVED_CLAIM_STATUSES = (ClaimStatus.COMPLETED.value, ClaimStatus.CLOSED.value)


def _money(value) -> Decimal:
    return Decimal(value or 0).quantize(CENT, rounding=ROUND_HALF_UP)


def _one_decimal(value) -> float:
    return float(Decimal(str(value)).quantize(TENTH, rounding=ROUND_HALF_UP))


def _tally(values: Iterable[Optional[str]]) -> Dict[str, int]:
    return dict(Counter(v for v in values if v))


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class ReportService:
    """Dashboard and analytics reports."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    # ==================== SUMMARIES ====================

    async def _claims_overview(self) -> Dict[str, Any]:
        claims = await self.store.list(Claim)
        costs = [c.actual_repair_cost for c in claims if c.actual_repair_cost is not None]
        total_cost = sum((_to_decimal(c) for c in costs), Decimal("0"))

        return {
            "total": len(claims),
            "by_status": _tally(c.status for c in claims),
            "by_issue_type": _tally(c.issue_type for c in claims),
            "by_resolution": _tally(c.resolution for c in claims),
            "total_repair_cost": _money(total_cost),
            "avg_repair_cost": _money(total_cost / len(costs)) if costs else _money(0),
        }

    async def _warranty_overview(self) -> Dict[str, Any]:
        warranties = await self.store.list(Warranty)
        premiums = sum((_to_decimal(w.premium_paid) for w in warranties), Decimal("0"))

        return {
            "total": len(warranties),
            "by_status": _tally(w.status for w in warranties),
            "by_type": _tally(w.warranty_type for w in warranties),
            "total_premium_revenue": _money(premiums),
        }

    async def _expiring_warranties(self, days: int) -> List[Warranty]:
        """Active warranties whose coverage ends within the window (or already ended)."""
        cutoff = date.today() + timedelta(days=days)
        return await self.store.list(
            Warranty,
            Warranty.status == WarrantyStatus.ACTIVE.value,
            Warranty.coverage_end_date <= cutoff,
        )

    async def warranty_summary(self) -> Dict[str, Any]:
        """Warranty counts by status and type with premium revenue."""
        async with self.store.read_consistent():
            return await self._warranty_overview()

    async def dashboard(self) -> Dict[str, Any]:
        """Executive dashboard summary."""
        async with self.store.read_consistent():
            claims = await self._claims_overview()
            warranties = await self._warranty_overview()

            open_claims = await self.store.count(
                Claim, Claim.status.in_([s.value for s in OPEN_CLAIM_STATUSES])
            )
            expiring = await self._expiring_warranties(settings.EXPIRING_SOON_DAYS)
            open_orders = await self.store.count(
                RepairOrder, RepairOrder.status == RepairOrderStatus.SCHEDULED.value
            )

            return {
                "as_of": utc_now(),
                "claims": claims,
                "warranties": warranties,
                "alerts": {
                    "open_claims": open_claims,
                    "warranties_expiring_soon": len(expiring),
                    "open_repair_orders": open_orders,
                    "pending_approval": claims["by_status"].get(ClaimStatus.PENDING_APPROVAL.value, 0),
                },
                "customers": {
                    "total": await self.store.count(Customer),
                    "active": await self.store.count(Customer, Customer.active.is_(True)),
                },
                "service_centers": {
                    "total": await self.store.count(ServiceCenter),
                    "active": await self.store.count(ServiceCenter, ServiceCenter.active.is_(True)),
                    "available_technicians": await self.store.count(
                        Technician, Technician.available.is_(True)
                    ),
                },
            }

    # ==================== CLAIMS ====================

    async def claims_summary(
        self,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Detailed claims analysis, optionally limited to a claim-date range."""
        conditions = []
        if date_from:
            conditions.append(Claim.claim_date >= date_from)
        if date_to:
            conditions.append(Claim.claim_date <= date_to)

        async with self.store.read_consistent():
            claims = await self.store.list(Claim, *conditions)

        by_month = Counter(c.claim_date.strftime("%Y-%m") for c in claims if c.claim_date)
        resolved = [c for c in claims if c.status in RESOLVED_CLAIM_STATUSES]

        total_cost = sum((_to_decimal(c.actual_repair_cost) for c in resolved), Decimal("0"))
        total_deductibles = sum((_to_decimal(c.deductible_collected) for c in claims), Decimal("0"))

        scores = [c.customer_satisfaction_score for c in resolved if c.customer_satisfaction_score]

        return {
            "period": {
                "from": date_from.isoformat() if date_from else "all",
                "to": date_to.isoformat() if date_to else "all",
            },
            "total": len(claims),
            "by_status": _tally(c.status for c in claims),
            "by_issue_type": _tally(c.issue_type for c in claims),
            "by_issue_category": dict(Counter(c.issue_category or "unspecified" for c in claims)),
            "by_month": dict(sorted(by_month.items())),
            "by_product_id": _tally(c.product_id for c in claims),
            "financials": {
                "total_repair_cost": _money(total_cost),
                "total_deductibles_collected": _money(total_deductibles),
                "avg_repair_cost": _money(total_cost / len(resolved)) if resolved else _money(0),
                "net_claim_cost": _money(total_cost - total_deductibles),
            },
            "satisfaction": {
                "avg_score": _one_decimal(sum(scores) / len(scores)) if scores else None,
                "response_count": len(scores),
            },
        }

    # ==================== WARRANTIES ====================

    async def warranty_expiration(self, days: Optional[int] = None) -> Dict[str, Any]:
        """Active warranties expiring within the look-ahead window, soonest first."""
        days = days or settings.EXPIRATION_FORECAST_DAYS
        today = date.today()

        async with self.store.read_consistent():
            expiring = await self._expiring_warranties(days)
            rows = []
            for warranty in expiring:
                customer = await self.store.get(Customer, warranty.customer_id)
                product = await self.store.get(Product, warranty.product_id)
                rows.append({
                    "warranty_id": warranty.warranty_id,
                    "warranty_type": warranty.warranty_type,
                    "coverage_end_date": warranty.coverage_end_date,
                    "days_until_expiration": (warranty.coverage_end_date - today).days,
                    "customer_name": customer.full_name if customer else "Unknown",
                    "customer_email": customer.email if customer else "",
                    "product_name": product.name if product else "Unknown",
                    "product_category": product.category if product else "",
                })

        rows.sort(key=lambda r: r["days_until_expiration"])
        return {"look_ahead_days": days, "count": len(rows), "data": rows}

    # ==================== SERVICE NETWORK ====================

    async def service_center_performance(self) -> List[Dict[str, Any]]:
        """KPIs per active service center."""
        async with self.store.read_consistent():
            centers = await self.store.list(ServiceCenter, ServiceCenter.active.is_(True))
            performance = []
            for center in centers:
                center_id = center.service_center_id
                orders = await self.store.list(RepairOrder, RepairOrder.service_center_id == center_id)
                technicians = await self.store.list(Technician, Technician.service_center_id == center_id)

                completed = [o for o in orders if o.status == RepairOrderStatus.COMPLETED.value]
                dated = [o for o in completed if o.scheduled_date and o.completion_date]
                lag_days = sum(max(0, (o.completion_date - o.scheduled_date).days) for o in dated)
                revenue = sum((_to_decimal(o.total_cost) for o in completed), Decimal("0"))

                performance.append({
                    "service_center_id": center_id,
                    "name": center.name,
                    "state": center.state,
                    "rating": center.rating,
                    "total_orders": len(orders),
                    "completed_orders": len(completed),
                    "active_orders": len([o for o in orders if o.is_open]),
                    "avg_completion_days": _one_decimal(lag_days / max(1, len(dated))),
                    "total_revenue": _money(revenue),
                    "technician_count": len(technicians),
                    "available_technicians": len([t for t in technicians if t.available]),
                })

        return performance

    # ==================== REPLACEMENT ====================

    async def replacement_candidates(self) -> List[Dict[str, Any]]:
        """
        Open claims where repair cost approaches the replacement threshold.

        ratio = (estimated_repair_cost or product.average_repair_cost)
                / (warranty.purchase_price or product.msrp)

        A claim is a candidate when ratio >= product.replacement_cost_threshold;
        the recommendation is "replace" from REPLACE_RECOMMENDATION_RATIO up,
        otherwise "evaluate". Claims with no usable purchase price are skipped.
        """
        replace_ratio = Decimal(str(settings.REPLACE_RECOMMENDATION_RATIO))

        async with self.store.read_consistent():
            claims = await self.store.list(
                Claim, Claim.status.in_([s.value for s in OPEN_CLAIM_STATUSES])
            )
            candidates = []
            for claim in claims:
                product = await self.store.get(Product, claim.product_id)
                warranty = await self.store.get(Warranty, claim.warranty_id)
                if not product or not warranty:
                    continue

                repair_estimate = _to_decimal(claim.estimated_repair_cost or product.average_repair_cost)
                purchase_price = _to_decimal(warranty.purchase_price or product.msrp)
                if purchase_price <= 0:
                    continue

                threshold = Decimal(str(
                    product.replacement_cost_threshold or settings.DEFAULT_REPLACEMENT_THRESHOLD
                ))
                ratio = repair_estimate / purchase_price
                if ratio < threshold:
                    continue

                customer = await self.store.get(Customer, claim.customer_id)
                candidates.append({
                    "claim_id": claim.claim_id,
                    "status": claim.status,
                    "customer_name": customer.full_name if customer else "Unknown",
                    "product_name": product.name,
                    "product_category": product.category,
                    "purchase_price": _money(purchase_price),
                    "repair_estimate": _money(repair_estimate),
                    "replacement_threshold_pct": int((threshold * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
                    "repair_to_purchase_ratio": int((ratio * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
                    "recommendation": "replace" if ratio >= replace_ratio else "evaluate",
                })

        return candidates

    # ==================== PRODUCTS ====================

    async def product_claim_stats(self, product_id: str) -> Dict[str, Any]:
        """Claim history for one catalog product."""
        async with self.store.read_consistent():
            product = await self.store.get(Product, product_id)
            if not product:
                raise NotFoundError.for_entity("Product", product_id)

            warranties = await self.store.list(Warranty, Warranty.product_id == product_id)
            warranty_ids = [w.warranty_id for w in warranties]
            claims = (
                await self.store.list(Claim, Claim.warranty_id.in_(warranty_ids))
                if warranty_ids else []
            )

        claim_rate = (
            _to_decimal(len(claims)) / len(warranties)
            if warranties else Decimal("0")
        ).quantize(CENT, rounding=ROUND_HALF_UP)

        return {
            "product_id": product.product_id,
            "total_warranties_registered": len(warranties),
            "total_claims": len(claims),
            "claims_by_issue_type": _tally(c.issue_type for c in claims),
            "claim_rate": float(claim_rate),
        }
