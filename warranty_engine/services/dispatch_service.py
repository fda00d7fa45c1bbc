"""
Dispatch Recommendation Service

Ranks active service centers for a repair job. Read-only.

SCORE (rounded to one decimal, half-up):
    rating / 5 * 40                      # up to 40 points for rating
  + 30 / max(avg_response_days, 1)       # response time, 0-day treated as 1
  + 30 if any technician is available    # flat availability bonus
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warranty_engine.config import settings
from warranty_engine.models.service_center import ServiceCenter
from warranty_engine.models.technician import Technician
from warranty_engine.schemas.dispatch import DispatchCandidate, DispatchQuery
from warranty_engine.services.entity_store import EntityStore

logger = logging.getLogger(__name__)


RATING_WEIGHT = Decimal("40")
RESPONSE_WEIGHT = Decimal("30")
AVAILABILITY_BONUS = Decimal("30")


def dispatch_score(rating, avg_response_days, available_technicians: int) -> float:
    """
    Weighted dispatch score for one center.

    Examples:
        >>> dispatch_score(5, 2, 1)
        85.0
        >>> dispatch_score(5, 2, 0)
        55.0
    """
    rating = Decimal(str(rating or 0))
    response_days = max(Decimal(str(avg_response_days or 0)), Decimal("1"))

    score = rating / Decimal("5") * RATING_WEIGHT + RESPONSE_WEIGHT / response_days
    if available_technicians > 0:
        score += AVAILABILITY_BONUS

    return float(score.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class DispatchService:
    """Service-center recommendation for repair dispatch."""

    def __init__(self, db: AsyncSession, store: Optional[EntityStore] = None):
        self.db = db
        self.store = store or EntityStore(db)

    async def _available_technician_counts(self) -> Dict[str, int]:
        result = await self.db.execute(
            select(Technician.service_center_id, func.count())
            .where(Technician.available.is_(True))
            .group_by(Technician.service_center_id)
        )
        return {center_id: count for center_id, count in result.all()}

    @staticmethod
    def _matches(center: ServiceCenter, query: DispatchQuery) -> bool:
        if query.product_category not in (center.specializations or []):
            return False
        if query.brand and query.brand not in (center.brands or []):
            return False
        if query.state and center.state != query.state:
            return False
        return True

    async def recommend(self, query: DispatchQuery) -> List[DispatchCandidate]:
        """
        Rank matching active centers by dispatch score, best first.

        Ties keep identifier order. Raises InvalidInputError when
        product_category is missing.
        """
        query = DispatchQuery.coerce(query)
        limit = query.limit or settings.DISPATCH_RESULT_LIMIT

        centers = await self.store.list(ServiceCenter, ServiceCenter.active.is_(True))
        available = await self._available_technician_counts()

        candidates = []
        for center in centers:
            if not self._matches(center, query):
                continue
            technicians = available.get(center.service_center_id, 0)
            candidates.append(DispatchCandidate(
                service_center_id=center.service_center_id,
                name=center.name,
                state=center.state,
                specializations=center.specializations or [],
                brands=center.brands or [],
                rating=center.rating or 0,
                avg_response_days=center.avg_response_days or 0,
                labor_rate=float(center.labor_rate) if center.labor_rate is not None else None,
                available_technicians=technicians,
                dispatch_score=dispatch_score(center.rating, center.avg_response_days, technicians),
            ))

        # sorted() is stable, so equal scores keep identifier order
        ranked = sorted(candidates, key=lambda c: c.dispatch_score, reverse=True)

        logger.info(
            f"Dispatch for category={query.product_category} brand={query.brand} "
            f"state={query.state}: {len(ranked)} candidates"
        )
        return ranked[:limit]
