"""Dispatch recommendation schemas."""
from pydantic import BaseModel, Field
from typing import Optional, List

from warranty_engine.schemas.base import BaseCommand


class DispatchQuery(BaseCommand):
    """Job profile used to rank service centers."""
    product_category: str = Field(..., min_length=1)
    brand: Optional[str] = None
    state: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1)


class DispatchCandidate(BaseModel):
    """A service center annotated with its dispatch score."""
    service_center_id: str
    name: str
    state: Optional[str] = None
    specializations: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    rating: float
    avg_response_days: float
    labor_rate: Optional[float] = None
    available_technicians: int
    dispatch_score: float
