"""Customer, catalog and service network registration schemas."""
from pydantic import Field, EmailStr
from typing import Optional, List
from decimal import Decimal

from warranty_engine.models.customer import CustomerTier, PreferredContact
from warranty_engine.models.service_center import ServiceCenterType
from warranty_engine.schemas.base import BaseCommand


class CustomerCreate(BaseCommand):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address: Optional[dict] = None
    preferred_contact: PreferredContact = PreferredContact.EMAIL
    customer_tier: CustomerTier = CustomerTier.STANDARD
    notes: Optional[str] = ""


class ProductCreate(BaseCommand):
    sku: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    brand: str = Field(..., min_length=1)
    model_number: str = Field(..., min_length=1)
    msrp: Decimal = Field(Decimal("0"), ge=0)
    standard_warranty_months: int = 12
    parts_warranty_months: int = 12
    labor_warranty_months: int = 12
    replacement_cost_threshold: Optional[float] = Field(None, gt=0, le=1)
    max_claims_per_year: Optional[int] = Field(None, ge=1)
    common_failures: List[str] = Field(default_factory=list)
    average_repair_cost: Decimal = Field(Decimal("0"), ge=0)


class ServiceCenterCreate(BaseCommand):
    name: str = Field(..., min_length=1)
    contact_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: dict
    center_type: ServiceCenterType = ServiceCenterType.AUTHORIZED
    email: Optional[str] = ""
    specializations: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    labor_rate: Optional[Decimal] = Field(None, gt=0)
    coverage_radius: int = 50
    rating: float = Field(0, ge=0, le=5)
    avg_response_days: float = Field(0, ge=0)


class TechnicianCreate(BaseCommand):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    service_center_id: str = Field(..., min_length=1)
    employee_id: Optional[str] = ""
    phone: Optional[str] = ""
    email: Optional[str] = ""
    specializations: List[str] = Field(default_factory=list)
    certified_brands: List[str] = Field(default_factory=list)
    years_experience: int = Field(0, ge=0)
    rating: float = Field(0, ge=0, le=5)
