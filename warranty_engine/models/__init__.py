# Import every model so Base.metadata knows all tables
from warranty_engine.models.customer import Customer, CustomerTier, PreferredContact
from warranty_engine.models.product import Product
from warranty_engine.models.warranty import Warranty, WarrantyStatus, DEFAULT_COVERAGE_DETAILS
from warranty_engine.models.service_center import ServiceCenter, ServiceCenterType
from warranty_engine.models.technician import Technician
from warranty_engine.models.claim import (
    Claim, ClaimStatus, ClaimPriority, IssueType,
    ISSUE_TYPE_COVERAGE_KEYS, OPEN_CLAIM_STATUSES,
)
from warranty_engine.models.repair_order import RepairOrder, RepairOrderStatus

__all__ = [
    "Customer",
    "CustomerTier",
    "PreferredContact",
    "Product",
    "Warranty",
    "WarrantyStatus",
    "DEFAULT_COVERAGE_DETAILS",
    "ServiceCenter",
    "ServiceCenterType",
    "Technician",
    "Claim",
    "ClaimStatus",
    "ClaimPriority",
    "IssueType",
    "ISSUE_TYPE_COVERAGE_KEYS",
    "OPEN_CLAIM_STATUSES",
    "RepairOrder",
    "RepairOrderStatus",
]
