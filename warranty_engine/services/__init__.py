# Services module
from warranty_engine.services.entity_store import EntityStore
from warranty_engine.services.identifier_service import IdentifierService
from warranty_engine.services.coverage_service import CoverageService
from warranty_engine.services.claim_service import ClaimService
from warranty_engine.services.repair_order_service import RepairOrderService
from warranty_engine.services.dispatch_service import DispatchService
from warranty_engine.services.report_service import ReportService

# Catalog / registration
from warranty_engine.services.warranty_service import WarrantyService
from warranty_engine.services.registration_service import RegistrationService

__all__ = [
    "EntityStore",
    "IdentifierService",
    "CoverageService",
    "ClaimService",
    "RepairOrderService",
    "DispatchService",
    "ReportService",
    # Catalog / registration
    "WarrantyService",
    "RegistrationService",
]
