from warranty_engine.schemas.base import BaseCommand, BaseResponseSchema
from warranty_engine.schemas.coverage import VerifyCoverageRequest, WarrantySummary, CoverageResult
from warranty_engine.schemas.claim import (
    FileClaimCommand, ApproveClaimCommand, DenyClaimCommand, CloseClaimCommand,
    ClaimListFilter, ClaimResponse, ClaimFilingResult,
)
from warranty_engine.schemas.repair_order import (
    PartUsed, CreateRepairOrderCommand, CompleteRepairOrderCommand,
    CancelRepairOrderCommand, RepairOrderListFilter,
)
from warranty_engine.schemas.dispatch import DispatchQuery, DispatchCandidate
from warranty_engine.schemas.warranty import (
    RegisterWarrantyCommand, CancelWarrantyCommand, WarrantyListFilter,
)
from warranty_engine.schemas.registration import (
    CustomerCreate, ProductCreate, ServiceCenterCreate, TechnicianCreate,
)
