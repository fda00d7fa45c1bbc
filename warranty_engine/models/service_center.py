"""Service center model for repair dispatch."""
from enum import Enum
from sqlalchemy import Column, String, Boolean, Integer, Float
from sqlalchemy.orm import relationship

from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import JSONType, MoneyType


class ServiceCenterType(str, Enum):
    """Service center type enum."""
    AUTHORIZED = "authorized"
    INDEPENDENT = "independent"
    MANUFACTURER = "manufacturer"


class ServiceCenter(Base, TimestampMixin):
    """Repair facility that receives dispatched repair orders."""

    __tablename__ = "service_centers"

    id_template = "SVC-001"

    service_center_id = Column(String(20), primary_key=True)

    # Basic Info
    name = Column(String(200), nullable=False)
    center_type = Column(String(30), default=ServiceCenterType.AUTHORIZED.value)
    contact_name = Column(String(200), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255), default="")
    address = Column(JSONType, nullable=False)  # {"street", "city", "state", "zip"}

    # Capabilities
    specializations = Column(JSONType, default=list)  # ["Refrigerators", "Washers"]
    brands = Column(JSONType, default=list)  # ["Whirlpool", "LG"]
    certifications = Column(JSONType, default=list)
    coverage_radius = Column(Integer, default=50)  # miles

    # Performance metrics (maintained by operations staff)
    rating = Column(Float, default=0)
    avg_response_days = Column(Float, default=0)
    avg_completion_days = Column(Float, default=0)

    labor_rate = Column(MoneyType)

    active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    technicians = relationship("Technician", back_populates="service_center")

    @property
    def state(self):
        """State from the address snapshot."""
        return (self.address or {}).get("state")

    def __repr__(self):
        return f"<ServiceCenter {self.service_center_id}: {self.name}>"
