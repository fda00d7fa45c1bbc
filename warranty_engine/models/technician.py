"""Technician model for repair operations."""
from sqlalchemy import Column, String, Boolean, ForeignKey, Integer, Float
from sqlalchemy.orm import relationship

from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import JSONType


class Technician(Base, TimestampMixin):
    """Field technician employed by a service center."""

    __tablename__ = "technicians"

    id_template = "TECH-001"

    technician_id = Column(String(20), primary_key=True)

    service_center_id = Column(
        String(20), ForeignKey("service_centers.service_center_id"), nullable=False, index=True
    )

    # Basic Info
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    employee_id = Column(String(50), default="")
    phone = Column(String(30), default="")
    email = Column(String(255), default="")

    # Skills
    specializations = Column(JSONType, default=list)  # ["Refrigerators", "Ranges"]
    certified_brands = Column(JSONType, default=list)
    years_experience = Column(Integer, default=0)

    # Performance metrics
    rating = Column(Float, default=0)
    active_orders = Column(Integer, default=0)
    total_completed = Column(Integer, default=0)

    # Availability
    available = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    service_center = relationship("ServiceCenter", back_populates="technicians")

    @property
    def full_name(self) -> str:
        """Get full name."""
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Technician {self.technician_id}: {self.full_name}>"
