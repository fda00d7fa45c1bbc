"""Product catalog model."""
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Boolean, Integer, Float
from sqlalchemy.orm import Mapped, mapped_column

from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import JSONType, MoneyType


class Product(Base, TimestampMixin):
    """
    Catalog entry.

    replacement_cost_threshold and max_claims_per_year are policy parameters
    read by coverage verification and the replacement-candidate report.
    """
    __tablename__ = "products"

    id_template = "PRD-001"

    product_id: Mapped[str] = mapped_column(String(20), primary_key=True)

    sku: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    brand: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    model_number: Mapped[str] = mapped_column(String(100), nullable=False)
    msrp: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))

    # Manufacturer warranty terms (months)
    standard_warranty_months: Mapped[int] = mapped_column(Integer, default=12)
    parts_warranty_months: Mapped[int] = mapped_column(Integer, default=12)
    labor_warranty_months: Mapped[int] = mapped_column(Integer, default=12)

    # Policy parameters
    replacement_cost_threshold: Mapped[float] = mapped_column(Float, default=0.70)
    max_claims_per_year: Mapped[int] = mapped_column(Integer, default=2)

    common_failures: Mapped[Optional[list]] = mapped_column(JSONType)
    average_repair_cost: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"))

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Product {self.product_id}: {self.name}>"
