from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy import String, Boolean, Date, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from warranty_engine.core.enum_utils import enum_comment
from warranty_engine.database import Base, TimestampMixin
from warranty_engine.db_types import JSONType


class CustomerTier(str, Enum):
    """Customer tier enumeration."""
    STANDARD = "standard"
    PREMIUM = "premium"
    VIP = "vip"


class PreferredContact(str, Enum):
    """Preferred contact channel."""
    EMAIL = "email"
    PHONE = "phone"
    SMS = "sms"


class Customer(Base, TimestampMixin):
    """
    Warranty holder.

    total_warranties / total_claims are maintained by warranty registration
    and claim filing, never recomputed here.
    """
    __tablename__ = "customers"

    id_template = "CUST-0001"

    customer_id: Mapped[str] = mapped_column(String(20), primary_key=True)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(30))
    address: Mapped[Optional[dict]] = mapped_column(JSONType)  # {"street", "city", "state", "zip"}
    preferred_contact: Mapped[str] = mapped_column(String(20), default=PreferredContact.EMAIL.value)

    customer_tier: Mapped[str] = mapped_column(
        String(20),
        default=CustomerTier.STANDARD.value,
        comment=enum_comment(CustomerTier),
    )
    registration_date: Mapped[date] = mapped_column(Date, default=date.today)

    # Derived counters
    total_warranties: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_claims: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Customer {self.customer_id}: {self.full_name}>"
