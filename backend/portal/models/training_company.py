"""Training company (the tenant that owns company users).

Address fields are nullable because companies register with a name and email
first and complete the profile later; the profile endpoint enforces them on
update.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.base import Base, IntPrimaryKeyMixin, TimestampMixin


class TrainingCompany(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "training_companies"

    company_name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    # Legacy fallback when the acting user has no phone of their own.
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    # Address
    street: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    house_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    zip_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    country_id: Mapped[Optional[int]] = mapped_column(ForeignKey("countries.id"), nullable=True)

    # Public profile
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    logo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    industry: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    employees: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    company_type: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Billing
    vat_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    iban: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    tax_id: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    billing_email: Mapped[Optional[str]] = mapped_column(String(254), nullable=True)
    billing_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    onboarding_status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    status: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    country = relationship("Country")
    users = relationship("CompanyUser", back_populates="company")


# Columns the profile form may overwrite; everything else is managed elsewhere.
PROFILE_FIELDS: frozenset[str] = frozenset(
    {
        "company_name",
        "phone",
        "street",
        "house_number",
        "zip_code",
        "city",
        "country_id",
        "bio",
        "logo",
        "website",
        "industry",
        "employees",
        "company_type",
        "tags",
        "vat_id",
        "iban",
        "tax_id",
        "billing_email",
        "billing_notes",
    }
)
