"""Company user: a login belonging to a training company, with a role.

Users are never hard-deleted; deactivation flips `is_active`.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core.base import Base, IntPrimaryKeyMixin, TimestampMixin
from portal.security.roles import DEFAULT_ROLE, CompanyUserRole


class CompanyUser(IntPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "company_users"

    company_id: Mapped[int] = mapped_column(
        ForeignKey("training_companies.id"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)

    role: Mapped[CompanyUserRole] = mapped_column(
        Enum(CompanyUserRole, name="company_user_role"),
        nullable=False,
        default=DEFAULT_ROLE,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    company = relationship("TrainingCompany", back_populates="users")
