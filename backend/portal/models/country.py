"""Country reference data (addresses, phone prefixes, country pickers)."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from portal.core.base import Base, IntPrimaryKeyMixin


class Country(IntPrimaryKeyMixin, Base):
    __tablename__ = "countries"

    # German display name, e.g. "Deutschland", "Österreich".
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    # ISO 3166-1 alpha-2
    code: Mapped[str] = mapped_column(String(2), nullable=False, unique=True)
    phone_code: Mapped[Optional[str]] = mapped_column(String(8), nullable=True)
