"""Training company profile repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from sqlalchemy import Select, select
from sqlalchemy.orm import selectinload

from portal.models.training_company import PROFILE_FIELDS, TrainingCompany
from portal.repositories.base import BaseRepository
from portal.repositories.country_repo import CountryDTO


@dataclass(frozen=True, slots=True)
class CompanyProfileDTO:
    id: int
    company_name: str
    email: str
    phone: Optional[str]
    street: Optional[str]
    house_number: Optional[str]
    zip_code: Optional[str]
    city: Optional[str]
    country: Optional[CountryDTO]
    bio: Optional[str]
    logo: Optional[str]
    website: Optional[str]
    industry: Optional[str]
    employees: Optional[str]
    company_type: Optional[str]
    tags: Optional[str]
    vat_id: Optional[str]
    iban: Optional[str]
    tax_id: Optional[str]
    billing_email: Optional[str]
    billing_notes: Optional[str]
    onboarding_status: Optional[str]
    status: Optional[str]


class TrainingCompanyRepository(BaseRepository[TrainingCompany]):
    async def _get_model(self, company_id: int) -> Optional[TrainingCompany]:
        stmt: Select = (
            select(TrainingCompany)
            .options(selectinload(TrainingCompany.country))
            .where(TrainingCompany.id == company_id)
        )
        return (await self._execute(stmt)).scalars().first()

    async def get_profile(self, company_id: int) -> Optional[CompanyProfileDTO]:
        m = await self._get_model(company_id)
        return _to_profile_dto(m) if m is not None else None

    async def update_profile(self, company_id: int, changes: Mapping[str, Any]) -> Optional[CompanyProfileDTO]:
        unknown = set(changes) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown company profile fields: {sorted(unknown)}")
        m = await self._get_model(company_id)
        if m is None:
            return None
        for field, value in changes.items():
            setattr(m, field, value)
        await self._persist(m)
        # Reload so the country relationship reflects a changed country_id.
        self._session.expire(m)
        return await self.get_profile(company_id)


def _to_profile_dto(m: TrainingCompany) -> CompanyProfileDTO:
    c = m.country
    return CompanyProfileDTO(
        id=m.id,
        company_name=m.company_name,
        email=m.email,
        phone=m.phone,
        street=m.street,
        house_number=m.house_number,
        zip_code=m.zip_code,
        city=m.city,
        country=CountryDTO(id=c.id, name=c.name, code=c.code, phone_code=c.phone_code) if c is not None else None,
        bio=m.bio,
        logo=m.logo,
        website=m.website,
        industry=m.industry,
        employees=m.employees,
        company_type=m.company_type,
        tags=m.tags,
        vat_id=m.vat_id,
        iban=m.iban,
        tax_id=m.tax_id,
        billing_email=m.billing_email,
        billing_notes=m.billing_notes,
        onboarding_status=m.onboarding_status,
        status=m.status,
    )
