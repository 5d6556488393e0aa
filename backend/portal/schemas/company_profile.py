"""Schemas for the training company profile."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from portal.schemas.country import CountryResponse
from portal.security.roles import CompanyUserRole


class CompanyProfileResponse(BaseModel):
    id: int
    company_name: str
    # Contact person: the acting company user.
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    street: Optional[str] = None
    house_number: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[CountryResponse] = None
    bio: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    employees: Optional[str] = None
    company_type: Optional[str] = None
    tags: Optional[str] = None
    vat_id: Optional[str] = None
    iban: Optional[str] = None
    tax_id: Optional[str] = None
    billing_email: Optional[str] = None
    billing_notes: Optional[str] = None
    onboarding_status: Optional[str] = None
    status: Optional[str] = None
    role: CompanyUserRole
    is_active: bool = True
    company_id: int


class CompanyProfileEnvelope(BaseModel):
    company: CompanyProfileResponse


class CompanyProfileUpdatedResponse(CompanyProfileEnvelope):
    message: str


class CompanyProfileUpdateRequest(BaseModel):
    company_name: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    zip_code: Optional[str] = None
    city: Optional[str] = None
    country_id: Optional[int] = None

    # Acting user's own contact data (optional)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    bio: Optional[str] = None
    logo: Optional[str] = None
    website: Optional[str] = None
    industry: Optional[str] = None
    employees: Optional[str] = None
    company_type: Optional[str] = None
    tags: Optional[str] = None
    vat_id: Optional[str] = None
    iban: Optional[str] = None
    tax_id: Optional[str] = None
    billing_email: Optional[str] = None
    billing_notes: Optional[str] = None
