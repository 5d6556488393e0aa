"""Training company profile (company data plus the acting user's contact data)."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.api.deps import enforce_rate_limit, get_db_session, require_stored_permission
from portal.repositories.company_user_repo import CompanyUserDTO, CompanyUserRepository
from portal.repositories.country_repo import CountryRepository
from portal.repositories.training_company_repo import CompanyProfileDTO, TrainingCompanyRepository
from portal.schemas.company_profile import (
    CompanyProfileEnvelope,
    CompanyProfileResponse,
    CompanyProfileUpdatedResponse,
    CompanyProfileUpdateRequest,
)
from portal.schemas.country import CountryResponse
from portal.security.auth import Principal, get_current_principal
from portal.security.permissions import PermissionKind, is_company_user


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("company_name", "street", "house_number", "zip_code", "city", "country_id")
USER_FIELDS = ("first_name", "last_name", "email", "phone")
IMAGES_PREFIX = "/api/images/"


def require_company_account(principal: Principal = Depends(get_current_principal)) -> None:
    # Trainers are authenticated but have no company profile: 403, not 401.
    if not is_company_user(principal):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Nicht autorisiert oder kein Unternehmensaccount",
        )


router = APIRouter(
    dependencies=[
        Depends(enforce_rate_limit),
        Depends(require_company_account),
    ]
)


def _logo_url(logo: Optional[str]) -> Optional[str]:
    """Stored logos may be bare file names or paths; serve them via the image route."""
    if not logo:
        return None
    if logo.startswith("http") or logo.startswith(IMAGES_PREFIX):
        return logo
    return IMAGES_PREFIX + logo.rsplit("/", 1)[-1]


def _to_response(
    profile: CompanyProfileDTO, user: Optional[CompanyUserDTO], principal: Principal
) -> CompanyProfileResponse:
    c = profile.country
    return CompanyProfileResponse(
        id=profile.id,
        company_name=profile.company_name,
        first_name=user.first_name if user else "",
        last_name=user.last_name if user else "",
        email=user.email if user else "",
        phone=(user.phone if user else None) or profile.phone or "",
        street=profile.street,
        house_number=profile.house_number,
        zip_code=profile.zip_code,
        city=profile.city,
        country=CountryResponse(id=c.id, name=c.name, code=c.code) if c is not None else None,
        bio=profile.bio,
        logo=_logo_url(profile.logo),
        website=profile.website,
        industry=profile.industry,
        employees=profile.employees,
        company_type=profile.company_type,
        tags=profile.tags,
        vat_id=profile.vat_id,
        iban=profile.iban,
        tax_id=profile.tax_id,
        billing_email=profile.billing_email,
        billing_notes=profile.billing_notes,
        onboarding_status=profile.onboarding_status,
        status=profile.status,
        role=user.role if user else principal.role,
        is_active=user.is_active if user else True,
        company_id=user.company_id if user else profile.id,
    )


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unternehmen nicht gefunden")


@router.get("/training-company/profile", response_model=CompanyProfileEnvelope)
async def get_company_profile(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_session),
) -> CompanyProfileEnvelope:
    company_id = principal.scope_company_id
    profile = await TrainingCompanyRepository(db).get_profile(company_id)
    if profile is None:
        raise _not_found()
    user = await CompanyUserRepository(db).get_user(principal.id, company_id)
    return CompanyProfileEnvelope(company=_to_response(profile, user, principal))


@router.patch("/training-company/profile", response_model=CompanyProfileUpdatedResponse)
async def update_company_profile(
    payload: CompanyProfileUpdateRequest,
    principal: Principal = Depends(require_stored_permission(PermissionKind.EDIT_COMPANY)),
    db: Session = Depends(get_db_session),
) -> CompanyProfileUpdatedResponse:
    """Only admins edit company data. Fields left out of the body stay unchanged."""
    submitted = payload.model_dump(exclude_unset=True)
    if any(not submitted.get(f) for f in REQUIRED_FIELDS):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Alle erforderlichen Felder müssen ausgefüllt werden.",
        )

    company_id = principal.scope_company_id
    users = CompanyUserRepository(db)
    companies = TrainingCompanyRepository(db)

    if await companies.get_profile(company_id) is None:
        raise _not_found()

    email = submitted.get("email")
    if email and await users.email_taken(email, exclude_id=principal.id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Diese E-Mail-Adresse ist bereits vergeben.",
        )

    if await CountryRepository(db).get_country(submitted["country_id"]) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unbekanntes Land.")

    user_changes: dict[str, Any] = {}
    for field in ("first_name", "last_name"):
        if field in submitted:
            user_changes[field] = submitted[field] or ""
    if email:
        user_changes["email"] = email
    if "phone" in submitted:
        user_changes["phone"] = submitted["phone"] or None
    if user_changes:
        await users.update_user(principal.id, company_id, user_changes)

    company_changes = {k: v for k, v in submitted.items() if k not in USER_FIELDS}
    if "phone" in submitted:
        company_changes["phone"] = submitted["phone"] or None
    profile = await companies.update_profile(company_id, company_changes)
    if profile is None:
        raise _not_found()

    logger.info("Company profile %s updated by %s", company_id, principal.id)
    user = await users.get_user(principal.id, company_id)
    return CompanyProfileUpdatedResponse(
        message="Unternehmensprofil erfolgreich aktualisiert!",
        company=_to_response(profile, user, principal),
    )
