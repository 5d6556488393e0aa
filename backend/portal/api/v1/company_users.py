"""Company user management.

Every query is scoped to the caller's company; a user id from another company
behaves exactly like a missing one (404). Write paths decide on the caller's
stored role, not the one in the token.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.api.deps import enforce_rate_limit, get_db_session, require_stored_permission
from portal.repositories.company_user_repo import CompanyUserDTO, CompanyUserRepository
from portal.schemas.company_user import (
    CompanyUserCreateRequest,
    CompanyUserEnvelope,
    CompanyUserListResponse,
    CompanyUserResponse,
    CompanyUserUpdateRequest,
    MessageResponse,
)
from portal.security.auth import Principal, require_permission
from portal.security.permissions import PermissionKind, can_manage_users
from portal.security.roles import ASSIGNABLE_ROLES, DEFAULT_ROLE, CompanyUserRole


logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


def _parse_user_id(raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user id.") from e


def _to_response(u: CompanyUserDTO) -> CompanyUserResponse:
    return CompanyUserResponse(
        id=u.id,
        email=u.email,
        first_name=u.first_name,
        last_name=u.last_name,
        phone=u.phone,
        role=u.role,
        is_active=u.is_active,
        created_at=u.created_at,
        updated_at=u.updated_at,
    )


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.get("/company-users", response_model=CompanyUserListResponse)
async def list_company_users(
    principal: Principal = Depends(require_permission(PermissionKind.VIEW_DATA)),
    db: Session = Depends(get_db_session),
) -> CompanyUserListResponse:
    """All users of the caller's company, admins first, then by creation time."""
    users = await CompanyUserRepository(db).list_for_company(principal.scope_company_id)
    return CompanyUserListResponse(users=[_to_response(u) for u in users])


@router.post(
    "/company-users",
    response_model=CompanyUserEnvelope,
    status_code=status.HTTP_201_CREATED,
)
async def create_company_user(
    payload: CompanyUserCreateRequest,
    principal: Principal = Depends(require_stored_permission(PermissionKind.MANAGE_USERS)),
    db: Session = Depends(get_db_session),
) -> CompanyUserEnvelope:
    if not payload.email or not payload.first_name or not payload.last_name:
        raise _bad_request("Email, first name, and last name are required")

    repo = CompanyUserRepository(db)
    if await repo.email_taken(payload.email):
        raise _bad_request("A user with this email already exists")

    role = CompanyUserRole.parse(payload.role)
    if role not in ASSIGNABLE_ROLES:
        role = DEFAULT_ROLE

    user = await repo.create_user(
        company_id=principal.scope_company_id,
        email=payload.email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone or None,
        role=role,
    )
    logger.info("Company user %s created in company %s by %s", user.id, user.company_id, principal.id)
    return CompanyUserEnvelope(user=_to_response(user))


@router.get("/company-users/{user_id}", response_model=CompanyUserEnvelope)
async def get_company_user(
    user_id: str,
    principal: Principal = Depends(require_permission(PermissionKind.VIEW_DATA)),
    db: Session = Depends(get_db_session),
) -> CompanyUserEnvelope:
    uid = _parse_user_id(user_id)
    user = await CompanyUserRepository(db).get_user(uid, principal.scope_company_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return CompanyUserEnvelope(user=_to_response(user))


@router.patch("/company-users/{user_id}", response_model=CompanyUserEnvelope)
async def update_company_user(
    user_id: str,
    payload: CompanyUserUpdateRequest,
    principal: Principal = Depends(require_stored_permission(PermissionKind.EDIT_OWN_PROFILE)),
    db: Session = Depends(get_db_session),
) -> CompanyUserEnvelope:
    """Update a profile. Role and activation can only be changed by admins."""
    uid = _parse_user_id(user_id)
    company_id = principal.scope_company_id
    repo = CompanyUserRepository(db)

    existing = await repo.get_user(uid, company_id)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    is_admin = can_manage_users(principal)
    if uid != principal.id and not is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own profile",
        )

    submitted = payload.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}

    email = submitted.get("email")
    if email is not None:
        if await repo.email_taken(email, exclude_id=uid):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Diese E-Mail-Adresse ist bereits vergeben",
            )
        changes["email"] = email
    for field in ("first_name", "last_name"):
        if submitted.get(field) is not None:
            changes[field] = submitted[field]
    if "phone" in submitted:
        changes["phone"] = submitted["phone"] or None

    if is_admin:
        role = CompanyUserRole.parse(submitted.get("role"))
        if role in ASSIGNABLE_ROLES:
            changes["role"] = role
        if submitted.get("is_active") is not None:
            changes["is_active"] = submitted["is_active"]

    loses_admin = existing.role is CompanyUserRole.ADMIN and existing.is_active and (
        changes.get("role", CompanyUserRole.ADMIN) is not CompanyUserRole.ADMIN
        or changes.get("is_active", True) is False
    )
    if loses_admin and await repo.count_active_admins(company_id) <= 1:
        raise _bad_request("Cannot remove the last admin")

    updated = await repo.update_user(uid, company_id, changes)
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return CompanyUserEnvelope(user=_to_response(updated))


@router.delete("/company-users/{user_id}", response_model=MessageResponse)
async def delete_company_user(
    user_id: str,
    principal: Principal = Depends(require_stored_permission(PermissionKind.MANAGE_USERS)),
    db: Session = Depends(get_db_session),
) -> MessageResponse:
    """Soft delete: the account is deactivated, never removed."""
    uid = _parse_user_id(user_id)
    company_id = principal.scope_company_id

    if uid == principal.id:
        raise _bad_request("Cannot delete your own account")

    repo = CompanyUserRepository(db)
    existing = await repo.get_user(uid, company_id)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    if existing.role is CompanyUserRole.ADMIN and existing.is_active:
        if await repo.count_active_admins(company_id) <= 1:
            raise _bad_request("Cannot delete the last admin")

    await repo.deactivate_user(uid, company_id)
    logger.info("Company user %s deactivated in company %s by %s", uid, company_id, principal.id)
    return MessageResponse(message="User deactivated successfully")
