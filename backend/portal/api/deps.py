"""API dependencies.

Request-scoped resources are handed to route functions through FastAPI's
dependency injection; nothing in a request path reaches for a module global.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Generator
from typing import Awaitable, Callable

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.core.db import DATABASE
from portal.repositories.company_user_repo import CompanyUserRepository
from portal.security.auth import AuthError, Principal, get_current_principal
from portal.security.permissions import PermissionKind, evaluate_permission, is_company_user
from portal.security.rate_limit import get_limiter


def get_db_session() -> Generator[Session, None, None]:
    """Provide a database session for request scope."""
    session: Session = DATABASE.session_factory()()
    try:
        yield session
    finally:
        session.close()


def enforce_rate_limit(principal: Principal = Depends(get_current_principal)) -> None:
    """Enforce the per-token hourly request budget."""
    get_limiter().check(principal.token_fingerprint)


async def get_acting_principal(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db_session),
) -> Principal:
    """Principal whose role is re-read from the caller's company user row.

    Token claims can be hours old; a deactivated or demoted user must lose
    their rights immediately, so write paths decide on the stored role.
    """
    if not is_company_user(principal):
        raise AuthError("Unauthorized")
    row = await CompanyUserRepository(db).get_user(principal.id, principal.scope_company_id)
    if row is None or not row.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Benutzer nicht gefunden oder inaktiv",
        )
    if row.role is principal.role:
        return principal
    return dataclasses.replace(principal, role=row.role)


def require_stored_permission(kind: PermissionKind) -> Callable[..., Awaitable[Principal]]:
    """Like `require_permission`, but decided on the stored role."""

    async def _dep(principal: Principal = Depends(get_acting_principal)) -> Principal:
        if not evaluate_permission(principal, kind):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return principal

    return _dep
