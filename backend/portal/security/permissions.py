"""Company-scoped authorization decisions.

Every permission check in the portal goes through `evaluate_permission`.
Decisions are pure: no I/O, no mutation of the context, and no exceptions.
A missing context, a trainer account, or an unknown role simply denies.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Final, Mapping, Optional, Protocol

from portal.security.roles import CompanyUserRole, UserType


class PermissionKind(str, Enum):
    EDIT_COMPANY = "EDIT_COMPANY"
    MAKE_REQUESTS = "MAKE_REQUESTS"
    VIEW_DATA = "VIEW_DATA"
    MANAGE_USERS = "MANAGE_USERS"
    EDIT_OWN_PROFILE = "EDIT_OWN_PROFILE"


class UserRoleContext(Protocol):
    """Anything carrying a user type and a company role (e.g. `Principal`).

    Mappings with `user_type` / `role` keys are accepted as well.
    """

    user_type: Any
    role: Any


_ANY_ROLE: Final[frozenset[CompanyUserRole]] = frozenset(CompanyUserRole)

_GRANTS: Final[Mapping[PermissionKind, frozenset[CompanyUserRole]]] = {
    PermissionKind.EDIT_COMPANY: frozenset({CompanyUserRole.ADMIN}),
    PermissionKind.MAKE_REQUESTS: frozenset({CompanyUserRole.ADMIN, CompanyUserRole.EDITOR}),
    PermissionKind.VIEW_DATA: _ANY_ROLE,
    PermissionKind.MANAGE_USERS: frozenset({CompanyUserRole.ADMIN}),
    PermissionKind.EDIT_OWN_PROFILE: _ANY_ROLE,
}


def _context_field(context: Any, name: str) -> Any:
    """Read a context field from a mapping (decoded session data) or an object."""
    if isinstance(context, Mapping):
        return context.get(name)
    return getattr(context, name, None)


def is_company_user(context: Optional[UserRoleContext]) -> bool:
    if context is None:
        return False
    return UserType.parse(_context_field(context, "user_type")) is UserType.TRAINING_COMPANY


def evaluate_permission(context: Optional[UserRoleContext], kind: PermissionKind) -> bool:
    """Return True iff `context` is a company user whose role grants `kind`."""
    if not is_company_user(context):
        return False
    allowed = _GRANTS.get(kind)
    if allowed is None:
        return False
    return CompanyUserRole.parse(_context_field(context, "role")) in allowed


def can_edit_company(context: Optional[UserRoleContext]) -> bool:
    return evaluate_permission(context, PermissionKind.EDIT_COMPANY)


def can_make_requests(context: Optional[UserRoleContext]) -> bool:
    """Create trainings, request trainers, send inquiries."""
    return evaluate_permission(context, PermissionKind.MAKE_REQUESTS)


def can_view_data(context: Optional[UserRoleContext]) -> bool:
    return evaluate_permission(context, PermissionKind.VIEW_DATA)


def can_manage_users(context: Optional[UserRoleContext]) -> bool:
    return evaluate_permission(context, PermissionKind.MANAGE_USERS)


def can_edit_own_profile(context: Optional[UserRoleContext]) -> bool:
    return evaluate_permission(context, PermissionKind.EDIT_OWN_PROFILE)


def permission_summary(context: Optional[UserRoleContext]) -> dict[str, bool]:
    """All flags at once, keyed the way the UI consumes them."""
    return {f"can_{kind.value.lower()}": evaluate_permission(context, kind) for kind in PermissionKind}
