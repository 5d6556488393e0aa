"""Schema for the current principal's permission flags."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from portal.security.roles import CompanyUserRole, UserType


class PermissionFlags(BaseModel):
    can_edit_company: bool
    can_make_requests: bool
    can_view_data: bool
    can_manage_users: bool
    can_edit_own_profile: bool


class PrincipalPermissionsResponse(BaseModel):
    user_id: int
    user_type: UserType
    role: CompanyUserRole
    company_id: Optional[int] = None
    permissions: PermissionFlags
