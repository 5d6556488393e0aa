"""Current-principal endpoints (used by the UI to show or hide affordances)."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from portal.api.deps import enforce_rate_limit
from portal.schemas.permissions import PermissionFlags, PrincipalPermissionsResponse
from portal.security.auth import Principal, get_current_principal
from portal.security.permissions import permission_summary


router = APIRouter(dependencies=[Depends(enforce_rate_limit)])


@router.get("/me/permissions", response_model=PrincipalPermissionsResponse)
async def get_my_permissions(
    principal: Principal = Depends(get_current_principal),
) -> PrincipalPermissionsResponse:
    return PrincipalPermissionsResponse(
        user_id=principal.id,
        user_type=principal.user_type,
        role=principal.role,
        company_id=principal.company_id,
        permissions=PermissionFlags(**permission_summary(principal)),
    )
