"""API v1 root router."""

from __future__ import annotations

from fastapi import APIRouter

from portal.api.v1.company_profile import router as company_profile_router
from portal.api.v1.company_users import router as company_users_router
from portal.api.v1.countries import router as countries_router
from portal.api.v1.me import router as me_router


router = APIRouter()
router.include_router(countries_router, tags=["countries"])
router.include_router(company_users_router, tags=["company-users"])
router.include_router(company_profile_router, tags=["training-company"])
router.include_router(me_router, tags=["me"])
