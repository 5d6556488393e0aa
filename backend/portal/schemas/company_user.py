"""Schemas for company user management.

Request bodies keep every field optional so missing values can be reported
with the portal's own 400 messages instead of a generic validation error.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from portal.security.roles import CompanyUserRole


class CompanyUserResponse(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: CompanyUserRole
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class CompanyUserEnvelope(BaseModel):
    user: CompanyUserResponse


class CompanyUserListResponse(BaseModel):
    users: list[CompanyUserResponse] = Field(default_factory=list)


class CompanyUserCreateRequest(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None


class CompanyUserUpdateRequest(BaseModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None


class MessageResponse(BaseModel):
    message: str
