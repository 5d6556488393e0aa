"""Company user repository (company-scoped)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from sqlalchemy import Select, case, func, select

from portal.models.company_user import CompanyUser
from portal.repositories.base import BaseRepository
from portal.security.roles import CompanyUserRole


# ADMIN first, then EDITOR, then VIEWER.
_ROLE_RANK = case(
    (CompanyUser.role == CompanyUserRole.ADMIN, 0),
    (CompanyUser.role == CompanyUserRole.EDITOR, 1),
    (CompanyUser.role == CompanyUserRole.VIEWER, 2),
    else_=3,
)

UPDATABLE_FIELDS = frozenset({"email", "first_name", "last_name", "phone", "role", "is_active"})


@dataclass(frozen=True, slots=True)
class CompanyUserDTO:
    id: int
    company_id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str]
    role: CompanyUserRole
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime]


class CompanyUserRepository(BaseRepository[CompanyUser]):
    async def list_for_company(self, company_id: int) -> Sequence[CompanyUserDTO]:
        stmt: Select = (
            select(CompanyUser)
            .where(CompanyUser.company_id == company_id)
            .order_by(_ROLE_RANK, CompanyUser.created_at.asc(), CompanyUser.id.asc())
        )
        rows = (await self._execute(stmt)).scalars().all()
        return [_to_dto(r) for r in rows]

    async def _get_model(self, user_id: int, company_id: int) -> Optional[CompanyUser]:
        stmt: Select = select(CompanyUser).where(
            CompanyUser.id == user_id, CompanyUser.company_id == company_id
        )
        return (await self._execute(stmt)).scalars().first()

    async def get_user(self, user_id: int, company_id: int) -> Optional[CompanyUserDTO]:
        """Fetch a user only if it belongs to `company_id`."""
        m = await self._get_model(user_id, company_id)
        return _to_dto(m) if m is not None else None

    async def email_taken(self, email: str, *, exclude_id: Optional[int] = None) -> bool:
        stmt: Select = select(CompanyUser.id).where(CompanyUser.email == email)
        if exclude_id is not None:
            stmt = stmt.where(CompanyUser.id != exclude_id)
        return (await self._execute(stmt.limit(1))).first() is not None

    async def count_active_admins(self, company_id: int) -> int:
        stmt: Select = (
            select(func.count())
            .select_from(CompanyUser)
            .where(
                CompanyUser.company_id == company_id,
                CompanyUser.role == CompanyUserRole.ADMIN,
                CompanyUser.is_active.is_(True),
            )
        )
        return int((await self._execute(stmt)).scalar_one())

    async def create_user(
        self,
        *,
        company_id: int,
        email: str,
        first_name: str,
        last_name: str,
        phone: Optional[str],
        role: CompanyUserRole,
    ) -> CompanyUserDTO:
        user = CompanyUser(
            company_id=company_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=role,
            is_active=True,
        )
        return _to_dto(await self._persist(user))

    async def update_user(self, user_id: int, company_id: int, changes: Mapping[str, Any]) -> Optional[CompanyUserDTO]:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown company user fields: {sorted(unknown)}")
        m = await self._get_model(user_id, company_id)
        if m is None:
            return None
        for field, value in changes.items():
            setattr(m, field, value)
        return _to_dto(await self._persist(m))

    async def deactivate_user(self, user_id: int, company_id: int) -> bool:
        """Soft delete. Returns False if the user is not in the company."""
        return await self.update_user(user_id, company_id, {"is_active": False}) is not None


def _to_dto(m: CompanyUser) -> CompanyUserDTO:
    return CompanyUserDTO(
        id=m.id,
        company_id=m.company_id,
        email=m.email,
        first_name=m.first_name,
        last_name=m.last_name,
        phone=m.phone,
        role=m.role,
        is_active=bool(m.is_active),
        created_at=m.created_at,
        updated_at=m.updated_at,
    )
