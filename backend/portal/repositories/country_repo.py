"""Country repository."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from sqlalchemy import Select, select

from portal.models.country import Country
from portal.repositories.base import BaseRepository


@dataclass(frozen=True, slots=True)
class CountryDTO:
    id: int
    name: str
    code: str
    phone_code: Optional[str]


class CountryRepository(BaseRepository[Country]):
    async def list_countries(self) -> Sequence[CountryDTO]:
        """All countries by plain name order; display order is applied by the caller."""
        stmt: Select = select(Country).order_by(Country.name.asc(), Country.id.asc())
        rows = (await self._execute(stmt)).scalars().all()
        return [CountryDTO(id=r.id, name=r.name, code=r.code, phone_code=r.phone_code) for r in rows]

    async def get_country(self, country_id: int) -> Optional[CountryDTO]:
        stmt: Select = select(Country).where(Country.id == country_id)
        r = (await self._execute(stmt)).scalars().first()
        if r is None:
            return None
        return CountryDTO(id=r.id, name=r.name, code=r.code, phone_code=r.phone_code)
