"""Repository base.

Repositories are the only layer permitted to talk to the database. Reads go
through `_execute` (SELECT only, clean unit of work); writes go through
`_persist`, which commits or rolls back as one step so a request never leaves
half-applied changes in its session.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable
from sqlalchemy.sql.dml import Delete, Insert, Update
from sqlalchemy.sql.selectable import Select


class RepositoryWriteViolation(RuntimeError):
    """Raised when a read path sees pending changes or a non-SELECT statement."""


T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, session: Session) -> None:
        self._session = session

    def _assert_clean_uow(self) -> None:
        s = self._session
        if s.new or s.dirty or s.deleted:
            raise RepositoryWriteViolation(
                "Read attempted with pending changes in session "
                f"(new={len(s.new)}, dirty={len(s.dirty)}, deleted={len(s.deleted)})."
            )

    def _assert_select_only(self, stmt: Executable) -> None:
        if isinstance(stmt, (Insert, Update, Delete)):
            raise RepositoryWriteViolation("Bulk DML is not allowed; use _persist.")
        if not isinstance(stmt, Select):
            raise RepositoryWriteViolation(
                f"Only SELECT statements may be executed (got {type(stmt)!r})."
            )

    async def _execute(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Result[Any]:
        """Execute a SELECT statement."""
        self._assert_select_only(stmt)
        self._assert_clean_uow()
        return self._session.execute(stmt, params or {})

    async def _persist(self, obj: T) -> T:
        """Add `obj`, commit, and reload server-generated columns."""
        try:
            self._session.add(obj)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            raise
        self._session.refresh(obj)
        return obj
