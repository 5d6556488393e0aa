"""Account types and company-user roles."""

from __future__ import annotations

from enum import Enum
from typing import Any


class UserType(str, Enum):
    """Kind of account behind a session."""

    TRAINER = "TRAINER"
    TRAINING_COMPANY = "TRAINING_COMPANY"

    @classmethod
    def parse(cls, value: Any) -> "UserType | None":
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        try:
            return cls(str(value))
        except ValueError:
            return None


class CompanyUserRole(str, Enum):
    """Role of a user within a training company (ordered by privilege).

    NONE stands for "authenticated, nothing more" so callers never deal with a
    nullable role.
    """

    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"
    NONE = "NONE"

    @classmethod
    def parse(cls, value: Any) -> "CompanyUserRole":
        """Coerce any input to a role; unknown values are non-privileged."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        try:
            return cls(str(value))
        except ValueError:
            return cls.NONE


# Roles that may be stored on a company user record.
ASSIGNABLE_ROLES: frozenset[CompanyUserRole] = frozenset(
    {CompanyUserRole.ADMIN, CompanyUserRole.EDITOR, CompanyUserRole.VIEWER}
)

DEFAULT_ROLE = CompanyUserRole.EDITOR
