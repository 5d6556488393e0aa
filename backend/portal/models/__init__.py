"""SQLAlchemy models package.

All ORM classes are imported here so relationship strings resolve no matter
which module the application imports first.
"""

from portal.models import (  # noqa: F401
    company_user,
    country,
    training_company,
)
