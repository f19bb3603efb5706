"""Central model registry — import all models so Alembic autodiscover works."""

from dashboard.database import Base  # noqa: F401

from dashboard.models.user import User  # noqa: F401
from dashboard.models.customer import Customer  # noqa: F401
from dashboard.models.invoice import Invoice  # noqa: F401
