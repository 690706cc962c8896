"""ORM Models — SQLAlchemy declarative models for the entity store.

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all/autogenerate
"""

from taskpilot.models.task import Task  # noqa: F401
from taskpilot.models.assignment import Assignment  # noqa: F401
from taskpilot.models.user import User  # noqa: F401
