"""SQL Entity Store — EntityStore implementation over SQLAlchemy async sessions.

Invariants:
    - One session + at most one commit per method: single-document atomicity
    - Records leave as plain dicts (see core/repository_protocols.py for the keys)
    - Unknown patch keys are rejected (never silently written)
    - Any SQLAlchemy failure surfaces as StoreError (via DatabaseSessionManager)

Design Decisions:
    - User lookup tries id, username, first, last, then full name — first match wins;
      names are compared with str.casefold() in Python (SQLite lower() folds ASCII only)
    - Name matching loads the whole users table (tens of users per deployment)
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select

from taskpilot.core.errors import StoreError
from taskpilot.infrastructure.database import DatabaseSessionManager
from taskpilot.models.assignment import Assignment
from taskpilot.models.task import Task
from taskpilot.models.user import User

logger = logging.getLogger(__name__)

_TASK_FIELDS = (
    "id", "reservation_id", "apartment_id", "address", "type", "status",
    "guest_name", "due_date", "checkin_time", "checkout_time",
    "sum_to_collect", "keys_count", "updated_by", "updated_at",
)
_TASK_PATCHABLE = frozenset({
    "checkin_time", "checkout_time", "sum_to_collect", "keys_count",
    "status", "updated_by", "updated_at",
})
_ASSIGNMENT_PATCHABLE = frozenset({"apartment_ids", "updated_at"})


def _task_to_dict(task: Task) -> dict:
    return {name: getattr(task, name) for name in _TASK_FIELDS}


def _assignment_to_dict(assignment: Assignment) -> dict:
    return {
        "id": assignment.id,
        "user_id": assignment.user_id,
        "apartment_ids": list(assignment.apartment_ids or []),
        "created_at": assignment.created_at,
        "updated_at": assignment.updated_at,
    }


def _user_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role,
    }


def _check_patch(patch: dict[str, Any], allowed: frozenset, entity: str) -> None:
    unknown = set(patch) - allowed
    if unknown:
        raise StoreError(
            f"unpatchable {entity} fields: {sorted(unknown)}", "update",
        )


class SqlEntityStore:
    """EntityStore backed by the tasks / cleaning_assignments / users tables."""

    def __init__(self, db: DatabaseSessionManager):
        self.db = db

    async def get_task(self, task_id: str) -> dict | None:
        async with self.db.session() as session:
            task = await session.get(Task, task_id)
            return _task_to_dict(task) if task else None

    async def update_task(self, task_id: str, patch: dict[str, Any]) -> None:
        _check_patch(patch, _TASK_PATCHABLE, "task")
        async with self.db.session() as session:
            task = await session.get(Task, task_id)
            if task is None:
                raise StoreError(f"task '{task_id}' vanished", "update")
            for key, value in patch.items():
                setattr(task, key, value)
            await session.commit()

    async def get_assignment(self, user_id: str) -> dict | None:
        async with self.db.session() as session:
            result = await session.execute(
                select(Assignment).where(Assignment.user_id == user_id).limit(1),
            )
            assignment = result.scalar_one_or_none()
            return _assignment_to_dict(assignment) if assignment else None

    async def create_assignment(
        self, user_id: str, apartment_ids: list[str],
    ) -> dict:
        now = datetime.now(timezone.utc)
        async with self.db.session() as session:
            assignment = Assignment(
                user_id=user_id,
                apartment_ids=list(apartment_ids),
                created_at=now,
                updated_at=now,
            )
            session.add(assignment)
            await session.commit()
            return _assignment_to_dict(assignment)

    async def update_assignment(
        self, assignment_id: str, patch: dict[str, Any],
    ) -> None:
        _check_patch(patch, _ASSIGNMENT_PATCHABLE, "assignment")
        async with self.db.session() as session:
            assignment = await session.get(Assignment, assignment_id)
            if assignment is None:
                raise StoreError(
                    f"assignment '{assignment_id}' vanished", "update",
                )
            if "apartment_ids" in patch:
                assignment.apartment_ids = list(patch["apartment_ids"])
            assignment.updated_at = patch.get(
                "updated_at", datetime.now(timezone.utc),
            )
            await session.commit()

    async def get_user(self, user_id: str) -> dict | None:
        async with self.db.session() as session:
            user = await session.get(User, str(user_id))
            return _user_to_dict(user) if user else None

    async def find_user_by_name_or_handle(self, text: str) -> dict | None:
        query = (text or "").strip().lstrip("@").strip()
        if not query:
            return None

        async with self.db.session() as session:
            user = await session.get(User, query)
            if user is not None:
                return _user_to_dict(user)
            result = await session.execute(select(User).order_by(User.id))
            candidates = result.scalars().all()

        user = _match_user(candidates, query.casefold())
        if user is None:
            logger.info("No user matched '%s'", query)
            return None
        return _user_to_dict(user)


def _full_name(user: User) -> str:
    return " ".join(p for p in (user.first_name, user.last_name) if p)


_NAME_KEYS = (
    lambda u: u.username,
    lambda u: u.first_name,
    lambda u: u.last_name,
    _full_name,
)


def _match_user(candidates, needle: str) -> User | None:
    """First candidate whose username, first, last or full name casefolds to needle."""
    for key in _NAME_KEYS:
        for user in candidates:
            if (key(user) or "").strip().casefold() == needle:
                return user
    return None
