"""Fake Entity Store — in-memory EntityStore that records every call.

Invariants:
    - Satisfies core/repository_protocols.EntityStore (structural typing)
    - .calls lists (method_name, args) in call order
    - .fail_with, when set, is raised by every method (store outage simulation)
"""

import copy
import uuid


class FakeEntityStore:

    def __init__(self, tasks=None, users=None, assignments=None):
        self.tasks = {t["id"]: dict(t) for t in (tasks or [])}
        self.users = [dict(u) for u in (users or [])]
        self.assignments = {a["user_id"]: dict(a) for a in (assignments or [])}
        self.calls: list[tuple[str, tuple]] = []
        self.fail_with: Exception | None = None

    def _record(self, name, *args):
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with

    @property
    def write_calls(self) -> list[tuple[str, tuple]]:
        return [
            c for c in self.calls
            if c[0] in ("update_task", "create_assignment", "update_assignment")
        ]

    async def get_task(self, task_id):
        self._record("get_task", task_id)
        task = self.tasks.get(task_id)
        return copy.deepcopy(task) if task else None

    async def update_task(self, task_id, patch):
        self._record("update_task", task_id, dict(patch))
        self.tasks[task_id].update(patch)

    async def get_user(self, user_id):
        self._record("get_user", user_id)
        for user in self.users:
            if user["id"] == str(user_id):
                return dict(user)
        return None

    async def get_assignment(self, user_id):
        self._record("get_assignment", user_id)
        assignment = self.assignments.get(user_id)
        return copy.deepcopy(assignment) if assignment else None

    async def create_assignment(self, user_id, apartment_ids):
        self._record("create_assignment", user_id, list(apartment_ids))
        record = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "apartment_ids": list(apartment_ids),
        }
        self.assignments[user_id] = record
        return copy.deepcopy(record)

    async def update_assignment(self, assignment_id, patch):
        self._record("update_assignment", assignment_id, dict(patch))
        for record in self.assignments.values():
            if record["id"] == assignment_id:
                record.update(patch)
                return

    async def find_user_by_name_or_handle(self, text):
        self._record("find_user_by_name_or_handle", text)
        query = text.lstrip("@").casefold()
        for user in self.users:
            if user["id"] == text.lstrip("@"):
                return dict(user)
        for key in ("username", "first_name", "last_name"):
            for user in self.users:
                if (user.get(key) or "").casefold() == query:
                    return dict(user)
        return None


# -- Seed data -----------------------------------------------------------------

CHECKOUT_TASK_ID = "2025-03-15_562_checkout"
CHECKIN_TASK_ID = "2025-03-15_562_checkin"


def seed_tasks():
    """Apartment 562: one checkout and one checkin task for the same guest."""
    return [
        {
            "id": CHECKOUT_TASK_ID, "apartment_id": "562", "type": "checkout",
            "address": "Baseina 12", "guest_name": "Гусак",
            "checkin_time": None, "checkout_time": "11:00",
            "sum_to_collect": 0, "keys_count": 1,
        },
        {
            "id": CHECKIN_TASK_ID, "apartment_id": "562", "type": "checkin",
            "address": "Baseina 12", "guest_name": "Гусак",
            "checkin_time": "15:00", "checkout_time": None,
            "sum_to_collect": 0, "keys_count": 1,
        },
    ]


def seed_users():
    """Admin, cleaner with a handle, cleaner known only by first name."""
    return [
        {"id": "100", "username": "admin_olena", "first_name": "Олена", "role": "admin"},
        {"id": "200", "username": "ivan_cleaner", "first_name": "Іван", "role": "cleaner"},
        {"id": "300", "username": None, "first_name": "Марія", "role": "cleaner"},
    ]
