"""Boundary Protocols — contract between the dispatch core and the entity store shell.

Invariants:
    - Core NEVER imports from the shell — dependency arrows point inward only
    - Every method is atomic for the single document it touches
    - No multi-document transactions are assumed; last writer wins
    - Records cross the boundary as plain dicts with snake_case keys:
        task:       id, apartment_id, type, checkin_time, checkout_time,
                    sum_to_collect, keys_count, status, updated_by, updated_at
        assignment: id, user_id, apartment_ids, created_at, updated_at
        user:       id, username, first_name, last_name, role

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: implementations do IO; handlers await them directly
    - get_user is an exact id lookup (caller authorization); the fuzzy
      find_user_by_name_or_handle is for model-supplied targets only
"""

from typing import Any, Protocol

from taskpilot.core.domain_types import ApartmentId, TaskId, UserId


class EntityStore(Protocol):
    """Contract for task / assignment / user persistence — implemented by shell."""

    async def get_task(self, task_id: TaskId) -> dict | None: ...

    async def update_task(self, task_id: TaskId, patch: dict[str, Any]) -> None: ...

    async def get_user(self, user_id: UserId) -> dict | None: ...

    async def get_assignment(self, user_id: UserId) -> dict | None: ...

    async def create_assignment(
        self, user_id: UserId, apartment_ids: list[ApartmentId],
    ) -> dict: ...

    async def update_assignment(
        self, assignment_id: str, patch: dict[str, Any],
    ) -> None: ...

    async def find_user_by_name_or_handle(self, text: str) -> dict | None: ...
