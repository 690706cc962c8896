"""Task Handlers — update_task_time, update_task_info.

Invariants:
    - Arguments are validated BEFORE the store is touched (bad input => zero store calls)
    - Only an admin, or a caller assigned to the task's apartment, may change a task;
      anyone else gets OperationNotPermittedError and no write happens
    - update_task_time patches exactly one of checkin_time / checkout_time
    - update_task_info patches only the fields that were supplied
    - Every patch stamps updated_at and updated_by
    - A missing task surfaces as ResourceNotFoundError, never as a crash

Design Decisions:
    - Caller role and assignment are read from the store, not from arguments: userId
      is the only identity a task call carries, and the engine binds it to the caller
    - Read-then-patch against the store: the read confirms existence, the patch is a
      single-document write (no optimistic token — last writer wins)
"""

from datetime import datetime, timezone

from taskpilot.core import language_strings as strings
from taskpilot.core.domain_types import (
    ChangeType, DispatchResult, OperationName, TaskId, UserId, UserRole,
)
from taskpilot.core.enforce_arguments import (
    build_info_patch, describe_info_patch, validate_hour_time,
)
from taskpilot.core.errors import OperationNotPermittedError, ResourceNotFoundError
from taskpilot.core.repository_protocols import EntityStore


class TaskHandlers:
    """Task field mutations (2 methods)."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def update_task_time(self, input_data: dict) -> DispatchResult:
        """Set checkin or checkout time (HH:00) on a task."""
        new_time = validate_hour_time(input_data["newTime"])
        change = ChangeType(input_data["changeType"])
        task_id = TaskId(input_data["taskId"])
        user_id = UserId(str(input_data["userId"]))

        await self._require_modifiable_task(
            task_id, user_id, OperationName.UPDATE_TASK_TIME,
        )
        await self.store.update_task(task_id, {
            change.task_field: new_time, **_audit_fields(user_id),
        })
        return DispatchResult(
            True, strings.time_updated(change.value, new_time),
        )

    async def update_task_info(self, input_data: dict) -> DispatchResult:
        """Set sum to collect and/or keys count on a task."""
        patch = build_info_patch(
            input_data.get("newSumToCollect"), input_data.get("newKeysCount"),
        )
        task_id = TaskId(input_data["taskId"])
        user_id = UserId(str(input_data["userId"]))

        await self._require_modifiable_task(
            task_id, user_id, OperationName.UPDATE_TASK_INFO,
        )
        await self.store.update_task(task_id, {
            **patch, **_audit_fields(user_id),
        })
        return DispatchResult(True, describe_info_patch(patch))

    async def _require_modifiable_task(
        self, task_id: TaskId, user_id: UserId, operation: OperationName,
    ) -> dict:
        task = await self.store.get_task(task_id)
        if task is None:
            raise ResourceNotFoundError(
                "Task", task_id, strings.TASK_NOT_FOUND.format(task_id=task_id),
            )
        caller = await self.store.get_user(user_id)
        if caller is None:
            raise ResourceNotFoundError("User", user_id, strings.CALLER_NOT_FOUND)
        if caller.get("role") == UserRole.ADMIN.value:
            return task

        assignment = await self.store.get_assignment(user_id)
        assigned = (assignment or {}).get("apartment_ids") or []
        if str(task.get("apartment_id")) not in assigned:
            raise OperationNotPermittedError(
                operation.value, strings.TASK_NOT_PERMITTED,
            )
        return task


def _audit_fields(user_id: UserId) -> dict:
    return {
        "updated_at": datetime.now(timezone.utc),
        "updated_by": user_id,
    }
