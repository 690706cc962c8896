"""Assignment Handlers — manage_apartment_assignments, show_user_apartments.

Invariants:
    - Both operations are admin only: isAdmin != True fails before ANY store call
    - The target user is resolved by id, @handle or name; no match => ResourceNotFoundError
    - add/remove are idempotent set operations (see merge_apartment_ids)
    - add on a user without an assignment record creates one seeded with the ids
    - remove on a user without an assignment record is a successful no-op (no write)
    - show on a user without apartments fails with a "no apartments" message

Design Decisions:
    - remove-without-record does not create an empty record: nothing to remove,
      and an empty document would be indistinguishable from "never assigned"
"""

import logging
from datetime import datetime, timezone

from taskpilot.core import language_strings as strings
from taskpilot.core.domain_types import AssignmentAction, DispatchResult
from taskpilot.core.enforce_arguments import describe_user, merge_apartment_ids
from taskpilot.core.errors import (
    OperationNotPermittedError, OperationValidationError, ResourceNotFoundError,
)
from taskpilot.core.repository_protocols import EntityStore

logger = logging.getLogger(__name__)


class AssignmentHandlers:
    """Admin-only apartment assignment tools (2 methods)."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def manage_apartment_assignments(self, input_data: dict) -> DispatchResult:
        """Add or remove apartment ids for a user."""
        action = AssignmentAction(input_data["action"])
        requested = list(dict.fromkeys(input_data["apartmentIds"]))
        if not requested:
            raise OperationValidationError(
                "apartmentIds is empty", "apartmentIds",
                strings.MISSING_ARGUMENT.format(
                    field="apartmentIds",
                    operation="manage_apartment_assignments",
                ),
            )
        _require_admin(
            input_data, "manage_apartment_assignments",
            strings.ASSIGNMENTS_ADMIN_ONLY,
        )

        user = await self._resolve_user(input_data["targetUserId"])
        assignment = await self.store.get_assignment(user["id"])

        if assignment is None:
            if action == AssignmentAction.ADD:
                await self.store.create_assignment(
                    user["id"], merge_apartment_ids([], requested, action),
                )
            else:
                logger.info(
                    "Remove on user without assignment record — no-op",
                    extra={"operation": "manage_apartment_assignments"},
                )
        else:
            updated = merge_apartment_ids(
                assignment.get("apartment_ids") or [], requested, action,
            )
            await self.store.update_assignment(assignment["id"], {
                "apartment_ids": updated,
                "updated_at": datetime.now(timezone.utc),
            })

        return DispatchResult(True, strings.assignment_updated(
            action.value, requested, describe_user(user),
        ))

    async def show_user_apartments(self, input_data: dict) -> DispatchResult:
        """List the apartment ids assigned to a user."""
        _require_admin(
            input_data, "show_user_apartments",
            strings.SHOW_APARTMENTS_ADMIN_ONLY,
        )
        user = await self._resolve_user(input_data["targetUserId"])
        display_name = describe_user(user)

        assignment = await self.store.get_assignment(user["id"])
        apartment_ids = (assignment or {}).get("apartment_ids") or []
        if not apartment_ids:
            raise ResourceNotFoundError(
                "Assignment", user["id"],
                strings.NO_APARTMENTS.format(user=display_name),
            )
        return DispatchResult(True, strings.USER_APARTMENTS.format(
            user=display_name, apartments=", ".join(apartment_ids),
        ))

    async def _resolve_user(self, query: str) -> dict:
        user = await self.store.find_user_by_name_or_handle(query)
        if user is None:
            raise ResourceNotFoundError(
                "User", query, strings.USER_NOT_FOUND.format(query=query),
            )
        return user


def _require_admin(input_data: dict, operation: str, user_message: str) -> None:
    if input_data.get("isAdmin") is not True:
        raise OperationNotPermittedError(operation, user_message)
