"""Tool Dispatch — explicit routing from operation name to handler, with a total error boundary.

Invariants:
    - Every operation->handler mapping is visible — no getattr magic, no auto-discovery
    - Names outside the function catalog return UNKNOWN_OPERATION (no handler, no store call)
    - Per call: RECEIVED -> validate -> authorize -> execute -> DispatchResult
    - execute() NEVER raises: validation, authorization, not-found, store failures and
      timeouts all become DispatchResult(success=False, message=<localized text>)
    - Every dispatch logged with operation name and outcome code

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Schema check here, semantic checks (time format, admin flag) in handlers:
      the catalog drives generic checks, handlers own operation rules
    - asyncio.wait_for bounds each dispatch; a timeout is treated like a store error
"""

import asyncio
import logging
from typing import Any

from taskpilot.core import language_strings as strings
from taskpilot.core.domain_types import DispatchResult, OperationName
from taskpilot.core.enforce_arguments import check_against_schema
from taskpilot.core.errors import (
    ErrorContext, OperationValidationError, StoreError, TaskPilotError,
    UnknownOperationError,
)
from taskpilot.core.repository_protocols import EntityStore
from taskpilot.services.handle_assignment import AssignmentHandlers
from taskpilot.services.handle_task import TaskHandlers
from taskpilot.services.tools_registry import get_tool_schema

logger = logging.getLogger(__name__)

DEFAULT_DISPATCH_TIMEOUT_SECONDS = 15.0


class ToolDispatch:
    """Routes operation name -> handler. Explicit registration, no auto-discovery."""

    def __init__(
        self, store: EntityStore,
        timeout_seconds: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS,
    ):
        self.timeout_seconds = timeout_seconds
        tasks = TaskHandlers(store)
        assignments = AssignmentHandlers(store)

        # Adding an operation requires editing this dict
        self._handlers = {
            OperationName.UPDATE_TASK_TIME.value: tasks.update_task_time,
            OperationName.UPDATE_TASK_INFO.value: tasks.update_task_info,
            OperationName.MANAGE_APARTMENT_ASSIGNMENTS.value:
                assignments.manage_apartment_assignments,
            OperationName.SHOW_USER_APARTMENTS.value:
                assignments.show_user_apartments,
        }

    async def execute(self, name: str, arguments: Any) -> DispatchResult:
        """Validate, authorize and run one operation. Never raises."""
        ctx = ErrorContext(operation=name)
        try:
            result = await self._execute(name, arguments, ctx)
        except TaskPilotError as e:
            self._log_failure(name, e)
            return DispatchResult(False, e.user_message)
        except asyncio.TimeoutError:
            error = StoreError(
                f"timed out after {self.timeout_seconds}s", "dispatch", ctx,
            )
            self._log_failure(name, error)
            return DispatchResult(False, error.user_message)
        except Exception as e:
            logger.error(
                "Unexpected error dispatching '%s': %s", name, e,
                extra={"operation": name, "error_code": "STORE_ERROR"},
                exc_info=True,
            )
            return DispatchResult(False, StoreError(str(e), "dispatch", ctx).user_message)

        logger.info(
            "Dispatched '%s' (success=%s)", name, result.success,
            extra={"operation": name},
        )
        return result

    async def _execute(
        self, name: str, arguments: Any, ctx: ErrorContext,
    ) -> DispatchResult:
        handler = self._handlers.get(name)
        schema = get_tool_schema(name)
        if handler is None or schema is None:
            raise UnknownOperationError(name, ctx)
        if not isinstance(arguments, dict):
            raise OperationValidationError(
                f"Arguments for {name} must be an object", "arguments",
                strings.INVALID_ARGUMENT.format(field="arguments", value=arguments),
                context=ctx,
            )
        check_against_schema(name, schema, arguments)
        return await asyncio.wait_for(handler(arguments), self.timeout_seconds)

    def _log_failure(self, name: str, error: TaskPilotError) -> None:
        log = logger.error if error.http_status >= 500 else logger.warning
        log(
            "Dispatch of '%s' failed: %s", name, error.message,
            extra={"operation": name, "error_code": error.code},
            exc_info=error,
        )
