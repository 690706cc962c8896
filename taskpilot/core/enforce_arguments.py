"""Argument Enforcement — pure validators and transforms applied before any store call.

Invariants:
    - All functions are pure (no IO, no async, no store access)
    - Validation failures raise OperationValidationError with a localized user_message
    - Time values accepted only as HH:00 with HH in 00..23
    - merge_apartment_ids never yields duplicates and preserves first-seen order
    - build_info_patch lists sum before keys (confirmation text follows the same order)

Design Decisions:
    - Schema check driven by the catalog's input_schema: the catalog is the single
      source of truth for both advertising and acceptance
    - Numbers normalized to int when integral: "300" and 300.0 both display as 300
"""

import math
import re
from typing import Any

from taskpilot.core import language_strings as strings
from taskpilot.core.domain_types import (
    ApartmentId, AssignmentAction, OperationName,
)
from taskpilot.core.errors import OperationValidationError

HOUR_TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):00$")

_PRIMITIVE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
}


def check_against_schema(
    operation: str, input_schema: dict, arguments: dict[str, Any],
) -> None:
    """Required params present and non-null; enums and primitive types respected."""
    properties = input_schema.get("properties", {})
    for name in input_schema.get("required", []):
        if arguments.get(name) is None:
            raise OperationValidationError(
                f"Missing required argument '{name}' for {operation}",
                name,
                strings.MISSING_ARGUMENT.format(field=name, operation=operation),
            )

    for name, prop in properties.items():
        value = arguments.get(name)
        if value is None:
            continue
        if "enum" in prop and value not in prop["enum"]:
            raise _invalid(name, value)
        declared = prop.get("type")
        if isinstance(declared, list):
            continue  # union types (number|null) are coerced by the handler
        check = _PRIMITIVE_CHECKS.get(declared)
        if check is not None and not check(value):
            raise _invalid(name, value)
        if declared == "array" and not all(
            isinstance(item, str) for item in value
        ):
            raise _invalid(name, value)


def _invalid(name: str, value: Any) -> OperationValidationError:
    return OperationValidationError(
        f"Invalid value for '{name}': {value!r}",
        name,
        strings.INVALID_ARGUMENT.format(field=name, value=value),
    )


def validate_hour_time(value: str) -> str:
    """Return value unchanged if it is a valid HH:00 time, else raise."""
    if not isinstance(value, str) or not HOUR_TIME_PATTERN.match(value):
        raise OperationValidationError(
            f"Invalid time format: {value!r}",
            "newTime",
            strings.INVALID_TIME.format(value=value),
        )
    return value


def coerce_number(value: Any, field: str) -> int | float:
    """Coerce int/float/numeric string to a finite number (int when integral)."""
    if isinstance(value, bool):
        raise _invalid_number(value, field)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip().replace(",", "."))
        except ValueError:
            raise _invalid_number(value, field)
    else:
        raise _invalid_number(value, field)

    if isinstance(number, float):
        if not math.isfinite(number):
            raise _invalid_number(value, field)
        if number.is_integer():
            return int(number)
    return number


def _invalid_number(value: Any, field: str) -> OperationValidationError:
    return OperationValidationError(
        f"Invalid number for '{field}': {value!r}",
        field,
        strings.INVALID_NUMBER.format(field=field, value=value),
    )


def build_info_patch(
    new_sum_to_collect: Any = None, new_keys_count: Any = None,
) -> dict[str, int | float]:
    """Ordered patch of the present fields; raises when both are absent."""
    patch: dict[str, int | float] = {}
    if new_sum_to_collect is not None:
        patch["sum_to_collect"] = coerce_number(new_sum_to_collect, "newSumToCollect")
    if new_keys_count is not None:
        patch["keys_count"] = coerce_number(new_keys_count, "newKeysCount")
    if not patch:
        raise OperationValidationError(
            "Neither sum nor keys count supplied",
            "newSumToCollect",
            strings.NOTHING_TO_UPDATE,
        )
    return patch


def describe_info_patch(patch: dict[str, int | float]) -> str:
    parts = []
    if "sum_to_collect" in patch:
        parts.append(strings.INFO_SUM_PART.format(value=patch["sum_to_collect"]))
    if "keys_count" in patch:
        parts.append(strings.INFO_KEYS_PART.format(value=patch["keys_count"]))
    return strings.INFO_UPDATED_PREFIX + ", ".join(parts)


def merge_apartment_ids(
    current: list[ApartmentId], requested: list[ApartmentId],
    action: AssignmentAction,
) -> list[ApartmentId]:
    """Idempotent union (add) or difference (remove), order-preserving."""
    if action == AssignmentAction.ADD:
        return list(dict.fromkeys([*current, *requested]))
    removed = set(requested)
    return list(dict.fromkeys(a for a in current if a not in removed))


def describe_user(user: dict) -> str:
    """Display name: username, else first name, else id."""
    return (
        user.get("username") or user.get("first_name") or str(user.get("id", ""))
    )


_TASK_OPERATIONS = frozenset({
    OperationName.UPDATE_TASK_TIME.value, OperationName.UPDATE_TASK_INFO.value,
})
_ADMIN_OPERATIONS = frozenset({
    OperationName.MANAGE_APARTMENT_ASSIGNMENTS.value,
    OperationName.SHOW_USER_APARTMENTS.value,
})


def bind_caller_identity(
    operation: str, arguments: Any, caller_id: str, is_admin: bool,
) -> Any:
    """Overwrite model-supplied identity with the transport-resolved caller facts."""
    if not isinstance(arguments, dict):
        return arguments
    bound = dict(arguments)
    if operation in _TASK_OPERATIONS:
        bound["userId"] = str(caller_id)
    elif operation in _ADMIN_OPERATIONS:
        bound["isAdmin"] = bool(is_admin)
    return bound
