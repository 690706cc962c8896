"""Tool Dispatch — tests for explicit operation routing and the total error boundary.

Tests cover:
    - Unknown names return the UNKNOWN_OPERATION text without touching the store
    - All 4 operations are registered
    - update_task_time: HH:00 validation, single-field patch, audit stamp, missing task
    - update_task_info: partial patches, nothing-to-update, numeric coercion
    - Task changes limited to admins and cleaners assigned to the apartment
    - manage_apartment_assignments: admin gate, create-on-add, idempotent add/remove
    - show_user_apartments: admin gate, listing, empty, unknown user
    - Store failures and timeouts become success=false results (never raise)
"""

import asyncio

import pytest

from taskpilot.core import language_strings as strings
from taskpilot.core.errors import StoreError
from taskpilot.services.tool_dispatch import ToolDispatch

from tests.services.fake_store import CHECKIN_TASK_ID, CHECKOUT_TASK_ID


def _time_args(new_time, change_type="checkout", task_id=CHECKOUT_TASK_ID):
    return {
        "taskId": task_id, "newTime": new_time,
        "changeType": change_type, "userId": "100",
    }


def _assign_args(action, apartment_ids, target="@ivan_cleaner", is_admin=True):
    return {
        "targetUserId": target, "action": action,
        "apartmentIds": apartment_ids, "isAdmin": is_admin,
    }


# -- Routing -------------------------------------------------------------------


async def test_unknown_operation_returns_failure_without_store_call(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("delete_everything", {"all": True})
    assert result.success is False
    assert result.message == strings.UNKNOWN_OPERATION
    assert store.calls == []


async def test_all_four_operations_registered(store):
    dispatch = ToolDispatch(store)
    assert set(dispatch._handlers) == {
        "update_task_time", "update_task_info",
        "manage_apartment_assignments", "show_user_apartments",
    }


async def test_non_dict_arguments_rejected(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", ["12:00"])
    assert result.success is False
    assert store.calls == []


async def test_missing_required_argument_rejected(store):
    dispatch = ToolDispatch(store)
    args = _time_args("12:00")
    del args["taskId"]
    result = await dispatch.execute("update_task_time", args)
    assert result.success is False
    assert "taskId" in result.message
    assert store.calls == []


async def test_enum_violation_rejected(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "update_task_time", _time_args("12:00", change_type="lunch"),
    )
    assert result.success is False
    assert store.calls == []


# -- update_task_time ----------------------------------------------------------


@pytest.mark.parametrize("bad_time", [
    "12:30", "24:00", "9:00", "12", "noon", "", "12:00 ", "1200",
])
async def test_invalid_time_rejected_before_store(store, bad_time):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", _time_args(bad_time))
    assert result.success is False
    assert store.write_calls == []
    assert store.calls == []


async def test_checkout_scenario_patches_only_checkout_time(store):
    """"Змініть виїзд 562 на 12:00" resolved to checkout/12:00."""
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", _time_args("12:00"))

    assert result.success is True
    assert "виїзд" in result.message
    assert "12:00" in result.message

    [(name, (task_id, patch))] = store.write_calls
    assert name == "update_task"
    assert task_id == CHECKOUT_TASK_ID
    assert patch["checkout_time"] == "12:00"
    assert "checkin_time" not in patch
    assert patch["updated_by"] == "100"
    assert "updated_at" in patch
    assert store.tasks[CHECKOUT_TASK_ID]["checkin_time"] is None


async def test_checkin_patches_only_checkin_time(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "update_task_time",
        _time_args("16:00", change_type="checkin", task_id=CHECKIN_TASK_ID),
    )
    assert result.success is True
    assert "заїзд" in result.message
    [(_, (_, patch))] = store.write_calls
    assert patch["checkin_time"] == "16:00"
    assert "checkout_time" not in patch


@pytest.mark.parametrize("good_time", ["00:00", "09:00", "19:00", "23:00"])
async def test_boundary_hours_accepted(store, good_time):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", _time_args(good_time))
    assert result.success is True


async def test_missing_task_returns_not_found(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "update_task_time", _time_args("12:00", task_id="nope"),
    )
    assert result.success is False
    assert "nope" in result.message
    assert store.write_calls == []


# -- update_task_info ----------------------------------------------------------


async def test_nothing_to_update_performs_no_write(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "update_task_info", {"taskId": CHECKOUT_TASK_ID, "userId": "100"},
    )
    assert result.success is False
    assert result.message == strings.NOTHING_TO_UPDATE
    assert store.calls == []


async def test_explicit_nulls_count_as_absent(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_info", {
        "taskId": CHECKOUT_TASK_ID, "userId": "100",
        "newSumToCollect": None, "newKeysCount": None,
    })
    assert result.success is False
    assert store.write_calls == []


async def test_sum_only_patches_sum(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_info", {
        "taskId": CHECKOUT_TASK_ID, "userId": "100", "newSumToCollect": 300,
    })
    assert result.success is True
    assert "300" in result.message
    [(_, (_, patch))] = store.write_calls
    assert patch["sum_to_collect"] == 300
    assert "keys_count" not in patch


async def test_both_fields_patched_and_described_in_order(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_info", {
        "taskId": CHECKOUT_TASK_ID, "userId": "100",
        "newSumToCollect": 300.0, "newKeysCount": 2,
    })
    assert result.success is True
    assert result.message == (
        "Оновлено: сума до оплати - 300 грн, кількість ключів - 2"
    )
    [(_, (_, patch))] = store.write_calls
    assert patch["sum_to_collect"] == 300
    assert patch["keys_count"] == 2


async def test_non_numeric_sum_rejected(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_info", {
        "taskId": CHECKOUT_TASK_ID, "userId": "100", "newSumToCollect": "lots",
    })
    assert result.success is False
    assert store.calls == []


# -- task permissions ----------------------------------------------------------


def _assign(store, user_id, apartment_ids):
    store.assignments[user_id] = {
        "id": f"as-{user_id}", "user_id": user_id, "apartment_ids": apartment_ids,
    }


async def test_unassigned_cleaner_cannot_change_task(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_info", {
        "taskId": CHECKOUT_TASK_ID, "userId": "300", "newSumToCollect": 9999,
    })
    assert result.success is False
    assert result.message == strings.TASK_NOT_PERMITTED
    assert store.write_calls == []
    assert store.tasks[CHECKOUT_TASK_ID]["sum_to_collect"] == 0


async def test_cleaner_assigned_elsewhere_cannot_change_time(store):
    _assign(store, "300", ["101"])
    dispatch = ToolDispatch(store)
    args = _time_args("12:00")
    args["userId"] = "300"
    result = await dispatch.execute("update_task_time", args)
    assert result.success is False
    assert result.message == strings.TASK_NOT_PERMITTED
    assert store.write_calls == []


async def test_assigned_cleaner_can_change_task(store):
    _assign(store, "200", ["321", "562"])
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_info", {
        "taskId": CHECKOUT_TASK_ID, "userId": "200", "newKeysCount": 2,
    })
    assert result.success is True
    [(_, (_, patch))] = store.write_calls
    assert patch["keys_count"] == 2
    assert patch["updated_by"] == "200"


async def test_admin_needs_no_assignment(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", _time_args("10:00"))
    assert result.success is True
    assert ("get_assignment", ("100",)) not in store.calls


async def test_unknown_caller_cannot_change_task(store):
    dispatch = ToolDispatch(store)
    args = _time_args("12:00")
    args["userId"] = "999"
    result = await dispatch.execute("update_task_time", args)
    assert result.success is False
    assert result.message == strings.CALLER_NOT_FOUND
    assert store.write_calls == []


# -- manage_apartment_assignments ----------------------------------------------


async def test_non_admin_cannot_manage_assignments(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "manage_apartment_assignments",
        _assign_args("add", ["562"], is_admin=False),
    )
    assert result.success is False
    assert result.message == strings.ASSIGNMENTS_ADMIN_ONLY
    assert store.calls == []


async def test_add_without_prior_assignment_creates_record(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "manage_apartment_assignments", _assign_args("add", ["562", "321"]),
    )
    assert result.success is True
    assert "562, 321" in result.message
    assert "ivan_cleaner" in result.message
    [(name, (user_id, apartment_ids))] = store.write_calls
    assert name == "create_assignment"
    assert user_id == "200"
    assert apartment_ids == ["562", "321"]


async def test_add_twice_is_idempotent(store):
    dispatch = ToolDispatch(store)
    args = _assign_args("add", ["A", "B"])
    await dispatch.execute("manage_apartment_assignments", args)
    once = list(store.assignments["200"]["apartment_ids"])
    await dispatch.execute("manage_apartment_assignments", args)
    assert store.assignments["200"]["apartment_ids"] == once == ["A", "B"]


async def test_add_merges_with_existing_ids(store):
    store.assignments["200"] = {
        "id": "as-1", "user_id": "200", "apartment_ids": ["101", "562"],
    }
    dispatch = ToolDispatch(store)
    await dispatch.execute(
        "manage_apartment_assignments", _assign_args("add", ["562", "321"]),
    )
    assert store.assignments["200"]["apartment_ids"] == ["101", "562", "321"]


async def test_remove_absent_id_leaves_set_unchanged(store):
    store.assignments["200"] = {
        "id": "as-1", "user_id": "200", "apartment_ids": ["A", "B"],
    }
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "manage_apartment_assignments", _assign_args("remove", ["Z"]),
    )
    assert result.success is True
    assert store.assignments["200"]["apartment_ids"] == ["A", "B"]


async def test_remove_without_record_is_noop_success(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "manage_apartment_assignments", _assign_args("remove", ["562"]),
    )
    assert result.success is True
    assert store.write_calls == []
    assert "200" not in store.assignments


async def test_unknown_target_user_returns_failure(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "manage_apartment_assignments",
        _assign_args("add", ["562"], target="@nobody"),
    )
    assert result.success is False
    assert "@nobody" in result.message
    assert store.write_calls == []


async def test_empty_apartment_list_rejected(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "manage_apartment_assignments", _assign_args("add", []),
    )
    assert result.success is False
    assert store.calls == []


# -- show_user_apartments ------------------------------------------------------


async def test_non_admin_cannot_show_apartments(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "show_user_apartments",
        {"targetUserId": "@ivan_cleaner", "isAdmin": False},
    )
    assert result.success is False
    assert result.message == strings.SHOW_APARTMENTS_ADMIN_ONLY
    assert store.calls == []


async def test_show_lists_apartments(store):
    store.assignments["200"] = {
        "id": "as-1", "user_id": "200", "apartment_ids": ["562", "321"],
    }
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "show_user_apartments", {"targetUserId": "200", "isAdmin": True},
    )
    assert result.success is True
    assert result.message == (
        "У користувача ivan_cleaner призначені квартири: 562, 321"
    )


async def test_show_without_apartments_uses_first_name(store):
    dispatch = ToolDispatch(store)
    result = await dispatch.execute(
        "show_user_apartments", {"targetUserId": "Марія", "isAdmin": True},
    )
    assert result.success is False
    assert result.message == strings.NO_APARTMENTS.format(user="Марія")


# -- Error boundary ------------------------------------------------------------


async def test_store_error_becomes_failure_result(store):
    store.fail_with = StoreError("connection refused", "execute")
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", _time_args("12:00"))
    assert result.success is False
    assert result.message == strings.GENERIC_FAILURE


async def test_unexpected_exception_becomes_failure_result(store):
    store.fail_with = KeyError("boom")
    dispatch = ToolDispatch(store)
    result = await dispatch.execute("update_task_time", _time_args("12:00"))
    assert result.success is False
    assert result.message == strings.GENERIC_FAILURE


async def test_slow_store_times_out(store):
    async def _hang(task_id):
        await asyncio.sleep(1)

    store.get_task = _hang
    dispatch = ToolDispatch(store, timeout_seconds=0.01)
    result = await dispatch.execute("update_task_time", _time_args("12:00"))
    assert result.success is False
    assert result.message == strings.GENERIC_FAILURE
