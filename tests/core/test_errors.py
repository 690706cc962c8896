"""Error hierarchy tests — codes, categories, HTTP mapping, user messages."""

from taskpilot.core import language_strings as strings
from taskpilot.core.errors import (
    ErrorCategory, OperationNotPermittedError, OperationValidationError,
    ProviderError, ResourceNotFoundError, StoreError, UnknownOperationError,
)


def test_validation_error():
    e = OperationValidationError("bad", "newTime", "Погано")
    assert (e.code, e.http_status, e.user_message) == ("VALIDATION_ERROR", 400, "Погано")
    assert e.category == ErrorCategory.VALIDATION


def test_authorization_error():
    e = OperationNotPermittedError("show_user_apartments", "Ні")
    assert e.http_status == 403
    assert e.user_message == "Ні"


def test_not_found_error():
    e = ResourceNotFoundError("Task", "t-1", "Нема")
    assert e.http_status == 404
    assert e.code == "RESOURCE_NOT_FOUND"


def test_unknown_operation_error():
    e = UnknownOperationError("delete_everything")
    assert e.user_message == strings.UNKNOWN_OPERATION


def test_store_error_hides_details():
    e = StoreError("password=secret", "execute")
    assert e.http_status == 503
    assert e.user_message == strings.GENERIC_FAILURE
    assert "secret" not in e.to_response()["error"]["message"]


def test_provider_timeout_category():
    assert ProviderError("slow", "timeout").category == ErrorCategory.TIMEOUT
    e = ProviderError("429", "rate_limit", retry_after_ms=2000)
    assert e.category == ErrorCategory.EXTERNAL_API
    assert e.user_message == strings.INTERPRET_FALLBACK
