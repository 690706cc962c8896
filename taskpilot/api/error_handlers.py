"""Error Handlers — map exceptions escaping a route onto the {success, message} shape.

Invariants:
    - Every error body carries success=false and a Ukrainian message the transport can
      forward to the chat as-is, plus an "error" object for the caller's own logging
    - TaskPilotError → its http_status and to_response(); ErrorContext fields filled
      from the request path when the raiser left them empty
    - 4xx logged at WARNING, 5xx at ERROR with traceback (via exc_info)
    - RequestValidationError → 400 VALIDATION_ERROR naming the offending fields
    - Exception (catch-all) → 500 with GENERIC_FAILURE, never internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskpilot.core import language_strings as strings
from taskpilot.core.errors import ErrorCategory, ErrorSeverity, TaskPilotError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _body(message: str, error: dict) -> dict:
    return {"success": False, "message": message, "error": error}


def _conversation_id_from(request: Request) -> str | None:
    return request.path_params.get("conversation_id")


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TaskPilotError)
    async def taskpilot_error_handler(request: Request, exc: TaskPilotError):
        if exc.context.conversation_id is None:
            exc.context.conversation_id = _conversation_id_from(request)

        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            "%s on %s: %s", exc.code, request.url.path, exc.message,
            extra={"path": request.url.path, "status_code": exc.http_status},
            exc_info=exc,
        )
        response = exc.to_response()
        return JSONResponse(
            status_code=exc.http_status,
            content=_body(exc.user_message, response["error"]),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = _validation_details(exc)
        logger.warning(
            "Invalid request on %s: %s", request.url.path,
            ", ".join(d["field"] for d in details),
            extra={
                "path": request.url.path,
                "error_code": "VALIDATION_ERROR",
                "status_code": status.HTTP_400_BAD_REQUEST,
            },
        )
        message = strings.INVALID_REQUEST.format(
            fields=", ".join(d["field"] for d in details),
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_body(message, {
                "code": "VALIDATION_ERROR",
                "message": message,
                "category": ErrorCategory.VALIDATION.value,
                "severity": ErrorSeverity.WARNING.value,
                "details": details,
            }),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled %s on %s", type(exc).__name__, request.url.path,
            extra={
                "path": request.url.path,
                "conversation_id": _conversation_id_from(request),
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            },
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_body(strings.GENERIC_FAILURE, {
                "code": "INTERNAL_ERROR",
                "message": strings.GENERIC_FAILURE,
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            }),
        )


def _validation_details(exc: RequestValidationError) -> list[dict]:
    # loc starts with "body" / "path" / "query"; the caller cares about the field
    return [
        {
            "field": ".".join(str(loc) for loc in e["loc"][1:]) or str(e["loc"][0]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
