"""Anthropic Client — wraps AsyncAnthropic with a timeout and error mapping.

Invariants:
    - Exactly one HTTP attempt per create_message() (SDK retries disabled)
    - All failures mapped to ProviderError (core/errors.py) with an api_error_type
    - Successful calls log token usage

Design Decisions:
    - Wrapper over raw client: isolates SDK exception types from the interpreter
    - No retry/backoff: a failed utterance is retried by the user, not by the core,
      so one message never produces more than two provider round-trips
"""

import logging

import anthropic
from anthropic import (
    APIError,
    APIConnectionError,
    APIStatusError,
    RateLimitError,
    APITimeoutError,
)

from taskpilot.core.errors import ProviderError, ErrorContext

logger = logging.getLogger(__name__)


class ResilientAnthropicClient:
    """Wraps Anthropic client with a timeout and error mapping."""

    def __init__(self, api_key: str, timeout_seconds: float = 30):
        self.client = anthropic.AsyncAnthropic(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=0,
        )

    async def create_message(
        self,
        *,
        model: str,
        max_tokens: int,
        system: str | list[dict],
        tools: list,
        messages: list,
        tool_choice: dict | None = None,
        context: ErrorContext | None = None,
    ):
        """Single Messages API call; tool_choice defaults to automatic selection."""
        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                system=system,
                tools=tools,
                tool_choice=tool_choice or {"type": "auto"},
                messages=messages,
            )
        except APITimeoutError:
            raise ProviderError("API timeout", "timeout", context=context)
        except RateLimitError as e:
            raise ProviderError(
                "Rate limit exceeded", "rate_limit",
                retry_after_ms=self._extract_retry_after(e),
                context=context,
            )
        except APIConnectionError as e:
            raise ProviderError(str(e), "connection_error", context=context)
        except APIStatusError as e:
            error_type = "server_error" if e.status_code >= 500 else "client_error"
            raise ProviderError(str(e), error_type, context=context)
        except APIError as e:
            raise ProviderError(str(e), "unknown", context=context)

        self._log_success(response)
        return response

    def _log_success(self, response) -> None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return
        logger.info(
            "Anthropic API success",
            extra={
                "input_tokens": usage.input_tokens,
                "output_tokens": usage.output_tokens,
            },
        )

    def _extract_retry_after(self, error: RateLimitError) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        try:
            if hasattr(error, "response") and error.response:
                val = error.response.headers.get("retry-after")
                if val:
                    return int(val) * 1000
        except (AttributeError, ValueError):
            pass
        return None
