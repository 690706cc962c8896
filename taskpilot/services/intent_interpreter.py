"""Intent Interpreter — utterance + bounded history + live facts -> text or function call.

Invariants:
    - One provider round-trip per interpret() call, bounded by timeout_seconds
    - Function-call reply: appends user turn + assistant turn (with call ref) to context
    - Text reply: appends user turn + assistant text turn to context
    - Provider failure, timeout or empty reply: returns the fixed fallback text and
      leaves the context untouched
    - interpret() NEVER raises

Design Decisions:
    - Context written only after a usable reply: a failed turn never poisons history
    - Tools sent with tool_choice=auto: the model decides between answering and calling
"""

import asyncio
import logging
from dataclasses import dataclass

from taskpilot.core import language_strings as strings
from taskpilot.core.conversation_context import (
    AssistantTurn, ConversationContextStore, FunctionCallRef, UserTurn,
)
from taskpilot.core.domain_types import ConversationId, SituationalFacts
from taskpilot.core.errors import ErrorContext, TaskPilotError
from taskpilot.core.format_messages import render_messages
from taskpilot.services.interpreter_helpers import parse_response
from taskpilot.services.system_prompt import build_system_blocks
from taskpilot.services.tools_registry import FUNCTION_CATALOG

logger = logging.getLogger(__name__)

AUTO_TOOL_CHOICE = {"type": "auto"}


@dataclass(frozen=True)
class InterpretResult:
    """Either a narrative reply (text) or a structured function call."""
    text: str | None = None
    function_call: FunctionCallRef | None = None

    @property
    def is_function_call(self) -> bool:
        return self.function_call is not None


class IntentInterpreter:
    """First provider hop: decides what the user wants."""

    def __init__(
        self, client, contexts: ConversationContextStore, *,
        model: str, max_tokens: int = 1024, timeout_seconds: float = 45.0,
    ):
        self.client = client
        self.contexts = contexts
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def interpret(
        self, utterance: str, conversation_id: ConversationId,
        facts: SituationalFacts,
    ) -> InterpretResult:
        ctx = ErrorContext(conversation_id=conversation_id)
        messages = render_messages(self.contexts.get(conversation_id), utterance)
        try:
            response = await asyncio.wait_for(
                self.client.create_message(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=build_system_blocks(facts),
                    tools=FUNCTION_CATALOG,
                    messages=messages,
                    tool_choice=AUTO_TOOL_CHOICE,
                    context=ctx,
                ),
                self.timeout_seconds,
            )
        except TaskPilotError as e:
            logger.warning(
                "Interpretation failed: %s", e.message,
                extra={"conversation_id": conversation_id, "error_code": e.code},
                exc_info=e,
            )
            return InterpretResult(text=strings.INTERPRET_FALLBACK)
        except asyncio.TimeoutError:
            logger.warning(
                "Interpretation timed out after %ss", self.timeout_seconds,
                extra={"conversation_id": conversation_id, "error_code": "PROVIDER_ERROR"},
            )
            return InterpretResult(text=strings.INTERPRET_FALLBACK)
        except Exception as e:
            logger.error(
                "Unexpected error during interpretation: %s", e,
                extra={"conversation_id": conversation_id}, exc_info=True,
            )
            return InterpretResult(text=strings.INTERPRET_FALLBACK)

        reply = parse_response(response)
        if reply.function_call is not None:
            self.contexts.extend(conversation_id, [
                UserTurn(utterance),
                AssistantTurn(
                    text=reply.text or None, function_call=reply.function_call,
                ),
            ])
            logger.info(
                "Interpreted as function call '%s'", reply.function_call.name,
                extra={
                    "conversation_id": conversation_id,
                    "operation": reply.function_call.name,
                },
            )
            return InterpretResult(function_call=reply.function_call)

        if not reply.text:
            logger.warning(
                "Provider returned an empty reply",
                extra={"conversation_id": conversation_id},
            )
            return InterpretResult(text=strings.INTERPRET_FALLBACK)

        self.contexts.extend(conversation_id, [
            UserTurn(utterance), AssistantTurn(text=reply.text),
        ])
        return InterpretResult(text=reply.text)
