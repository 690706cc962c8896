"""Result Reconciler — second provider hop that narrates a dispatch result.

Invariants:
    - Appends a function-result turn to context BEFORE calling the provider
    - A further function call in the narration reply is NOT dispatched
      (one function hop per user message); a fixed notice is returned instead
    - Provider failure, timeout or empty reply: returns result.message verbatim
    - reconcile() NEVER raises; the mutation outcome never depends on narration

Design Decisions:
    - Same system prompt and catalog as the interpreter (without live facts): the
      history contains a tool_use block, which the provider validates against tools
"""

import asyncio
import json
import logging

from taskpilot.core import language_strings as strings
from taskpilot.core.conversation_context import (
    AssistantTurn, ConversationContextStore, FunctionResultTurn,
)
from taskpilot.core.domain_types import ConversationId, DispatchResult
from taskpilot.core.errors import ErrorContext, TaskPilotError
from taskpilot.core.format_messages import render_messages
from taskpilot.services.interpreter_helpers import parse_response
from taskpilot.services.intent_interpreter import AUTO_TOOL_CHOICE
from taskpilot.services.system_prompt import build_system_blocks
from taskpilot.services.tools_registry import FUNCTION_CATALOG

logger = logging.getLogger(__name__)


class ResultReconciler:
    """Turns a DispatchResult into a natural-language confirmation."""

    def __init__(
        self, client, contexts: ConversationContextStore, *,
        model: str, max_tokens: int = 1024, timeout_seconds: float = 45.0,
    ):
        self.client = client
        self.contexts = contexts
        self.model = model
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds

    async def reconcile(
        self, conversation_id: ConversationId, operation_name: str,
        result: DispatchResult, call_id: str | None = None,
    ) -> str:
        if call_id is None:
            call_id = self._find_call_id(conversation_id, operation_name)
        self.contexts.append(conversation_id, FunctionResultTurn(
            name=operation_name,
            payload=json.dumps(result.to_dict(), ensure_ascii=False),
            call_id=call_id,
        ))

        ctx = ErrorContext(conversation_id=conversation_id, operation=operation_name)
        try:
            response = await asyncio.wait_for(
                self.client.create_message(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=build_system_blocks(),
                    tools=FUNCTION_CATALOG,
                    messages=render_messages(self.contexts.get(conversation_id)),
                    tool_choice=AUTO_TOOL_CHOICE,
                    context=ctx,
                ),
                self.timeout_seconds,
            )
        except (TaskPilotError, asyncio.TimeoutError) as e:
            logger.warning(
                "Narration failed, echoing dispatch message: %s", e,
                extra={"conversation_id": conversation_id, "operation": operation_name},
            )
            return result.message
        except Exception as e:
            logger.error(
                "Unexpected error during narration: %s", e,
                extra={"conversation_id": conversation_id}, exc_info=True,
            )
            return result.message

        reply = parse_response(response)
        if reply.function_call is not None:
            logger.info(
                "Provider requested '%s' after '%s'; not dispatched",
                reply.function_call.name, operation_name,
                extra={"conversation_id": conversation_id, "operation": operation_name},
            )
            return strings.RECONCILE_EXTRA_CALL
        if not reply.text:
            return result.message

        self.contexts.append(conversation_id, AssistantTurn(text=reply.text))
        return reply.text

    def _find_call_id(
        self, conversation_id: ConversationId, operation_name: str,
    ) -> str | None:
        """Latest call ref for this operation still inside the window."""
        for turn in reversed(self.contexts.get(conversation_id)):
            call = getattr(turn, "function_call", None)
            if call is not None and call.name == operation_name:
                return call.call_id
        return None
