"""Command Engine — caller-facing surface: interpret -> dispatch -> reconcile.

Invariants:
    - At most two provider calls per utterance (interpret, then optionally reconcile)
    - At most one dispatch per utterance; a reconcile-time function call is never dispatched
    - Model-chosen calls run with the caller's resolved identity, not the model's claim
    - interpret_and_dispatch() always returns user-presentable text

Design Decisions:
    - dispatch() exposed separately for transports that already hold a structured
      intent (e.g. a button press) and skip interpretation entirely
    - from_settings() builds the whole graph from Settings; tests wire parts by hand
"""

import logging

from taskpilot.config import Settings
from taskpilot.core.conversation_context import ConversationContextStore
from taskpilot.core.domain_types import (
    ConversationId, DispatchResult, SituationalFacts,
)
from taskpilot.core.enforce_arguments import bind_caller_identity
from taskpilot.core.repository_protocols import EntityStore
from taskpilot.services.intent_interpreter import IntentInterpreter
from taskpilot.services.result_reconciler import ResultReconciler
from taskpilot.services.tool_dispatch import ToolDispatch

logger = logging.getLogger(__name__)


class CommandEngine:
    """Wires interpreter, dispatcher and reconciler around one context store."""

    def __init__(
        self,
        interpreter: IntentInterpreter,
        tool_dispatch: ToolDispatch,
        reconciler: ResultReconciler,
        contexts: ConversationContextStore,
    ):
        self.interpreter = interpreter
        self.tool_dispatch = tool_dispatch
        self.reconciler = reconciler
        self.contexts = contexts

    @classmethod
    def from_settings(
        cls, settings: Settings, client, store: EntityStore,
    ) -> "CommandEngine":
        contexts = ConversationContextStore(settings.context_max_turns)
        provider_kwargs = {
            "model": settings.anthropic_model,
            "max_tokens": settings.anthropic_max_tokens,
            "timeout_seconds": settings.interpreter_timeout_seconds,
        }
        return cls(
            interpreter=IntentInterpreter(client, contexts, **provider_kwargs),
            tool_dispatch=ToolDispatch(store, settings.dispatch_timeout_seconds),
            reconciler=ResultReconciler(client, contexts, **provider_kwargs),
            contexts=contexts,
        )

    async def interpret_and_dispatch(
        self, utterance: str, conversation_id: ConversationId,
        facts: SituationalFacts,
    ) -> str:
        """Full loop for one free-text message. Returns the text to send back."""
        result = await self.interpreter.interpret(utterance, conversation_id, facts)
        if not result.is_function_call:
            return result.text

        call = result.function_call
        arguments = bind_caller_identity(
            call.name, call.arguments, facts.caller_id, facts.is_admin,
        )
        outcome = await self.dispatch(call.name, arguments)
        return await self.reconciler.reconcile(
            conversation_id, call.name, outcome, call_id=call.call_id,
        )

    async def dispatch(self, name: str, arguments: dict) -> DispatchResult:
        """Run a structured intent directly (no interpretation, no narration)."""
        return await self.tool_dispatch.execute(name, arguments)

    def clear_conversation(self, conversation_id: ConversationId) -> None:
        """Drop a conversation's history (e.g. when a multi-step flow completes)."""
        self.contexts.clear(conversation_id)
        logger.info(
            "Conversation context cleared",
            extra={"conversation_id": conversation_id},
        )
