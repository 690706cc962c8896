"""Conversation Context — bounded, per-conversation FIFO of dialogue turns.

Invariants:
    - Each conversation holds at most max_turns turns (default 3)
    - Turns are kept in chronological order; overflow evicts the OLDEST turn only
    - A conversation is created lazily on first get/append and lives until clear()
    - No timers, no persistence: volatile working memory for the process lifetime
    - Conversations never share turns

Design Decisions:
    - deque(maxlen=N) per key: eviction is structural, no manual trimming code
    - Turns are frozen dataclasses: a stored turn cannot be mutated after append
    - No lock: the transport guarantees one in-flight utterance per conversation,
      and keys never interact, so a per-process dict is sufficient
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Union

from taskpilot.core.domain_types import ConversationId


@dataclass(frozen=True)
class FunctionCallRef:
    """Provider-chosen call: tool_use id + operation name + raw arguments."""
    call_id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UserTurn:
    text: str


@dataclass(frozen=True)
class AssistantTurn:
    text: str | None = None
    function_call: FunctionCallRef | None = None


@dataclass(frozen=True)
class FunctionResultTurn:
    """Serialized dispatch result, linked to the call that produced it."""
    name: str
    payload: str
    call_id: str | None = None


Turn = Union[UserTurn, AssistantTurn, FunctionResultTurn]

DEFAULT_MAX_TURNS = 3


class ConversationContextStore:
    """Keyed FIFO store: get / append / clear per conversation id."""

    def __init__(self, max_turns: int = DEFAULT_MAX_TURNS):
        if max_turns < 1:
            raise ValueError("max_turns must be >= 1")
        self.max_turns = max_turns
        self._contexts: dict[ConversationId, deque[Turn]] = {}

    def _get_or_create(self, conversation_id: ConversationId) -> deque[Turn]:
        context = self._contexts.get(conversation_id)
        if context is None:
            context = deque(maxlen=self.max_turns)
            self._contexts[conversation_id] = context
        return context

    def get(self, conversation_id: ConversationId) -> list[Turn]:
        """Snapshot of the turns, oldest first. Creates an empty context."""
        return list(self._get_or_create(conversation_id))

    def append(self, conversation_id: ConversationId, turn: Turn) -> None:
        self._get_or_create(conversation_id).append(turn)

    def extend(self, conversation_id: ConversationId, turns: list[Turn]) -> None:
        """Append several turns in order (e.g. a user + assistant pair)."""
        context = self._get_or_create(conversation_id)
        for turn in turns:
            context.append(turn)

    def clear(self, conversation_id: ConversationId) -> None:
        self._contexts.pop(conversation_id, None)

    def __contains__(self, conversation_id: ConversationId) -> bool:
        return conversation_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)
