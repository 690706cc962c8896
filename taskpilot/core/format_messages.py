"""Message Formatting — pure rendering of the bounded turn window into provider messages.

Invariants:
    - All functions are pure (no IO, no async)
    - The first rendered message always has role "user"
    - Roles strictly alternate: consecutive same-role messages are merged into one
    - A tool_use block is emitted only when its tool_result follows it in the window;
      orphaned halves (one side evicted by the FIFO) are rendered as plain text notes
    - Empty texts are never emitted (the provider rejects empty text blocks)

Design Decisions:
    - Render-time repair instead of eviction-time repair: the context store stays a
      dumb FIFO, and every window, however trimmed, renders into a valid request
    - Text notes for orphaned calls keep the information visible to the model
      without violating tool_use/tool_result pairing rules
"""

import json

from taskpilot.core.conversation_context import (
    AssistantTurn, FunctionResultTurn, Turn, UserTurn,
)


def render_messages(
    turns: list[Turn], trailing_user_text: str | None = None,
) -> list[dict]:
    """Render turns (+ optional new user utterance) into alternating messages."""
    window = _drop_leading_assistant_turns(turns)
    paired = _paired_call_ids(window)

    raw: list[dict] = []
    for turn in window:
        msg = _render_turn(turn, paired)
        if msg is not None:
            raw.append(msg)
    if trailing_user_text:
        raw.append({"role": "user", "content": trailing_user_text})

    return _merge_same_role(raw)


def _drop_leading_assistant_turns(turns: list[Turn]) -> list[Turn]:
    start = 0
    while start < len(turns) and isinstance(turns[start], AssistantTurn):
        start += 1
    return list(turns[start:])


def _paired_call_ids(turns: list[Turn]) -> set[str]:
    """Call ids whose assistant call is immediately followed by its result."""
    paired = set()
    for current, following in zip(turns, turns[1:]):
        call = getattr(current, "function_call", None)
        if (
            call is not None
            and isinstance(following, FunctionResultTurn)
            and following.call_id == call.call_id
        ):
            paired.add(call.call_id)
    return paired


def _render_turn(turn: Turn, paired: set[str]) -> dict | None:
    if isinstance(turn, UserTurn):
        if not turn.text:
            return None
        return {"role": "user", "content": turn.text}

    if isinstance(turn, AssistantTurn):
        return _render_assistant(turn, paired)

    if turn.call_id in paired:
        return {
            "role": "user",
            "content": [{
                "type": "tool_result",
                "tool_use_id": turn.call_id,
                "content": turn.payload,
            }],
        }
    return {
        "role": "user",
        "content": f"[Результат {turn.name}]: {turn.payload}",
    }


def _render_assistant(turn: AssistantTurn, paired: set[str]) -> dict | None:
    blocks: list[dict] = []
    if turn.text:
        blocks.append({"type": "text", "text": turn.text})
    call = turn.function_call
    if call is not None:
        if call.call_id in paired:
            blocks.append({
                "type": "tool_use",
                "id": call.call_id,
                "name": call.name,
                "input": call.arguments,
            })
        else:
            args = json.dumps(call.arguments, ensure_ascii=False)
            blocks.append({
                "type": "text",
                "text": f"[Виклик {call.name}]: {args}",
            })
    if not blocks:
        return None
    return {"role": "assistant", "content": blocks}


def _as_blocks(content) -> list[dict]:
    if isinstance(content, str):
        return [{"type": "text", "text": content}]
    return list(content)


def _merge_same_role(messages: list[dict]) -> list[dict]:
    merged: list[dict] = []
    for msg in messages:
        if merged and merged[-1]["role"] == msg["role"]:
            merged[-1] = {
                "role": msg["role"],
                "content": (
                    _as_blocks(merged[-1]["content"]) + _as_blocks(msg["content"])
                ),
            }
        else:
            merged.append(msg)
    return merged
