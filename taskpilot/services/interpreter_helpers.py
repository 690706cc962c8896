"""Interpreter Helpers — pure extraction of a provider reply into text / function call.

Invariants:
    - At most ONE function call is extracted per reply (the first tool_use block)
    - Text is the concatenation of all text blocks, stripped
    - Works on SDK objects and on plain mocks (attribute access via getattr)
"""

import logging
from dataclasses import dataclass

from taskpilot.core.conversation_context import FunctionCallRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderReply:
    text: str
    function_call: FunctionCallRef | None = None


def parse_response(response) -> ProviderReply:
    """Split a Messages API response into reply text and first tool_use call."""
    texts: list[str] = []
    calls: list[FunctionCallRef] = []
    for block in getattr(response, "content", None) or []:
        block_type = getattr(block, "type", None)
        if block_type == "text":
            texts.append(getattr(block, "text", "") or "")
        elif block_type == "tool_use":
            calls.append(FunctionCallRef(
                call_id=block.id,
                name=block.name,
                arguments=dict(block.input or {}),
            ))
    if len(calls) > 1:
        logger.warning(
            "Provider returned %d function calls; only '%s' is honored",
            len(calls), calls[0].name,
        )
    return ProviderReply(
        text="".join(texts).strip(),
        function_call=calls[0] if calls else None,
    )
