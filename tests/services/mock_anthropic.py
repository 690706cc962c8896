"""Mock Anthropic Client — simulates the Messages API for interpreter/reconciler tests.

Invariants:
    - MockAnthropicClient sequences responses (one per create_message call)
    - An Exception instance in the sequence is raised instead of returned
    - Every call's kwargs are recorded in .calls (deep-copied messages)
    - Builder helpers produce realistic Anthropic response structures

Design Decisions:
    - Flat mock classes (no inheritance): simple, explicit, easy to debug
    - messages deep-copied on record: the caller may not mutate what was sent
"""

import asyncio
import copy


# -- Mock Anthropic SDK objects ------------------------------------------------


class _Block:
    """Mock content block (text or tool_use)."""

    def __init__(self, **kwargs):
        self._data = kwargs
        for k, v in kwargs.items():
            setattr(self, k, v)

    def model_dump(self, exclude_none=False):
        d = dict(self._data)
        if exclude_none:
            d = {k: v for k, v in d.items() if v is not None}
        return d

    def __repr__(self):
        return f"_Block({self._data})"


class _Usage:
    def __init__(self, input_tokens=100, output_tokens=50):
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens


class _Message:
    """Mock Message returned by messages.create()."""

    def __init__(self, content, stop_reason="end_turn", input_tokens=100, output_tokens=50):
        self.content = content
        self.stop_reason = stop_reason
        self.usage = _Usage(input_tokens, output_tokens)


class MockAnthropicClient:
    """Replaces ResilientAnthropicClient. Sequences pre-configured responses."""

    def __init__(self, responses, delay: float = 0.0):
        self._responses = list(responses)
        self._idx = 0
        self._delay = delay
        self.calls = []

    async def create_message(self, **kwargs):
        recorded = dict(kwargs)
        recorded["messages"] = copy.deepcopy(kwargs.get("messages"))
        self.calls.append(recorded)
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._idx >= len(self._responses):
            raise RuntimeError(
                f"MockAnthropicClient: no response at index {self._idx} "
                f"(configured {len(self._responses)})",
            )
        response = self._responses[self._idx]
        self._idx += 1
        if isinstance(response, BaseException):
            raise response
        return response


# -- Builder helpers -----------------------------------------------------------


def text_response(text, stop_reason="end_turn", tokens=(100, 50)):
    """Build a text-only response."""
    return _Message(
        [_Block(type="text", text=text)], stop_reason, tokens[0], tokens[1],
    )


def tool_response(name, tool_input, tool_id=None, text=None, tokens=(150, 80)):
    """Build a single tool_use response, optionally preceded by text."""
    content = []
    if text is not None:
        content.append(_Block(type="text", text=text))
    content.append(_Block(
        type="tool_use", id=tool_id or f"toolu_{name}_test",
        name=name, input=tool_input,
    ))
    return _Message(content, "tool_use", tokens[0], tokens[1])


def multi_tool_response(tools, tokens=(200, 120)):
    """Build a response with several tool_use blocks."""
    content = [
        _Block(
            type="tool_use", id=f"toolu_{t['name']}_{i}",
            name=t["name"], input=t["input"],
        )
        for i, t in enumerate(tools)
    ]
    return _Message(content, "tool_use", tokens[0], tokens[1])


def empty_response():
    return _Message([], "end_turn", 10, 0)
