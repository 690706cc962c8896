"""Command Schemas — Pydantic models for the caller-facing HTTP surface.

Invariants:
    - utterance: 1-4000 chars, stripped, non-empty
    - conversation_id: non-empty (transport chat id, stringified)
    - DispatchRequest.name is NOT restricted here: unknown names must reach the
      dispatcher and come back as an UNKNOWN_OPERATION result, not a 400
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from taskpilot.core.domain_types import ApartmentId, SituationalFacts, UserId


class FactsPayload(BaseModel):
    """Caller facts resolved by the transport."""
    caller_id: str = Field(min_length=1, max_length=64)
    is_admin: bool = False
    assigned_apartment_ids: list[str] = Field(default_factory=list)
    open_tasks: list[dict[str, Any]] = Field(default_factory=list)

    def to_domain(self) -> SituationalFacts:
        return SituationalFacts(
            caller_id=UserId(self.caller_id),
            is_admin=self.is_admin,
            assigned_apartment_ids=[
                ApartmentId(a) for a in self.assigned_apartment_ids
            ],
            open_tasks=list(self.open_tasks),
        )


class InterpretRequest(BaseModel):
    conversation_id: str = Field(min_length=1, max_length=128)
    utterance: str = Field(min_length=1, max_length=4000)
    facts: FactsPayload

    @field_validator("utterance")
    @classmethod
    def strip_utterance(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("utterance cannot be empty or whitespace")
        return v


class InterpretResponse(BaseModel):
    text: str


class DispatchRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    arguments: dict[str, Any] = Field(default_factory=dict)


class DispatchResponse(BaseModel):
    success: bool
    message: str
