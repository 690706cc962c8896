"""Command Routes — interpret free text, dispatch structured intents, clear context.

Invariants:
    - POST /commands/interpret always answers 200 with text (failures are narrated)
    - POST /commands/dispatch always answers 200 with {success, message}
    - DELETE /conversations/{id}/context answers 204 whether or not the context existed

Design Decisions:
    - CommandEngine lives on app.state (built in lifespan); get_engine is the
      dependency seam tests override
"""

from fastapi import APIRouter, Depends, Request, Response, status

from taskpilot.core.domain_types import ConversationId
from taskpilot.schemas.command import (
    DispatchRequest, DispatchResponse, InterpretRequest, InterpretResponse,
)
from taskpilot.services.command_engine import CommandEngine

router = APIRouter(prefix="/api/v1", tags=["commands"])


def get_engine(request: Request) -> CommandEngine:
    return request.app.state.engine


@router.post("/commands/interpret", response_model=InterpretResponse)
async def interpret_command(
    body: InterpretRequest, engine: CommandEngine = Depends(get_engine),
):
    """Interpret a free-text utterance and run at most one operation."""
    text = await engine.interpret_and_dispatch(
        body.utterance, ConversationId(body.conversation_id),
        body.facts.to_domain(),
    )
    return InterpretResponse(text=text)


@router.post("/commands/dispatch", response_model=DispatchResponse)
async def dispatch_command(
    body: DispatchRequest, engine: CommandEngine = Depends(get_engine),
):
    """Run an already-structured intent (e.g. from a button press)."""
    result = await engine.dispatch(body.name, body.arguments)
    return DispatchResponse(success=result.success, message=result.message)


@router.delete(
    "/conversations/{conversation_id}/context",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def clear_conversation(
    conversation_id: str, engine: CommandEngine = Depends(get_engine),
):
    engine.clear_conversation(ConversationId(conversation_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
