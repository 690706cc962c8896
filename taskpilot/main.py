"""TaskPilot API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TaskPilotError → structured JSON responses
    - Database, provider client and CommandEngine built once on startup via lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Engine stored on app.state: one ConversationContextStore per process
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from taskpilot.api.error_handlers import register_error_handlers
from taskpilot.api.routes import commands, health
from taskpilot.config import get_settings
from taskpilot.infrastructure.anthropic_client import ResilientAnthropicClient
from taskpilot.infrastructure.database import init_db
from taskpilot.infrastructure.entity_store import SqlEntityStore
from taskpilot.infrastructure.observability import setup_logging
from taskpilot.services.command_engine import CommandEngine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    db = init_db(settings.database_url)
    client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    app.state.engine = CommandEngine.from_settings(
        settings, client, SqlEntityStore(db),
    )
    logger.info("TaskPilot API started")
    yield
    await db.dispose()
    logger.info("TaskPilot API shutting down")


app = FastAPI(title="TaskPilot API", version="1.0.0", lifespan=lifespan)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(commands.router)

register_error_handlers(app)
