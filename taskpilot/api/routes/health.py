"""Health Routes — liveness and readiness for the command service.

Invariants:
    - GET /health/ returns 200 while the process is up, with the live conversation count
    - GET /health/ready returns 200 only when the database answers AND the CommandEngine
      has been built; otherwise 503 listing each failing check
"""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from taskpilot.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    engine = getattr(request.app.state, "engine", None)
    return {
        "status": "healthy",
        "service": "taskpilot-api",
        "conversations": len(engine.contexts) if engine is not None else 0,
    }


@router.get("/ready")
async def readiness_check(request: Request):
    manager = database.db_manager
    checks = {
        "database": bool(manager) and await manager.health_check(),
        "command_engine": getattr(request.app.state, "engine", None) is not None,
    }
    failing = sorted(name for name, ok in checks.items() if not ok)
    if failing:
        logger.warning(
            "Not ready: %s", ", ".join(failing),
            extra={"path": request.url.path, "status_code": 503},
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "failing": failing},
        )
    return {"status": "ready", "checks": {name: "healthy" for name in checks}}
