"""Health check endpoints.

- /health: liveness, always 200
- /healthz: storage and location provider status, 503 when storage fails
"""

import json
from typing import Any

from fastapi import APIRouter, Response
from sqlalchemy import text

from backend.trips.config import Settings, get_settings
from backend.trips.db.engine import create_engine_from_settings, create_session_factory

router = APIRouter()


async def check_db(settings: Settings) -> tuple[bool, str]:
    """Check database connectivity.

    Returns:
        (is_ok, status_message)
    """
    if settings.storage_backend != "sql":
        return (True, "in_memory")

    try:
        engine = create_engine_from_settings(settings)
        session_factory = create_session_factory(engine)

        with session_factory() as session:
            session.execute(text("SELECT 1"))

        return (True, "ok")
    except Exception as e:
        return (False, f"error: {type(e).__name__}")


async def check_locations(settings: Settings) -> tuple[bool, str]:
    """Report whether a location provider is configured.

    Location search is optional, so a missing key never fails the check.
    """
    if not settings.google_maps_api_key:
        return (True, "not_configured")
    return (True, "configured")


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz", response_model=None)
async def healthz() -> dict[str, Any] | Response:
    """Health check endpoint.

    Returns:
        200 with component status if storage is ok
        503 if storage fails
    """
    settings = get_settings()

    db_ok, db_status = await check_db(settings)
    _, locations_status = await check_locations(settings)

    response_body = {
        "status": "ok" if db_ok else "degraded",
        "components": {
            "db": db_status,
            "locations": locations_status,
        },
    }

    if not db_ok:
        return Response(
            content=json.dumps(response_body),
            status_code=503,
            media_type="application/json",
        )

    return response_body
