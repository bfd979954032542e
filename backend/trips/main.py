"""FastAPI application."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.trips.api.routes.health import router as health_router
from backend.trips.api.routes.metrics import router as metrics_router
from backend.trips.api.routes.shared import router as shared_router
from backend.trips.api.routes.trips import router as trips_router
from backend.trips.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    TripPlanError,
    ValidationError,
)

app = FastAPI(title="Trip Planner API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router, tags=["trips"])
app.include_router(shared_router, tags=["shared"])

STATUS_BY_ERROR: dict[type[TripPlanError], int] = {
    ValidationError: 422,
    NotFoundError: 404,
    ConflictError: 409,
    DependencyError: 503,
}


@app.exception_handler(TripPlanError)
async def trip_plan_error_handler(request: Request, exc: TripPlanError) -> JSONResponse:
    """Map typed core failures onto HTTP status codes."""
    return JSONResponse(
        status_code=STATUS_BY_ERROR.get(type(exc), 500),
        content={"error": exc.kind, "detail": exc.message},
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Planner API", "version": "0.1.0"}
