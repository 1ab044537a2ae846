"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, status
from pydantic import BaseModel

from screen_relay.dependencies import RelayRouterDep, SessionRegistryDep

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    sessions: int
    connections: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(
    registry: SessionRegistryDep, relay: RelayRouterDep
) -> HealthResponse:
    """
    Report service liveness with the number of live sessions and connections.

    All state is in process memory, so there is nothing external to check.
    """
    return HealthResponse(
        status="healthy",
        sessions=registry.count(),
        connections=relay.connection_count(),
    )
