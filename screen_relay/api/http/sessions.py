"""Session endpoints: create a pairing session, poll its status, close it."""

from fastapi import APIRouter, Request, Response, status

from screen_relay.dependencies import RelayRouterDep, SessionRegistryDep
from screen_relay.logging import logger
from screen_relay.schemas.session import CreateSessionResponse, SessionStatus
from screen_relay.settings import app_settings
from screen_relay.utils.error_handler import handle_http_errors

router = APIRouter()


def _base_url(request: Request) -> str:
    """
    Public base URL of the service as seen by the browser.

    Behind a TLS-terminating proxy the scheme comes from X-Forwarded-Proto.
    """
    protocol = request.headers.get("x-forwarded-proto", request.url.scheme)
    host = request.headers.get("host", request.url.netloc)
    return f"{protocol}://{host}"


@router.post(
    "/sessions",
    response_model=CreateSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a pairing session",
    tags=["sessions"],
)
async def create_session(
    request: Request, registry: SessionRegistryDep
) -> CreateSessionResponse:
    """
    Create a new session and return the links to share with both devices.

    No authentication: anyone holding the session id can attach to it.

    Returns:
        CreateSessionResponse: Session id, producer/consumer page URLs
        and the idle timeout after which the session expires.
    """
    session_id = await registry.create()
    base_url = _base_url(request)

    logger.debug(f"Session {session_id} created for {base_url}")
    return CreateSessionResponse(
        session_id=session_id,
        producer_url=f"{base_url}{app_settings.PRODUCER_PATH}?id={session_id}",
        consumer_url=f"{base_url}{app_settings.CONSUMER_PATH}?id={session_id}",
        idle_timeout_seconds=int(registry.idle_threshold),
    )


@router.get(
    "/sessions/{session_id}",
    response_model=SessionStatus,
    summary="Get session status",
    tags=["sessions"],
)
async def get_session_status(
    session_id: str, registry: SessionRegistryDep
) -> SessionStatus:
    """
    Polling fallback for clients without a live WebSocket.

    Unknown or expired sessions are reported with `exists=false` rather
    than 404.
    """
    return registry.status(session_id)


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Close a session",
    tags=["sessions"],
)
@handle_http_errors
async def close_session(session_id: str, relay: RelayRouterDep) -> Response:
    """
    Explicitly expire a session.

    Bound connections are not notified; their later payloads are dropped.

    Raises:
        HTTPException: 404 if the session does not exist.
    """
    await relay.close_session(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
