from asyncio import CancelledError, sleep

from screen_relay.constants import TASK_ERROR_BACKOFF_SECONDS
from screen_relay.logging import logger
from screen_relay.managers.session_registry import (
    SessionRegistry,
    session_registry,
)
from screen_relay.settings import app_settings


async def session_sweeper_task(
    registry: SessionRegistry = session_registry,
    interval: float | None = None,
):
    """
    Periodically expires sessions that have been idle for too long.

    Every `SESSION_SWEEP_INTERVAL_SECONDS` the registry is swept with its
    idle threshold (`SESSION_IDLE_TIMEOUT_SECONDS`). Expiry is not reported
    to connections; a connection still bound to an expired session finds
    out on its next attach (SessionNotFoundError) and its payloads are
    dropped.

    Errors are logged and the loop continues after a short backoff; the
    task only stops when cancelled on application shutdown.
    """
    if interval is None:
        interval = app_settings.SESSION_SWEEP_INTERVAL_SECONDS

    while True:
        try:
            await sleep(interval)
            removed = await registry.sweep_expired()
            if removed:
                logger.debug(f"Session sweep removed {removed}")

        except CancelledError:
            logger.info("Task for session sweep cancelled!")
            break

        except Exception as ex:
            logger.error(f"Session sweep task error occurred with: {ex}")
            await sleep(TASK_ERROR_BACKOFF_SECONDS)
