# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from asyncio import create_task, gather
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from screen_relay.logging import logger
from screen_relay.middlewares.correlation_id import CorrelationIDMiddleware
from screen_relay.middlewares.logging_context import LoggingContextMiddleware
from screen_relay.routing import collect_subrouters
from screen_relay.settings import app_settings
from screen_relay.tasks.session_sweeper import session_sweeper_task


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Starts the idle session sweep and cancels it on shutdown.

    The running tasks are kept on `app.state.background_tasks`.
    """
    logger.info("Application startup initiated")

    background_tasks = [
        create_task(session_sweeper_task(), name="session_sweeper")
    ]
    app.state.background_tasks = background_tasks
    logger.info(
        "Created task for session sweep "
        f"(every {app_settings.SESSION_SWEEP_INTERVAL_SECONDS}s, "
        f"idle timeout {app_settings.SESSION_IDLE_TIMEOUT_SECONDS}s)"
    )

    yield  # Application runs here

    logger.info("Application shutdown initiated")
    logger.info(f"Cancelling {len(background_tasks)} background tasks")
    for task in background_tasks:
        if not task.done():
            task.cancel()
    # CancelledError is collected instead of raised
    await gather(*background_tasks, return_exceptions=True)
    background_tasks.clear()
    logger.info("Application shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    - Lifespan: starts and cancels the idle session sweep.
    - Routers: every module under api/http and api/ws/consumers.
    - Middlewares: CORS (browser pages may be served from another origin),
      logging context and correlation ids for HTTP requests.
    """
    app = FastAPI(
        title="Screen relay",
        description="Pairs a screen producer with a controlling consumer and relays messages between them",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(collect_subrouters())

    # Middlewares (execute in REVERSE order of registration)
    # Execution flow: CorrelationIDMiddleware → LoggingContextMiddleware → CORSMiddleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ALLOW_ORIGINS,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    return app


app = application()  # Need for fastapi cli
