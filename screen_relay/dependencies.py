"""
Dependency injection configuration for FastAPI.

Endpoints receive the registry and router through Depends() so tests can
swap them with `app.dependency_overrides`.

Example:
    ```python
    from screen_relay.dependencies import SessionRegistryDep

    @router.get("/sessions/{session_id}")
    async def status(session_id: str, registry: SessionRegistryDep):
        return registry.status(session_id)
    ```
"""

from typing import Annotated

from fastapi import Depends

from screen_relay.managers.relay_router import RelayRouter, relay_router
from screen_relay.managers.session_registry import (
    SessionRegistry,
    session_registry,
)


def get_session_registry() -> SessionRegistry:
    return session_registry


def get_relay_router() -> RelayRouter:
    return relay_router


SessionRegistryDep = Annotated[SessionRegistry, Depends(get_session_registry)]
RelayRouterDep = Annotated[RelayRouter, Depends(get_relay_router)]
