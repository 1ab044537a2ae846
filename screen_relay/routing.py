import pkgutil
from importlib import import_module
from pathlib import Path

from fastapi import APIRouter

from screen_relay.logging import logger

# Packages whose modules each expose a module-level `router`
ROUTER_PACKAGES = ("api.http", "api.ws.consumers")

_logged_modules: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Build the main router from every module under `api/http` and
    `api/ws/consumers`.

    New endpoints only need a module in one of those packages; nothing has
    to be registered by hand.
    """
    main_router = APIRouter()
    package_root = Path(__file__).parent

    for package in ROUTER_PACKAGES:
        package_dir = package_root.joinpath(*package.split("."))
        qualified = f"{__package__}.{package}"

        for module_info in pkgutil.iter_modules([str(package_dir)]):
            module = import_module(f"{qualified}.{module_info.name}")
            main_router.include_router(module.router)

            if module.__name__ not in _logged_modules:
                logger.info(f"Registered routes from {module.__name__}")
                _logged_modules.add(module.__name__)

    return main_router
