from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException

from screen_relay.exceptions import AppException
from screen_relay.logging import logger


def handle_http_errors(func: Callable) -> Callable:
    """
    Turn an AppException raised by an endpoint into an HTTPException whose
    status is the exception's `http_status` and whose detail is the
    `{code, msg}` error body.

    Anything outside the AppException hierarchy propagates untouched.
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except AppException as ex:
            logger.warning(f"{func.__name__} rejected: {ex.message}")
            raise HTTPException(
                status_code=ex.http_status,
                detail=ex.to_http_response().to_wire(),
            ) from ex

    return wrapper
