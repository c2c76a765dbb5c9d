"""
Error handler decorator for control-surface endpoints.

Converts AppException instances into HTTPException with the status code the
exception carries, eliminating duplicate try/except blocks in routes.
"""

from functools import wraps
from typing import Any, Callable

from fastapi import HTTPException

from relay.exceptions import AppException
from relay.logging import logger


def handle_http_errors(func: Callable) -> Callable:
    """
    Decorator for HTTP endpoints to convert AppException to HTTPException.

    Args:
        func: The HTTP endpoint function to wrap.

    Returns:
        Wrapped function that handles exceptions.

    Example:
        ```python
        @router.post("/command")
        @handle_http_errors
        async def send_command(body: CommandRequest, dispatcher: DispatcherDep):
            await dispatcher.dispatch(body.client_id, body.to_command())
        ```
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except AppException as ex:
            log = logger.error if ex.http_status >= 500 else logger.warning
            log(
                f"{type(ex).__name__} in {func.__name__}: {ex.message}",
                extra={"error_code": ex.code},
            )
            raise HTTPException(
                status_code=ex.http_status,
                detail=ex.message,
            )

    return wrapper
