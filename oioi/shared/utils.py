import inspect
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Union

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def maybe_await(value: Union[Any, Awaitable[Any]]) -> Any:
    """
    Observers and charging handlers may be plain functions or coroutine
    functions; this awaits the return value only if it is awaitable.
    """
    if inspect.isawaitable(value):
        return await value
    return value
