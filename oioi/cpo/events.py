"""
Lifecycle hooks of the CPO server.

External collaborators (typically a logging or accounting subsystem)
subscribe callbacks to the events below. The server dispatches a
notification (see oioi.shared.notifications) to every subscriber of an
event concurrently and waits until all of them are done. A subscriber that
raises is logged and otherwise ignored: it neither cancels its siblings nor
affects the request being processed.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Union

from oioi.shared.exceptions import UnknownEventError
from oioi.shared.notifications import Notification
from oioi.shared.utils import maybe_await

logger = logging.getLogger(__name__)

HTTP_REQUEST = "http_request"
SESSION_START_REQUEST = "session_start_request"
SESSION_STOP_REQUEST = "session_stop_request"
SESSION_START_RESPONSE = "session_start_response"
SESSION_STOP_RESPONSE = "session_stop_response"
HTTP_RESPONSE = "http_response"
ERROR = "error"

KNOWN_EVENTS: FrozenSet[str] = frozenset(
    {
        HTTP_REQUEST,
        SESSION_START_REQUEST,
        SESSION_STOP_REQUEST,
        SESSION_START_RESPONSE,
        SESSION_STOP_RESPONSE,
        HTTP_RESPONSE,
        ERROR,
    }
)

Subscriber = Callable[[Notification], Union[Any, Awaitable[Any]]]


class EventHooks:
    def __init__(self):
        self._subscribers: Dict[str, List[Subscriber]] = {
            event: [] for event in KNOWN_EVENTS
        }

    def subscribe(self, event: str, callback: Subscriber) -> None:
        """
        Registers a plain function or a coroutine function for the event.

        Raises:
            UnknownEventError, if the event name is not one of KNOWN_EVENTS
        """
        if event not in KNOWN_EVENTS:
            raise UnknownEventError(
                f"Unknown event '{event}', must be one of {sorted(KNOWN_EVENTS)}"
            )
        self._subscribers[event].append(callback)

    def unsubscribe(self, event: str, callback: Subscriber) -> None:
        if event not in KNOWN_EVENTS:
            raise UnknownEventError(f"Unknown event '{event}'")
        try:
            self._subscribers[event].remove(callback)
        except ValueError:
            logger.debug(f"{callback!r} was not subscribed to '{event}'")

    def subscribers(self, event: str) -> List[Subscriber]:
        return list(self._subscribers.get(event, []))

    async def dispatch(self, event: str, notification: Notification) -> None:
        """
        Hands the notification to all subscribers of the event at once and
        returns when every one of them has finished or failed.
        """
        subscribers = self.subscribers(event)
        if not subscribers:
            return

        await asyncio.gather(
            *(self._notify(event, callback, notification) for callback in subscribers)
        )

    async def _notify(
        self, event: str, callback: Subscriber, notification: Notification
    ) -> None:
        try:
            await maybe_await(callback(notification))
        except Exception:
            logger.exception(f"Subscriber {callback!r} of event '{event}' failed")
