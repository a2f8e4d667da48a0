from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional

from oioi.shared.messages.datatypes import User
from oioi.shared.messages.identifiers import ConnectorId, PaymentReference, SessionId
from oioi.shared.messages.result import Result

if TYPE_CHECKING:
    from oioi.cpo.http import HTTPRequest, HTTPResponse


class Notification:
    """
    Base class used for the lifecycle notifications the CPO server hands to
    its observers (see oioi.cpo.events)
    """


@dataclass(frozen=True)
class HTTPRequestNotification(Notification):
    """
    An HTTP request was received. 'operation' is "session-start" or
    "session-stop", or None if the request carries neither.
    """

    timestamp: datetime
    operation: Optional[str]
    request: "HTTPRequest"


@dataclass(frozen=True)
class SessionStartRequestNotification(Notification):
    """
    A session-start request passed validation and is about to be handed to
    the charging handlers.
    """

    timestamp: datetime
    request_timestamp: datetime
    user: User
    connector_id: ConnectorId
    payment_reference: Optional[PaymentReference] = None


@dataclass(frozen=True)
class SessionStopRequestNotification(Notification):
    timestamp: datetime
    request_timestamp: datetime
    user: User
    connector_id: ConnectorId
    session_id: SessionId


@dataclass(frozen=True)
class SessionStartResponseNotification(Notification):
    """
    The charging handlers answered a session-start request. 'runtime' is the
    time elapsed since the HTTP request was received.
    """

    timestamp: datetime
    request_timestamp: datetime
    user: User
    connector_id: ConnectorId
    payment_reference: Optional[PaymentReference]
    result: Result
    runtime: timedelta


@dataclass(frozen=True)
class SessionStopResponseNotification(Notification):
    timestamp: datetime
    request_timestamp: datetime
    user: User
    connector_id: ConnectorId
    session_id: SessionId
    result: Result
    runtime: timedelta


@dataclass(frozen=True)
class HTTPResponseNotification(Notification):
    """The HTTP response is about to be sent, successful or not"""

    timestamp: datetime
    operation: Optional[str]
    request: "HTTPRequest"
    response: "HTTPResponse"


@dataclass(frozen=True)
class ErrorNotification(Notification):
    """
    A charging handler failed while processing a request.

    Args:
        operation: "session-start" or "session-stop"
        handler: The name of the charging handler that failed
        error: The exception raised by the handler
    """

    timestamp: datetime
    operation: str
    handler: str
    error: BaseException

