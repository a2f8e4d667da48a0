"""
Validators for the two stateful OIOI requests a partner sends to the CPO:
session-start and session-stop.

Both read the request object property by property and stop at the first
property that is missing or invalid by raising a RequestValidationError that
carries the OIOI result for the partner. Properties after the failing one
are never looked at.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, Mapping, Optional, Union

from oioi.shared.exceptions import JSONFieldError, RequestValidationError
from oioi.shared.messages.datatypes import User
from oioi.shared.messages.enums import IdentifierType, ResponseCode
from oioi.shared.messages.identifiers import (
    ConnectorId,
    EVCOId,
    PaymentReference,
    RFIDId,
    SessionId,
)
from oioi.shared.messages.json_io import JSONObjectReader
from oioi.shared.messages.result import Result
from oioi.shared.validators import normalize_text

logger = logging.getLogger(__name__)

SESSION_START = "session-start"
SESSION_STOP = "session-stop"


@dataclass(frozen=True)
class SessionStartRequest:
    user: User
    connector_id: ConnectorId
    payment_reference: Optional[PaymentReference] = None


@dataclass(frozen=True)
class SessionStopRequest:
    user: User
    connector_id: ConnectorId
    session_id: SessionId


ValidatedRequest = Union[SessionStartRequest, SessionStopRequest]


def _parse_identifier_type(value: Any) -> IdentifierType:
    if not isinstance(value, str):
        raise ValueError("must be a string")
    identifier_type = IdentifierType.parse(value)
    if identifier_type == IdentifierType.UNKNOWN:
        raise ValueError(f"unknown identifier type {value!r}")
    return identifier_type


# How 'user/identifier' is parsed for each identifier type this gateway
# supports. Recognised types missing here are rejected explicitly.
_IDENTIFIER_PARSERS: Dict[IdentifierType, Callable[[Any], str]] = {
    IdentifierType.EVCO_ID: lambda value: str(EVCOId.parse(value)),
    IdentifierType.RFID: lambda value: str(RFIDId.parse(value)),
    IdentifierType.USERNAME: partial(normalize_text, "username"),
}


def _parse_token(value: Any) -> str:
    """The token must not be blank, but is forwarded exactly as sent"""
    normalize_text("token", value)
    return value


def _fail(code: int, message: str, cause: Optional[Exception] = None):
    reason = f"{message} ({cause})" if cause else message
    raise RequestValidationError(reason, Result.error(code, message))


def parse_user(request: JSONObjectReader) -> User:
    """
    Parses the mandatory 'user' object of a session-start or session-stop
    request. All failures are answered with result code 145.
    """
    try:
        user_json = request.parse_mandatory_object("user")
    except JSONFieldError as exc:
        raise RequestValidationError(str(exc), Result.user_token_not_valid())

    try:
        identifier_type = user_json.parse_mandatory(
            "identifier-type", _parse_identifier_type
        )
    except JSONFieldError as exc:
        _fail(
            ResponseCode.AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID,
            "JSON property 'user/identifier-type' missing or invalid!",
            exc,
        )

    identifier_parser = _IDENTIFIER_PARSERS.get(identifier_type)
    if identifier_parser is None:
        _fail(
            ResponseCode.AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID,
            f"Identifier type '{identifier_type.as_text()}' is not supported!",
        )

    try:
        identifier = user_json.parse_mandatory("identifier", identifier_parser)
    except JSONFieldError as exc:
        _fail(
            ResponseCode.AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID,
            "JSON property 'user/identifier' missing or invalid!",
            exc,
        )

    token = None
    if identifier_type == IdentifierType.USERNAME:
        try:
            token = user_json.parse_optional("token", _parse_token)
        except JSONFieldError as exc:
            _fail(
                ResponseCode.AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID,
                "JSON property 'user/token' invalid!",
                exc,
            )

    return User(identifier=identifier, identifier_type=identifier_type, token=token)


def parse_connector_id(request: JSONObjectReader) -> ConnectorId:
    try:
        return request.parse_mandatory("connector-id", ConnectorId.parse)
    except JSONFieldError as exc:
        _fail(
            ResponseCode.EVSE_ERROR,
            "JSON property 'connector-id' missing or invalid!",
            exc,
        )


def validate_session_start(request_json: Mapping[str, Any]) -> SessionStartRequest:
    """
    Validates the object below the 'session-start' key:

        {
            "user": {"identifier-type": "evco-id", "identifier": "..."},
            "connector-id": "DE*GEF*E12345678",
            "payment-reference": "..."          (optional)
        }

    Raises:
        RequestValidationError, on the first missing or invalid property
    """
    request = JSONObjectReader(request_json)
    user = parse_user(request)
    connector_id = parse_connector_id(request)

    try:
        payment_reference = request.parse_optional(
            "payment-reference", PaymentReference.parse
        )
    except JSONFieldError as exc:
        _fail(
            ResponseCode.EVSE_ERROR,
            "JSON property 'payment-reference' missing or invalid!",
            exc,
        )

    return SessionStartRequest(
        user=user, connector_id=connector_id, payment_reference=payment_reference
    )


def validate_session_stop(request_json: Mapping[str, Any]) -> SessionStopRequest:
    """
    Validates the object below the 'session-stop' key. Same as session-start,
    but with a mandatory 'session-id' instead of the payment reference.

    Raises:
        RequestValidationError, on the first missing or invalid property
    """
    request = JSONObjectReader(request_json)
    user = parse_user(request)
    connector_id = parse_connector_id(request)

    try:
        session_id = request.parse_mandatory("session-id", SessionId.parse)
    except JSONFieldError as exc:
        _fail(
            ResponseCode.EVSE_ERROR,
            "JSON property 'session-id' missing or invalid!",
            exc,
        )

    return SessionStopRequest(user=user, connector_id=connector_id, session_id=session_id)


VALIDATORS: Dict[str, Callable[[Mapping[str, Any]], ValidatedRequest]] = {
    SESSION_START: validate_session_start,
    SESSION_STOP: validate_session_stop,
}


def validate_request(operation: str, request_json: Any) -> ValidatedRequest:
    """
    Runs the validator of the given operation on the object found below the
    operation's envelope key.

    Raises:
        RequestValidationError, if the object is invalid or no JSON object
    """
    if not isinstance(request_json, Mapping):
        _fail(
            ResponseCode.AUTHENTICATION_FAILED_NO_POSITIVE_AUTHENTICATION_RESPONSE,
            f"JSON property '{operation}' must be a JSON object!",
        )
    return VALIDATORS[operation](request_json)
