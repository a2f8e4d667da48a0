"""
The OIOI v4 CPO server: accepts the session-start and session-stop requests
a partner posts to the configured URI prefix, validates them, asks the
registered charging handlers to act on them and answers with an OIOI result.

Every request runs through the same steps:

    1. decode the body and pick the operation by its top-level key
    2. 'http_request' event (operation None if the request carries none)
    3. validate the request (any failure so far ends the request with a
       400 response and the 'http_response' event)
    4. 'session_start_request' / 'session_stop_request' event
    5. ask all charging handlers concurrently, pick the first outcome
       that is not UNSPECIFIED and map it to a result
    6. 'session_start_response' / 'session_stop_response' event
    7. 'http_response' event, return the response
"""

import asyncio
import logging
from datetime import timedelta
from http import HTTPStatus
from typing import Dict, List, Optional, Sequence, Tuple

from oioi.cpo import events
from oioi.cpo.controller.interface import ChargingHandlerInterface
from oioi.cpo.cpo_settings import Config
from oioi.cpo.events import EventHooks, Subscriber
from oioi.cpo.http import TEXT_UTF8, HTTPRequest, HTTPResponse
from oioi.cpo.request_validators import (
    SESSION_START,
    SESSION_STOP,
    SessionStartRequest,
    ValidatedRequest,
    validate_request,
)
from oioi.shared.exceptions import RequestValidationError
from oioi.shared.messages.enums import ChargeOutcome, ResponseCode
from oioi.shared.messages.json_io import parse_json_object
from oioi.shared.messages.result import Result
from oioi.shared.notifications import (
    ErrorNotification,
    HTTPRequestNotification,
    HTTPResponseNotification,
    SessionStartRequestNotification,
    SessionStartResponseNotification,
    SessionStopRequestNotification,
    SessionStopResponseNotification,
)
from oioi.shared.settings import SettingKey, shared_settings
from oioi.shared.utils import utc_now

logger = logging.getLogger(__name__)

# Result code and message each charging handler outcome is answered with
OUTCOME_RESULTS: Dict[ChargeOutcome, Tuple[ResponseCode, str]] = {
    ChargeOutcome.SUCCESS: (ResponseCode.SUCCESS, "Success."),
    ChargeOutcome.STARTED: (
        ResponseCode.SUCCESSFULLY_STARTED_A_CHARGING_SESSION,
        "Charging session started!",
    ),
    ChargeOutcome.AUTHORIZED: (
        ResponseCode.SUCCESSFULLY_AUTHORIZED_A_CHARGING_SESSION,
        "Charging session authorized!",
    ),
    ChargeOutcome.UNKNOWN_OPERATOR: (
        ResponseCode.CPO_SYSTEM_ERROR,
        "Unknown charging station operator!",
    ),
    ChargeOutcome.UNKNOWN_EVSE: (ResponseCode.EVSE_NOT_FOUND, "EVSE not found!"),
    ChargeOutcome.ALREADY_IN_USE: (
        ResponseCode.EVSE_ALREADY_IN_USE,
        "EVSE already in use!",
    ),
    ChargeOutcome.NO_EV_CONNECTED: (
        ResponseCode.EVSE_NO_EV_CONNECTED,
        "No EV connected to EVSE!",
    ),
    ChargeOutcome.TIMEOUT: (ResponseCode.EVSE_TIMEOUT, "EVSE timeout!"),
    ChargeOutcome.EVSE_ERROR: (ResponseCode.EVSE_ERROR, "EVSE error!"),
}

DEFAULT_ERROR = (ResponseCode.EVSE_ERROR, "EVSE error!")
HANDLER_TIMEOUT_ERROR = (ResponseCode.CPO_SYSTEM_TIMEOUT, "CPO timeout!")


def result_for_outcome(outcome: Optional[ChargeOutcome]) -> Result:
    """The result for a charging handler outcome, EVSE error if there is none"""
    code, message = OUTCOME_RESULTS.get(outcome, DEFAULT_ERROR)
    return Result.error(code, message)


class CPOServer:
    def __init__(
        self,
        config: Config,
        charging_handlers: Optional[Sequence[ChargingHandlerInterface]] = None,
        event_hooks: Optional[EventHooks] = None,
    ):
        self.config = config
        self.charging_handlers: List[ChargingHandlerInterface] = list(
            charging_handlers or []
        )
        self.event_hooks = event_hooks or EventHooks()

    def register_charging_handler(self, handler: ChargingHandlerInterface) -> None:
        """Handlers are asked in registration order when picking the outcome"""
        self.charging_handlers.append(handler)

    def subscribe(self, event: str, callback: Subscriber) -> None:
        self.event_hooks.subscribe(event, callback)

    @property
    def welcome_text(self) -> str:
        return (
            f"This is an OIOI v4.x CPO HTTP/JSON endpoint ({self.config.server_name})!"
            f"\r\n\r\nDefaults to {self.config.uri_prefix}\r\n\r\n"
        )

    def _response(self, result: Result, status: Optional[HTTPStatus] = None):
        return HTTPResponse.from_result(
            result, status=status, server=self.config.server_name
        )

    async def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Entry point for every HTTP request. Never raises because of the
        content of the request or a failing charging handler.
        """
        method = request.method.upper()

        if (
            method == "GET"
            and request.path == "/"
            and self.config.register_root_service
            and self.config.uri_prefix != "/"
        ):
            await self._received(None, request)
            return await self._send(
                None,
                request,
                HTTPResponse(
                    status=HTTPStatus.BAD_GATEWAY,
                    body=self.welcome_text.encode("utf-8"),
                    content_type=TEXT_UTF8,
                    server=self.config.server_name,
                ),
            )

        if method != "POST" or request.path != self.config.uri_prefix:
            logger.debug(f"No service for {method} {request.path}")
            return await self._reject(request, "Unknown URI", HTTPStatus.NOT_FOUND)

        return await self._handle_post(request)

    async def _handle_post(self, request: HTTPRequest) -> HTTPResponse:
        try:
            body = parse_json_object(request.body)
        except ValueError as exc:
            logger.warning(f"Rejecting request: {exc}")
            return await self._reject(request, "Invalid HTTP body!")

        if shared_settings[SettingKey.MESSAGE_LOG_JSON]:
            logger.trace(  # type: ignore[attr-defined]
                f"Received JSON: {request.body.decode('utf-8', errors='replace')}"
            )

        if SESSION_START in body:
            operation = SESSION_START
        elif SESSION_STOP in body:
            operation = SESSION_STOP
        else:
            logger.warning(f"Unknown JSON in HTTP body, keys: {list(body)}")
            return await self._reject(request, "Unknown JSON in HTTP body!")

        await self._received(operation, request)

        try:
            validated = validate_request(operation, body[operation])
        except RequestValidationError as exc:
            logger.warning(f"Invalid {operation} request: {exc.reason}")
            response = self._response(exc.result, status=HTTPStatus.BAD_REQUEST)
            return await self._send(operation, request, response)

        result = await self._process(operation, request, validated)
        return await self._send(operation, request, self._response(result))

    async def _received(self, operation: Optional[str], request: HTTPRequest) -> None:
        await self.event_hooks.dispatch(
            events.HTTP_REQUEST,
            HTTPRequestNotification(
                timestamp=utc_now(), operation=operation, request=request
            ),
        )

    async def _reject(
        self,
        request: HTTPRequest,
        message: str,
        status: HTTPStatus = HTTPStatus.BAD_REQUEST,
    ) -> HTTPResponse:
        """Answers a request that carries no known operation with result 140"""
        await self._received(None, request)
        response = self._response(
            Result.error(
                ResponseCode.AUTHENTICATION_FAILED_NO_POSITIVE_AUTHENTICATION_RESPONSE,
                message,
            ),
            status=status,
        )
        return await self._send(None, request, response)

    async def _send(
        self, operation: Optional[str], request: HTTPRequest, response: HTTPResponse
    ) -> HTTPResponse:
        if shared_settings[SettingKey.MESSAGE_LOG_JSON]:
            logger.trace(  # type: ignore[attr-defined]
                f"Sending {response.status.value}: {response.body.decode('utf-8')}"
            )
        await self.event_hooks.dispatch(
            events.HTTP_RESPONSE,
            HTTPResponseNotification(
                timestamp=utc_now(),
                operation=operation,
                request=request,
                response=response,
            ),
        )
        return response

    async def _process(
        self, operation: str, request: HTTPRequest, validated: ValidatedRequest
    ) -> Result:
        if isinstance(validated, SessionStartRequest):
            await self.event_hooks.dispatch(
                events.SESSION_START_REQUEST,
                SessionStartRequestNotification(
                    timestamp=utc_now(),
                    request_timestamp=request.timestamp,
                    user=validated.user,
                    connector_id=validated.connector_id,
                    payment_reference=validated.payment_reference,
                ),
            )
        else:
            await self.event_hooks.dispatch(
                events.SESSION_STOP_REQUEST,
                SessionStopRequestNotification(
                    timestamp=utc_now(),
                    request_timestamp=request.timestamp,
                    user=validated.user,
                    connector_id=validated.connector_id,
                    session_id=validated.session_id,
                ),
            )

        result = await self._ask_charging_handlers(operation, validated)
        logger.info(
            f"{operation} at {validated.connector_id} for {validated.user}: {result}"
        )

        now = utc_now()
        runtime = max(now - request.timestamp, timedelta(0))
        if isinstance(validated, SessionStartRequest):
            await self.event_hooks.dispatch(
                events.SESSION_START_RESPONSE,
                SessionStartResponseNotification(
                    timestamp=now,
                    request_timestamp=request.timestamp,
                    user=validated.user,
                    connector_id=validated.connector_id,
                    payment_reference=validated.payment_reference,
                    result=result,
                    runtime=runtime,
                ),
            )
        else:
            await self.event_hooks.dispatch(
                events.SESSION_STOP_RESPONSE,
                SessionStopResponseNotification(
                    timestamp=now,
                    request_timestamp=request.timestamp,
                    user=validated.user,
                    connector_id=validated.connector_id,
                    session_id=validated.session_id,
                    result=result,
                    runtime=runtime,
                ),
            )
        return result

    async def _ask_charging_handlers(
        self, operation: str, validated: ValidatedRequest
    ) -> Result:
        if not self.charging_handlers:
            logger.warning(f"No charging handler registered for {operation}")
            return result_for_outcome(None)

        outcomes = await asyncio.gather(
            *(
                self._call_handler(operation, handler, validated)
                for handler in self.charging_handlers
            )
        )

        for outcome in outcomes:
            if isinstance(outcome, ChargeOutcome) and (
                outcome != ChargeOutcome.UNSPECIFIED
            ):
                return result_for_outcome(outcome)

        if any(isinstance(outcome, asyncio.TimeoutError) for outcome in outcomes):
            return Result.error(*HANDLER_TIMEOUT_ERROR)
        return result_for_outcome(None)

    async def _call_handler(
        self,
        operation: str,
        handler: ChargingHandlerInterface,
        validated: ValidatedRequest,
    ):
        """
        Returns the handler's outcome, or the exception it failed with. A
        handler that does not answer in time fails with asyncio.TimeoutError.
        """
        try:
            if isinstance(validated, SessionStartRequest):
                call = handler.start(
                    validated.user,
                    validated.connector_id,
                    validated.payment_reference,
                )
            else:
                call = handler.stop(
                    validated.user, validated.connector_id, validated.session_id
                )
            return await asyncio.wait_for(
                call, timeout=self.config.charging_handler_timeout
            )
        except asyncio.TimeoutError as exc:
            logger.error(
                f"Charging handler {handler.name} did not answer {operation} "
                f"within {self.config.charging_handler_timeout}s"
            )
            error: Exception = exc
        except Exception as exc:
            logger.exception(f"Charging handler {handler.name} failed on {operation}")
            error = exc

        await self.event_hooks.dispatch(
            events.ERROR,
            ErrorNotification(
                timestamp=utc_now(),
                operation=operation,
                handler=handler.name,
                error=error,
            ),
        )
        return error
