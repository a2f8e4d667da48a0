"""
The OIOI result: a numeric protocol result code plus a human readable
message. Every HTTP response the CPO server sends carries exactly one
result as its JSON body.
"""

import json
import logging
from http import HTTPStatus
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import Field, ValidationError, field_validator

from oioi.shared.messages import BaseModel
from oioi.shared.messages.enums import ResponseCode

logger = logging.getLogger(__name__)


# The partner protocol signals EVSE-side business failures in the body, not
# via the transport status, so several failure codes map to 200 OK.
RESPONSE_CODE_HTTP_STATUS: Dict[int, HTTPStatus] = {
    ResponseCode.SUCCESS: HTTPStatus.OK,
    ResponseCode.SUCCESSFULLY_STARTED_A_CHARGING_SESSION: HTTPStatus.OK,
    ResponseCode.SUCCESSFULLY_AUTHORIZED_A_CHARGING_SESSION: HTTPStatus.OK,
    ResponseCode.AUTHENTICATION_FAILED_NO_POSITIVE_AUTHENTICATION_RESPONSE: (
        HTTPStatus.UNAUTHORIZED
    ),
    ResponseCode.AUTHENTICATION_FAILED_EMAIL_DOES_NOT_EXIST: HTTPStatus.UNAUTHORIZED,
    ResponseCode.AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID: HTTPStatus.UNAUTHORIZED,
    ResponseCode.EVSE_NOT_FOUND: HTTPStatus.NOT_FOUND,
    ResponseCode.CPO_SYSTEM_ERROR: HTTPStatus.NOT_FOUND,
    ResponseCode.CPO_SYSTEM_TIMEOUT: HTTPStatus.OK,
    ResponseCode.EVSE_ERROR: HTTPStatus.OK,
    ResponseCode.EVSE_TIMEOUT: HTTPStatus.OK,
    ResponseCode.EVSE_ALREADY_IN_USE: HTTPStatus.OK,
    ResponseCode.EVSE_NO_EV_CONNECTED: HTTPStatus.OK,
    ResponseCode.EVSE_UNAVAILABLE: HTTPStatus.OK,
}

DEFAULT_HTTP_STATUS = HTTPStatus.BAD_REQUEST


def http_status_for(code: int) -> HTTPStatus:
    """The HTTP status a result code is transported with; 400 if unlisted"""
    return RESPONSE_CODE_HTTP_STATUS.get(code, DEFAULT_HTTP_STATUS)


class Result(BaseModel):
    """
    An immutable OIOI result. Use the named constructors ok(), error() and
    user_token_not_valid() rather than instantiating the model directly.
    """

    code: int = Field(..., ge=0, alias="result")
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def null_message_is_empty(cls, value):
        return "" if value is None else value

    @classmethod
    def ok(cls, message: str = "Success.") -> "Result":
        return cls(code=int(ResponseCode.SUCCESS), message=message)

    @classmethod
    def error(cls, code: int, message: Optional[str] = None) -> "Result":
        return cls(code=int(code), message=message or "Error.")

    @classmethod
    def user_token_not_valid(cls) -> "Result":
        return cls(
            code=int(ResponseCode.AUTHENTICATION_FAILED_USER_TOKEN_NOT_VALID),
            message="Authentication failed: User token not valid",
        )

    @property
    def is_success(self) -> bool:
        return self.code == ResponseCode.SUCCESS

    @property
    def http_status(self) -> HTTPStatus:
        return http_status_for(self.code)

    @property
    def response_code(self) -> Optional[ResponseCode]:
        """The matching ResponseCode member, None for codes outside the taxonomy"""
        try:
            return ResponseCode(self.code)
        except ValueError:
            return None

    def to_json(self) -> Dict[str, Any]:
        return {"result": self.code, "message": self.message}

    def to_utf8_bytes(self) -> bytes:
        return json.dumps(self.to_json()).encode("utf-8")

    @classmethod
    def parse(cls, result_json: Union[str, bytes, Mapping[str, Any]]) -> "Result":
        """
        Parses a result from its JSON representation. Besides the "result"
        property the legacy "code" property of OIOI v3 is accepted.

        Raises:
            ValueError, if the input is no JSON object or has no valid code
        """
        if isinstance(result_json, (str, bytes)):
            try:
                result_json = json.loads(result_json)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Result is not valid JSON: {exc}") from exc
        if not isinstance(result_json, Mapping):
            raise ValueError("Result must be a JSON object")

        code = result_json.get("result", result_json.get("code"))
        if isinstance(code, bool) or not isinstance(code, int):
            raise ValueError("Invalid or missing JSON property 'result'!")
        try:
            return cls(code=code, message=result_json.get("message"))
        except ValidationError as exc:
            raise ValueError(f"Invalid result: {exc}") from exc

    @classmethod
    def try_parse(
        cls, result_json: Union[str, bytes, Mapping[str, Any]]
    ) -> Optional["Result"]:
        try:
            return cls.parse(result_json)
        except ValueError as exc:
            logger.debug(f"Could not parse result: {exc}")
            return None

    def __str__(self) -> str:
        if self.message:
            return f"{self.code} => {self.message}"
        return str(self.code)
