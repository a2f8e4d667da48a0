"""
The minimal HTTP request/response abstraction the CPO server works on. The
actual HTTP/TLS server is not part of this package; whatever server is used
translates its requests into HTTPRequest objects, hands them to
CPOServer.handle() and writes the returned HTTPResponse back.
"""

from dataclasses import dataclass, field
from datetime import datetime
from http import HTTPStatus
from typing import Any, Dict, Optional

from oioi.shared.messages.result import Result
from oioi.shared.utils import utc_now

JSON_UTF8 = "application/json; charset=utf-8"
TEXT_UTF8 = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class HTTPRequest:
    method: str
    path: str
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def post(cls, path: str, body: Any, **kwargs) -> "HTTPRequest":
        """Convenience constructor, str bodies are UTF-8 encoded"""
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(method="POST", path=path, body=body, **kwargs)


@dataclass(frozen=True)
class HTTPResponse:
    status: HTTPStatus
    body: bytes
    content_type: str = JSON_UTF8
    server: Optional[str] = None
    result: Optional[Result] = None
    connection: str = "close"

    @classmethod
    def from_result(
        cls,
        result: Result,
        status: Optional[HTTPStatus] = None,
        server: Optional[str] = None,
    ) -> "HTTPResponse":
        """
        Serializes the result as the JSON body. Unless given explicitly, the
        status is derived from the result code.
        """
        return cls(
            status=status if status is not None else result.http_status,
            body=result.to_utf8_bytes(),
            server=server,
            result=result,
        )

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": self.content_type, "Connection": self.connection}
        if self.server:
            headers["Server"] = self.server
        return headers
