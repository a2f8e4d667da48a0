import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import environs
from marshmallow import ValidationError, fields

from oioi.shared.exceptions import InvalidSettingsValueError
from oioi.shared.settings import SettingKey, load_shared_settings, shared_settings

logger = logging.getLogger(__name__)

DEFAULT_URI_PREFIX = "/api/v4/request"
DEFAULT_SERVER_NAME = "OIOI v4 HTTP CPO Server API"
DEFAULT_HANDLER_TIMEOUT = 45.0

_SHARED_MESSAGE_LOG_JSON = "message_log_json"
_BOOLEAN = fields.Boolean()


def _to_bool(value: Any) -> bool:
    """Accepts the same spellings as environs does for the .env file"""
    try:
        return _BOOLEAN.deserialize(value)
    except ValidationError as exc:
        raise ValueError(f"Not a boolean value: {value!r}") from exc


_CONVERTERS: Dict[str, Callable[[Any], Any]] = {
    "log_level": str,
    "uri_prefix": str,
    "server_name": str,
    "register_root_service": _to_bool,
    "charging_handler_timeout": float,
}


@dataclass
class Config:
    log_level: Optional[str] = None
    uri_prefix: str = DEFAULT_URI_PREFIX
    server_name: str = DEFAULT_SERVER_NAME
    register_root_service: bool = True
    charging_handler_timeout: float = DEFAULT_HANDLER_TIMEOUT
    env_dump: Optional[dict] = None

    def load_envs(self, env_path: Optional[str] = None) -> None:
        """
        Tries to load the .env file containing all the project settings.
        If `env_path` is not specified, it will get the .env on the current
        working directory of the project
        Args:
            env_path (str): Absolute path to the location of the .env file
        """
        env = environs.Env(eager=False)
        if not env_path:
            env_path = os.getcwd() + "/.env"
        env.read_env(path=env_path)  # read .env file, if it exists

        self.log_level = env.str("LOG_LEVEL", default="INFO")

        # The path the partner posts its session-start and session-stop
        # requests to
        self.uri_prefix = env.str("OIOI_URI_PREFIX", default=DEFAULT_URI_PREFIX)

        # Sent as the 'Server' header of every response
        self.server_name = env.str("OIOI_SERVER_NAME", default=DEFAULT_SERVER_NAME)

        # Whether GET / answers with a short welcome text
        self.register_root_service = env.bool(
            "OIOI_REGISTER_ROOT_SERVICE", default=True
        )

        # Seconds the server waits for the charging handlers before it
        # answers a request with a CPO system timeout
        self.charging_handler_timeout = env.float(
            "CHARGING_HANDLER_TIMEOUT", default=DEFAULT_HANDLER_TIMEOUT
        )

        load_shared_settings(env_path)
        env.seal()  # raise all errors at once, if any

        if self.charging_handler_timeout <= 0:
            raise InvalidSettingsValueError(
                "CPO", "CHARGING_HANDLER_TIMEOUT", self.charging_handler_timeout
            )

        self.env_dump = dict(env.dump())
        self.env_dump.update(shared_settings)

    def get_value(self, key: str) -> Any:
        if key == _SHARED_MESSAGE_LOG_JSON:
            return shared_settings[SettingKey.MESSAGE_LOG_JSON]
        if key not in _CONVERTERS:
            raise ValueError(f"Unknown setting '{key}'")
        return getattr(self, key)

    def update(self, new_settings: Dict[str, Any]) -> None:
        """
        Changes settings at runtime. Values may be given as text, the way they
        would be written in the .env file (e.g. "false" or "30").

        Raises:
            ValueError, if a setting is unknown or a value can't be converted
            InvalidSettingsValueError, if the new handler timeout is not > 0
        """
        converted: Dict[str, Any] = {}
        for key, value in new_settings.items():
            if key == _SHARED_MESSAGE_LOG_JSON:
                converted[key] = _to_bool(value)
            elif key in _CONVERTERS:
                converted[key] = _CONVERTERS[key](value)
            else:
                raise ValueError(f"Unknown setting '{key}'")

        timeout = converted.get("charging_handler_timeout")
        if timeout is not None and timeout <= 0:
            raise InvalidSettingsValueError("CPO", "CHARGING_HANDLER_TIMEOUT", timeout)

        for key, value in converted.items():
            if key == _SHARED_MESSAGE_LOG_JSON:
                shared_settings[SettingKey.MESSAGE_LOG_JSON] = value
            else:
                setattr(self, key, value)
            logger.info(f"Setting '{key}' updated to {value!r}")

    def print_settings(self):
        logger.info("OIOI CPO settings:")
        for key, value in self.env_dump.items():
            logger.info(f"{key:30}: {value}")
