"""
Field by field access to the JSON objects of incoming OIOI requests.

Unlike a pydantic model, which validates all fields at once, the reader lets
the request validators extract one property after the other and stop at the
first one that is missing or invalid, so every property maps to its own OIOI
result code.
"""

import json
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar, Union

from oioi.shared.exceptions import JSONFieldError

T = TypeVar("T")

_MISSING = object()


def parse_json_object(body: Union[str, bytes, None]) -> Dict[str, Any]:
    """
    Decodes an HTTP body into a JSON object.

    Raises:
        ValueError, if the body is empty, no valid JSON or not a JSON object
    """
    if not body:
        raise ValueError("The HTTP body is empty")
    try:
        decoded = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError(f"The HTTP body is no valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ValueError("The HTTP body is nested too deeply") from exc
    if not isinstance(decoded, dict):
        raise ValueError(
            f"The HTTP body must be a JSON object, got {type(decoded).__name__}"
        )
    return decoded


class JSONObjectReader:
    """
    Wraps a JSON object (a dict) and extracts mandatory or optional
    properties, converting them with the given parser function.

    'path' is prepended to the property names in error messages,
    e.g. 'user/' for the properties of the user object.
    """

    def __init__(self, json_object: Mapping[str, Any], path: str = ""):
        self.json_object = json_object
        self.path = path

    def _key(self, key: str) -> str:
        return f"{self.path}{key}"

    def parse_mandatory(self, key: str, parser: Callable[[Any], T]) -> T:
        """
        Raises:
            JSONFieldError, if the property is missing, null, or the parser
            raises a ValueError or TypeError
        """
        value = self.json_object.get(key, _MISSING)
        if value is _MISSING or value is None:
            raise JSONFieldError(self._key(key), "missing")
        return self._convert(key, value, parser)

    def parse_optional(self, key: str, parser: Callable[[Any], T]) -> Optional[T]:
        """
        Returns None if the property is absent (or null).

        Raises:
            JSONFieldError, if the property is present but invalid
        """
        value = self.json_object.get(key, _MISSING)
        if value is _MISSING or value is None:
            return None
        return self._convert(key, value, parser)

    def parse_mandatory_object(self, key: str) -> "JSONObjectReader":
        """Returns a reader for a nested, mandatory JSON object"""
        return self.parse_mandatory(key, self._nested_reader(key))

    def _nested_reader(self, key: str) -> Callable[[Any], "JSONObjectReader"]:
        def to_reader(value: Any) -> "JSONObjectReader":
            if not isinstance(value, Mapping):
                raise ValueError("is not a JSON object")
            return JSONObjectReader(value, path=f"{self._key(key)}/")

        return to_reader

    def _convert(self, key: str, value: Any, parser: Callable[[Any], T]) -> T:
        try:
            return parser(value)
        except (ValueError, TypeError) as exc:
            raise JSONFieldError(self._key(key), f"invalid: {exc}") from exc
