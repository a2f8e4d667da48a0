from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from oioi.shared.messages.result import Result


class InvalidFormatError(ValueError):
    """
    Is thrown when a text cannot be parsed into one of the identifier value
    types (see identifiers.py). The 'type_name' field names the identifier
    type, the 'text' field holds the offending input (None if no input was
    given at all).
    """

    def __init__(self, type_name: str, text: Optional[str], reason: str = ""):
        message = f"Invalid text representation of {type_name}: {text!r}"
        if reason:
            message = f"{message} ({reason})"
        ValueError.__init__(self, message)
        self.type_name = type_name
        self.text = text
        self.reason = reason


class JSONFieldError(ValueError):
    """
    Is thrown by the JSONObjectReader if a mandatory JSON property is missing
    or if a property is present but its value cannot be converted into the
    requested type. The 'key' field names the JSON property.
    """

    def __init__(self, key: str, reason: str):
        ValueError.__init__(self, f"JSON property '{key}' {reason}")
        self.key = key
        self.reason = reason


class RequestValidationError(Exception):
    """
    Is thrown by the request validators as soon as one field of an incoming
    session-start or session-stop request is missing or invalid. 'result'
    is the OIOI result the partner has to be answered with.
    """

    def __init__(self, reason: str, result: "Result"):
        Exception.__init__(self, reason)
        self.reason = reason
        self.result = result


class InvalidSettingsValueError(Exception):
    """
    Is thrown when a setting is read and the value is invalid.
    The 'entity' field provides information whether it's the CPO or the
    shared settings.
    """

    def __init__(self, entity: str, setting: str, invalid_value: Any):
        Exception.__init__(
            self, f"Invalid value {invalid_value!r} for {entity} setting {setting}"
        )
        self.entity = entity
        self.setting = setting
        self.invalid_value = invalid_value


class UnknownEventError(ValueError):
    """Is thrown when subscribing to a lifecycle event that doesn't exist"""
