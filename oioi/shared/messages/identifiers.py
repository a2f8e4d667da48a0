"""
This module contains the identifier value types of the OIOI protocol.

All of them wrap an immutable, trimmed text payload and are only ever
created through the parse() and try_parse() factories, so an instance is
always valid. Equality is exact (case-sensitive) payload equality. The
default order compares the payload length first and then the payload text;
ConnectorId orders structurally by operator identifier and suffix instead.

The types can be used directly as fields of pydantic models: they are
parsed from their text representation on validation and serialized back
to text in JSON mode.
"""

import functools
import re
from typing import Any, ClassVar, Optional, Tuple, Type, TypeVar

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from oioi.shared.exceptions import InvalidFormatError
from oioi.shared.validators import match_exactly_once, normalize_text

IdentifierT = TypeVar("IdentifierT", bound="Identifier")


@functools.total_ordering
class Identifier:
    """
    Base class of all identifier value types. Subclasses set 'type_name'
    (used in error messages) and may extend _validate() with their own
    format rules.
    """

    __slots__ = ("_text",)

    type_name: ClassVar[str] = "identifier"

    def __init__(self, text: Any):
        try:
            validated = self._validate(text)
        except InvalidFormatError:
            raise
        except ValueError as exc:
            raise InvalidFormatError(self.type_name, text, str(exc)) from exc
        object.__setattr__(self, "_text", validated)

    @classmethod
    def _validate(cls, text: Any) -> str:
        return normalize_text(cls.type_name, text)

    @classmethod
    def parse(cls: Type[IdentifierT], text: Any) -> IdentifierT:
        """
        Parses the given text representation.

        Raises:
            InvalidFormatError, if the text is null, empty or violates the
            format rules of the identifier type
        """
        return cls(text)

    @classmethod
    def try_parse(cls: Type[IdentifierT], text: Any) -> Optional[IdentifierT]:
        """Same as parse(), but returns None instead of raising"""
        try:
            return cls(text)
        except InvalidFormatError:
            return None

    def clone(self: IdentifierT) -> IdentifierT:
        return type(self)(self._text)

    def _sort_key(self) -> Tuple:
        return len(self._text), self._text

    def __setattr__(self, name: str, value: Any):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._text == other._text  # type: ignore[attr-defined]

    def __lt__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._sort_key() < other._sort_key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._text))

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._text!r})"

    def __reduce__(self):
        return type(self), (self._text,)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._from_model_value,
            serialization=core_schema.to_string_ser_schema(),
        )

    @classmethod
    def _from_model_value(cls: Type[IdentifierT], value: Any) -> IdentifierT:
        if isinstance(value, cls):
            return value
        return cls.parse(value)


class PartnerId(Identifier):
    """The identification of a roaming partner"""

    __slots__ = ()
    type_name = "a partner identification"


class SessionId(Identifier):
    """The identification of a charging session"""

    __slots__ = ()
    type_name = "a charging session identification"


class StationId(Identifier):
    """The identification of a charging station"""

    __slots__ = ()
    type_name = "a charging station identification"


class APIKey(Identifier):
    """The API key a partner authenticates with"""

    __slots__ = ()
    type_name = "an API key"


class PaymentReference(Identifier):
    """An opaque reference to a payment made by the user, e.g. 'bitcoins'"""

    __slots__ = ()
    type_name = "a payment reference"


# 4, 7 or 10 byte RFID UIDs as upper-case hex
_RFID_PATTERN = re.compile(r"^(?:[A-F0-9]{8}|[A-F0-9]{14}|[A-F0-9]{20})$")


class RFIDId(Identifier):
    """
    The UID of an RFID card. Lower-case hex input is accepted and upper-cased
    before it is checked against the three allowed UID lengths.
    """

    __slots__ = ()
    type_name = "an RFID identification"

    @classmethod
    def _validate(cls, text: Any) -> str:
        normalized = normalize_text(cls.type_name, text).upper()
        if not _RFID_PATTERN.match(normalized):
            raise ValueError("expected 8, 14 or 20 hexadecimal characters")
        return normalized


# e.g. DE-GDF-123456-7, DE*GDF*123456*7 or DEGDF1234567
_EVCO_ID_PATTERN = re.compile(
    r"^([A-Z]{2})([-*]?)([A-Z0-9]{3})\2([A-Z0-9]{6,9})(?:\2([A-Z0-9]))?$"
)


class EVCOId(Identifier):
    """
    An e-mobility account identifier (EVCO-Id, also known as eMAID) naming
    the contract of a driver: country code, provider id, instance and an
    optional check digit, using '-', '*' or no separator consistently.
    The text is upper-cased on parsing.
    """

    __slots__ = ()
    type_name = "an e-mobility account identification"

    @classmethod
    def _validate(cls, text: Any) -> str:
        normalized = normalize_text(cls.type_name, text).upper()
        if not _EVCO_ID_PATTERN.match(normalized):
            raise ValueError("expected <country>-<provider>-<instance>[-<check>]")
        return normalized

    @property
    def provider_id(self) -> str:
        match = _EVCO_ID_PATTERN.match(self._text)
        return f"{match.group(1)}{match.group(2)}{match.group(3)}"


_OPERATOR_ID = r"[A-Za-z]{2}\*?[A-Za-z0-9]{3}"
_OPERATOR_ID_PATTERN = re.compile(rf"^{_OPERATOR_ID}$")
# Unanchored: match_exactly_once() checks for a single full match
_CONNECTOR_ID_PATTERN = re.compile(rf"({_OPERATOR_ID})\*?E([A-Za-z0-9*]{{1,30}})")


class OperatorId(Identifier):
    """
    The identification of a charging station operator, e.g. 'DE*GEF' or
    'DEGEF': a country code, an optional '*' separator and three alphanumeric
    characters.
    """

    __slots__ = ()
    type_name = "a charging station operator identification"

    @classmethod
    def _validate(cls, text: Any) -> str:
        normalized = normalize_text(cls.type_name, text)
        if not _OPERATOR_ID_PATTERN.match(normalized):
            raise ValueError("expected <country>[*]<operator>")
        return normalized


def split_connector_id(text: str) -> Tuple[str, str]:
    """
    Splits the text of a connector identification into the operator
    identification and the suffix following 'E' (usually written '*E').

    Raises:
        ValueError, if the text does not have the structure
        <operator-id>[*]E<suffix> or if the structure is found more than once
    """
    match = match_exactly_once("connector-id", _CONNECTOR_ID_PATTERN, text)
    return match.group(1), match.group(2)


class ConnectorId(Identifier):
    """
    The identification of a connector (EVSE), e.g. 'DE*GEF*E12345678'.

    Connector identifications order structurally: first by their operator
    identification, then by their suffix. The suffix is kept exactly as given.
    """

    __slots__ = ("_operator_id", "_suffix")
    type_name = "a connector identification"

    def __init__(self, text: Any):
        super().__init__(text)
        operator_id, suffix = split_connector_id(self._text)
        object.__setattr__(self, "_operator_id", OperatorId.parse(operator_id))
        object.__setattr__(self, "_suffix", suffix)

    @classmethod
    def _validate(cls, text: Any) -> str:
        normalized = normalize_text(cls.type_name, text)
        split_connector_id(normalized)
        return normalized

    @property
    def operator_id(self) -> OperatorId:
        return self._operator_id

    @property
    def suffix(self) -> str:
        return self._suffix

    def _sort_key(self) -> Tuple:
        # the text only decides between spellings like "DE*GEF*E1" and "DE*GEFE1"
        return self._operator_id._sort_key(), self._suffix, self._text
