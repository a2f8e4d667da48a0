"""
This module contains the data records exchanged with the OIOI partner:
users, connectors, connector status updates and charging sessions.

All classes are subclassed from our pydantic BaseModel, so they are immutable
and validated on instantiation. Pydantic's Field class maps the pythonic
field names to the hyphenated JSON property names of OIOI via 'alias'.
"""

import functools
import json
import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import Field, ValidationError, field_serializer, model_validator

from oioi.shared.messages import BaseModel
from oioi.shared.messages.enums import (
    ConnectorStatusType,
    ConnectorType,
    IdentifierType,
)
from oioi.shared.messages.identifiers import ConnectorId, PartnerId, SessionId
from oioi.shared.validators import normalize_text

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound="JSONRecord")


class JSONRecord(BaseModel):
    """Adds the OIOI JSON codec to a record"""

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def parse(
        cls: Type[RecordT], record_json: Union[str, bytes, Mapping[str, Any]]
    ) -> RecordT:
        """
        Raises:
            ValueError (pydantic's ValidationError is one), if the JSON is
            malformed or a mandatory property is missing or invalid
        """
        if isinstance(record_json, (str, bytes)):
            return cls.model_validate_json(record_json)
        return cls.model_validate(record_json)

    @classmethod
    def try_parse(
        cls: Type[RecordT], record_json: Union[str, bytes, Mapping[str, Any]]
    ) -> Optional[RecordT]:
        try:
            return cls.parse(record_json)
        except (ValidationError, ValueError) as exc:
            logger.debug(f"Could not parse {cls.__name__}: {exc}")
            return None

    def to_utf8_bytes(self) -> bytes:
        return json.dumps(self.to_json()).encode("utf-8")


@functools.total_ordering
class User(JSONRecord):
    """
    The user (driver) a session-start or session-stop request is made for.

    Two users are equal if identifier and identifier type are equal; the
    token is not part of the identity.
    """

    identifier: str
    identifier_type: IdentifierType = Field(..., alias="identifier-type")
    # Only meaningful for identifier type 'username'
    token: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def parse_wire_texts(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        values = dict(values)
        for key in ("identifier-type", "identifier_type"):
            if isinstance(values.get(key), str):
                values[key] = IdentifierType.parse(values[key])
        return values

    @model_validator(mode="after")
    def check_user(self) -> "User":
        normalize_text("identifier", self.identifier)
        if self.token is not None and self.identifier_type != IdentifierType.USERNAME:
            raise ValueError("A token is only allowed for 'username' identifiers")
        return self

    def _sort_key(self):
        return self.identifier, list(IdentifierType).index(self.identifier_type)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self) -> int:
        return hash((self.identifier, self.identifier_type))

    def __str__(self) -> str:
        text = f"{self.identifier} ({self.identifier_type.as_text()})"
        if self.token:
            text += f" + {self.token}"
        return text


class StartEndDateTime(JSONRecord):
    """A time interval whose end may still be open"""

    start: datetime
    stop: Optional[datetime] = None

    @model_validator(mode="after")
    def check_order(self) -> "StartEndDateTime":
        if self.stop is not None and self.stop < self.start:
            raise ValueError(f"Interval stop {self.stop} is before start {self.start}")
        return self


@functools.total_ordering
class Connector(JSONRecord):
    """A connector (EVSE) of a charging station and its maximum speed in kW"""

    id: ConnectorId
    name: ConnectorType
    speed: Decimal

    @model_validator(mode="before")
    @classmethod
    def parse_connector_type(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(values.get("name"), str):
            values = dict(values)
            values["name"] = ConnectorType.parse(values["name"])
        return values

    @field_serializer("speed")
    def serialize_speed(self, speed: Decimal) -> str:
        return str(speed)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Connector):
            return NotImplemented
        return self.id < other.id


@functools.total_ordering
class ConnectorStatus(JSONRecord):
    """The status of a connector at a point in time"""

    id: ConnectorId = Field(..., alias="connector-id")
    status: ConnectorStatusType
    timestamp: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def parse_status_type(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(values.get("status"), str):
            values = dict(values)
            values["status"] = ConnectorStatusType.parse(values["status"])
        return values

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ConnectorStatus):
            return NotImplemented
        if self.id != other.id:
            return self.id < other.id
        if self.timestamp != other.timestamp:
            if self.timestamp is None or other.timestamp is None:
                return self.timestamp is None
            return self.timestamp < other.timestamp
        # same connector and time, the status decides
        statuses = list(ConnectorStatusType)
        return statuses.index(self.status) < statuses.index(other.status)

    def __str__(self) -> str:
        return f"{self.id} -> {self.status.as_text()}"


@functools.total_ordering
class Session(JSONRecord):
    """
    A charging session. Connector id, user and session id are mandatory,
    everything else is optional. Sessions are identified and ordered by
    their id alone.
    """

    id: SessionId = Field(..., alias="session-id")
    user: User
    connector_id: ConnectorId = Field(..., alias="connector-id")
    session_interval: Optional[StartEndDateTime] = Field(
        None, alias="session-interval"
    )
    charging_interval: Optional[StartEndDateTime] = Field(
        None, alias="charging-interval"
    )
    # kWh
    energy_consumed: Optional[Decimal] = Field(None, ge=0, alias="energy-consumed")
    partner_identifier: Optional[PartnerId] = Field(None, alias="partner-identifier")

    @field_serializer("energy_consumed")
    def serialize_energy(self, energy: Optional[Decimal]) -> Optional[float]:
        return None if energy is None else float(energy)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Session):
            return NotImplemented
        return self.id < other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return f"{self.id} for {self.user.identifier} at {self.connector_id}"
