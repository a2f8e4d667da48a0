import pytest

from oioi.cpo.controller.simulator import SimChargingHandler
from oioi.shared.messages.datatypes import User
from oioi.shared.messages.enums import (
    ChargeOutcome,
    ConnectorStatusType,
    IdentifierType,
)
from oioi.shared.messages.identifiers import ConnectorId, OperatorId, SessionId

CONNECTOR = ConnectorId.parse("DE*GEF*E12345678")
USER = User(identifier="DE-GDF-123456-7", identifier_type=IdentifierType.EVCO_ID)


@pytest.fixture
def handler():
    handler = SimChargingHandler(operators=[OperatorId.parse("DE*ABC")])
    handler.add_connector(CONNECTOR)
    return handler


@pytest.mark.asyncio
async def test_start_and_stop(handler):
    assert await handler.start(USER, CONNECTOR) == ChargeOutcome.STARTED
    assert handler.connectors[CONNECTOR] == ConnectorStatusType.OCCUPIED

    session = handler.session_at(CONNECTOR)
    assert session.user == USER

    assert await handler.stop(USER, CONNECTOR, session.session_id) == (
        ChargeOutcome.SUCCESS
    )
    assert handler.connectors[CONNECTOR] == ConnectorStatusType.AVAILABLE
    assert handler.sessions == {}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "connector_id, expected",
    [
        ("DE*XYZ*E1", ChargeOutcome.UNKNOWN_OPERATOR),
        ("DE*ABC*E1", ChargeOutcome.UNKNOWN_EVSE),
        ("DE*GEF*E1", ChargeOutcome.UNKNOWN_EVSE),
    ],
)
async def test_unknown_connectors(handler, connector_id, expected):
    connector_id = ConnectorId.parse(connector_id)
    assert await handler.start(USER, connector_id) == expected
    assert await handler.stop(USER, connector_id, SessionId.parse("s1")) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, expected",
    [
        (ConnectorStatusType.OCCUPIED, ChargeOutcome.ALREADY_IN_USE),
        (ConnectorStatusType.RESERVED, ChargeOutcome.ALREADY_IN_USE),
        (ConnectorStatusType.OFFLINE, ChargeOutcome.EVSE_ERROR),
        (ConnectorStatusType.UNKNOWN, ChargeOutcome.EVSE_ERROR),
    ],
)
async def test_start_on_unavailable_connector(handler, status, expected):
    handler.set_status(CONNECTOR, status)
    assert await handler.start(USER, CONNECTOR) == expected
    assert handler.sessions == {}


@pytest.mark.asyncio
async def test_stop_unknown_session(handler):
    assert await handler.start(USER, CONNECTOR) == ChargeOutcome.STARTED
    outcome = await handler.stop(USER, CONNECTOR, SessionId.parse("unknown"))
    assert outcome == ChargeOutcome.EVSE_ERROR
    assert handler.connectors[CONNECTOR] == ConnectorStatusType.OCCUPIED


def test_set_status_of_unknown_connector(handler):
    with pytest.raises(KeyError):
        handler.set_status(ConnectorId.parse("DE*ABC*E1"), ConnectorStatusType.OFFLINE)
