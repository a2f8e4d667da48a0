import json

import pytest

from oioi.cpo.controller.simulator import SimChargingHandler
from oioi.cpo.cpo_settings import Config
from oioi.cpo.server import CPOServer
from oioi.shared.messages.identifiers import ConnectorId
from oioi.shared.settings import SettingKey, shared_settings

MOCK_CONNECTOR_ID = "DE*GEF*E12345678"


@pytest.fixture(autouse=True)
def reset_shared_settings():
    shared_settings[SettingKey.MESSAGE_LOG_JSON] = True
    yield
    shared_settings[SettingKey.MESSAGE_LOG_JSON] = True


@pytest.fixture
def config():
    return Config(log_level="DEBUG", charging_handler_timeout=0.5)


@pytest.fixture
def sim_handler():
    handler = SimChargingHandler()
    handler.add_connector(ConnectorId.parse(MOCK_CONNECTOR_ID))
    return handler


@pytest.fixture
def cpo_server(config):
    return CPOServer(config)


@pytest.fixture
def session_start_json():
    return {
        "session-start": {
            "user": {"identifier-type": "evco-id", "identifier": "DE-GDF-123456-7"},
            "connector-id": MOCK_CONNECTOR_ID,
            "payment-reference": "bitcoins",
        }
    }


@pytest.fixture
def session_stop_json():
    return {
        "session-stop": {
            "user": {"identifier-type": "evco-id", "identifier": "DE-GDF-123456-7"},
            "connector-id": MOCK_CONNECTOR_ID,
            "session-id": "f1c2d3e4",
        }
    }


@pytest.fixture
def as_body():
    """Serializes a JSON object into an HTTP body"""

    def _as_body(json_object) -> bytes:
        return json.dumps(json_object).encode("utf-8")

    return _as_body
