import pickle

import pytest

from oioi.shared.exceptions import InvalidFormatError
from oioi.shared.messages.identifiers import (
    APIKey,
    ConnectorId,
    EVCOId,
    OperatorId,
    PartnerId,
    PaymentReference,
    RFIDId,
    SessionId,
    StationId,
    split_connector_id,
)

GENERIC_TYPES = [PartnerId, SessionId, StationId, APIKey, PaymentReference]


@pytest.mark.parametrize("identifier_type", GENERIC_TYPES)
def test_generic_identifier_is_trimmed(identifier_type):
    identifier = identifier_type.parse("  abc-123 ")
    assert str(identifier) == "abc-123"
    assert identifier_type.parse(str(identifier)) == identifier


@pytest.mark.parametrize("identifier_type", GENERIC_TYPES + [RFIDId, ConnectorId])
@pytest.mark.parametrize("text", [None, "", "   ", "\t\n", 42])
def test_invalid_texts_are_rejected(identifier_type, text):
    with pytest.raises(InvalidFormatError) as exc_info:
        identifier_type.parse(text)
    assert exc_info.value.type_name == identifier_type.type_name
    assert exc_info.value.text == text
    assert identifier_type.try_parse(text) is None


def test_invalid_format_error_is_a_value_error():
    with pytest.raises(ValueError):
        SessionId.parse("")


def test_equality_is_exact_and_per_type():
    assert PartnerId.parse("abc") == PartnerId.parse(" abc ")
    assert PartnerId.parse("abc") != PartnerId.parse("ABC")
    assert PartnerId.parse("abc") != SessionId.parse("abc")
    assert len({PartnerId.parse("abc"), PartnerId.parse("abc")}) == 1


def test_default_order_is_length_then_text():
    ids = [SessionId.parse(text) for text in ["bb", "b", "ab", "aaa", "a"]]
    assert [str(i) for i in sorted(ids)] == ["a", "b", "ab", "bb", "aaa"]
    assert SessionId.parse("z") < SessionId.parse("aa")


def test_identifiers_are_immutable():
    session_id = SessionId.parse("s1")
    with pytest.raises(AttributeError):
        session_id._text = "s2"
    with pytest.raises(AttributeError):
        del session_id._text
    assert str(session_id) == "s1"


def test_clone_and_pickle_keep_the_value():
    connector_id = ConnectorId.parse("DE*GEF*E12345678")
    clone = connector_id.clone()
    assert clone == connector_id
    assert clone is not connector_id
    assert pickle.loads(pickle.dumps(connector_id)) == connector_id


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0a1b2c3d", "0A1B2C3D"),
        ("04A1B2C3D4E5F6", "04A1B2C3D4E5F6"),
        (" 04a1b2c3d4e5f6a7b8c9 ", "04A1B2C3D4E5F6A7B8C9"),
    ],
)
def test_rfid_is_upper_cased(text, expected):
    assert str(RFIDId.parse(text)) == expected


@pytest.mark.parametrize(
    "text", ["0A1B2C3", "0A1B2C3D4", "0A1B2C3D4E5F6A7B", "ZZZZZZZZ", "0A1B 2C3D"]
)
def test_invalid_rfid(text):
    assert RFIDId.try_parse(text) is None
    with pytest.raises(InvalidFormatError):
        RFIDId.parse(text)


@pytest.mark.parametrize(
    "text, expected, provider_id",
    [
        ("DE-GDF-123456-7", "DE-GDF-123456-7", "DE-GDF"),
        ("de*gdf*c12345678*x", "DE*GDF*C12345678*X", "DE*GDF"),
        ("DEGDF1234567", "DEGDF1234567", "DEGDF"),
    ],
)
def test_evco_id(text, expected, provider_id):
    evco_id = EVCOId.parse(text)
    assert str(evco_id) == expected
    assert evco_id.provider_id == provider_id


@pytest.mark.parametrize("text", ["DE-GDF*123456-7", "D-GDF-123456", "DE-GDF-12345"])
def test_invalid_evco_id(text):
    assert EVCOId.try_parse(text) is None


@pytest.mark.parametrize(
    "text, operator_id, suffix",
    [
        ("DE*GEF*E12345678", "DE*GEF", "12345678"),
        ("DEGEF*E1", "DEGEF", "1"),
        ("DEGEFE1a*b", "DEGEF", "1a*b"),
        ("  DE*GEF*Eab  ", "DE*GEF", "ab"),
    ],
)
def test_connector_id_structure(text, operator_id, suffix):
    connector_id = ConnectorId.parse(text)
    assert connector_id.operator_id == OperatorId.parse(operator_id)
    assert connector_id.suffix == suffix
    assert str(connector_id) == text.strip()


@pytest.mark.parametrize(
    "text",
    [
        "DE*GEF",
        "DE*GEF*E",
        "D*GEF*E1",
        "DE*GEF*X1",
        "DE*GEF*E1-2",
        "xDE*GEF*E1",
        "DE*GEF*E" + "1" * 31,
    ],
)
def test_invalid_connector_id(text):
    assert ConnectorId.try_parse(text) is None
    with pytest.raises(InvalidFormatError):
        ConnectorId.parse(text)


def test_split_connector_id():
    assert split_connector_id("DE*GEF*E12345678") == ("DE*GEF", "12345678")
    with pytest.raises(ValueError):
        split_connector_id("no connector")


def test_connector_id_order_is_structural():
    texts = ["DE*GEF*E2", "DEGEF*E9", "DE*GEF*E10", "DE*ABC*E5", "DEABC*E1"]
    ordered = sorted(ConnectorId.parse(text) for text in texts)
    # operator ids by length, then text; suffixes by text
    assert [str(i) for i in ordered] == [
        "DEABC*E1",
        "DEGEF*E9",
        "DE*ABC*E5",
        "DE*GEF*E10",
        "DE*GEF*E2",
    ]


def test_connector_id_order_is_a_strict_total_order():
    ids = [
        ConnectorId.parse(text)
        for text in ["DE*GEF*E2", "DEGEF*E9", "DE*GEF*E10", "DE*GEF*E2 "]
    ]
    for a in ids:
        for b in ids:
            assert [a < b, a == b, a > b].count(True) == 1
