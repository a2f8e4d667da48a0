import pytest

from oioi.shared.exceptions import JSONFieldError
from oioi.shared.messages.identifiers import SessionId
from oioi.shared.messages.json_io import JSONObjectReader, parse_json_object


def test_parse_json_object():
    assert parse_json_object(b'{"a": 1}') == {"a": 1}
    assert parse_json_object('{"a": {"b": null}}') == {"a": {"b": None}}


@pytest.mark.parametrize("body", [None, b"", b"{", b"[1, 2]", b'"text"', b"\xff\xfe"])
def test_parse_json_object_invalid(body):
    with pytest.raises(ValueError):
        parse_json_object(body)


class TestJSONObjectReader:
    @pytest.fixture(autouse=True)
    def setup_reader(self):
        self.reader = JSONObjectReader(
            {
                "session-id": " s1 ",
                "empty": "",
                "null": None,
                "user": {"identifier": "abc", "nested": "x"},
                "not-an-object": 42,
            }
        )

    def test_parse_mandatory(self):
        assert self.reader.parse_mandatory("session-id", SessionId.parse) == (
            SessionId.parse("s1")
        )

    @pytest.mark.parametrize("key", ["missing", "null"])
    def test_parse_mandatory_missing(self, key):
        with pytest.raises(JSONFieldError) as exc_info:
            self.reader.parse_mandatory(key, SessionId.parse)
        assert exc_info.value.key == key
        assert exc_info.value.reason == "missing"
        assert str(exc_info.value) == f"JSON property '{key}' missing"

    def test_parse_mandatory_invalid(self):
        with pytest.raises(JSONFieldError) as exc_info:
            self.reader.parse_mandatory("empty", SessionId.parse)
        assert exc_info.value.key == "empty"
        assert exc_info.value.reason.startswith("invalid")

    def test_parse_optional(self):
        assert self.reader.parse_optional("missing", SessionId.parse) is None
        assert self.reader.parse_optional("null", SessionId.parse) is None
        assert self.reader.parse_optional("session-id", SessionId.parse) == (
            SessionId.parse("s1")
        )
        with pytest.raises(JSONFieldError):
            self.reader.parse_optional("empty", SessionId.parse)

    def test_nested_objects_prefix_the_path(self):
        user = self.reader.parse_mandatory_object("user")
        assert user.parse_mandatory("identifier", str) == "abc"
        with pytest.raises(JSONFieldError) as exc_info:
            user.parse_mandatory("token", str)
        assert exc_info.value.key == "user/token"

    def test_nested_object_must_be_an_object(self):
        with pytest.raises(JSONFieldError) as exc_info:
            self.reader.parse_mandatory_object("not-an-object")
        assert exc_info.value.key == "not-an-object"


def test_parse_deeply_nested_json_object():
    depth = 100_000
    with pytest.raises(ValueError, match="nested too deeply"):
        parse_json_object("[" * depth + "]" * depth)
