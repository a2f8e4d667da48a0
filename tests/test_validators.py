import re

import pytest

from oioi.shared.validators import match_exactly_once, normalize_text


def test_normalize_text():
    assert normalize_text("dummy", "  abc \t") == "abc"

    for invalid in (None, "", "   ", 42, ["abc"]):
        with pytest.raises(ValueError):
            normalize_text("dummy", invalid)


def test_match_exactly_once():
    pattern = re.compile(r"([A-Z]{2})\*E([0-9]+)")

    match = match_exactly_once("dummy", pattern, "DE*E123")
    assert match.group(1) == "DE"
    assert match.group(2) == "123"

    with pytest.raises(ValueError):
        # found twice
        match_exactly_once("dummy", pattern, "DE*E123DE*E456")

    with pytest.raises(ValueError):
        # found, but not covering the whole text
        match_exactly_once("dummy", pattern, "xDE*E123")

    with pytest.raises(ValueError):
        match_exactly_once("dummy", pattern, "nothing")
