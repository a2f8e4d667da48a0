"""
This module contains functions used by the identifier value types and by
various pydantic validators throughout the data records. Saves duplicated code.
"""

import re
from typing import Any, Pattern


def normalize_text(var_name: str, text: Any) -> str:
    """
    Trims the given text and makes sure something is left afterwards.

    var_name
        Name of the value being checked, used in the error message
    text
        The raw input, usually taken from a JSON property

    Raises:
        ValueError, if the text is None, not a string, empty or only whitespace
    """
    if text is None:
        raise ValueError(f"{var_name} must not be null")
    if not isinstance(text, str):
        raise ValueError(f"{var_name} must be a string, got {type(text).__name__}")
    trimmed = text.strip()
    if not trimmed:
        raise ValueError(f"{var_name} must not be empty")
    return trimmed


def match_exactly_once(
    var_name: str, pattern: Pattern[str], text: str
) -> "re.Match[str]":
    """
    Returns the single match of the given pattern on the whole text.

    A full match can only happen once; an additional scan for further matches
    rejects inputs an unanchored pattern would find several times.
    """
    matches = list(pattern.finditer(text))
    if len(matches) != 1 or matches[0].group(0) != text:
        raise ValueError(
            f"{var_name} must match {pattern.pattern} exactly once, "
            f"found {len(matches)} matches"
        )
    return matches[0]
