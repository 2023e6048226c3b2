"""Small string helpers."""

from __future__ import annotations

import re

_WORD = re.compile(r"[^\W_]+(?:['\u2019][^\W_]+)*")


def capitalize(text: str) -> str:
    """Title-case every word: first letter upper case, the rest lower case."""
    return _WORD.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text)


def contains_any(text: str, *args: str) -> bool:
    """Return True if any of the given substrings occurs in text."""
    return any(arg in text for arg in args)