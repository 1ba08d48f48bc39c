"""
Utility functions to parse and sanitize values from requests and env files.
"""
from typing import Any
import re

# <...> tags, including unterminated ones at end of input
_TAGS = re.compile(r"<[^>]*>?")
_QUOTES = {'"': "&#34;", "'": "&#39;"}


def sanitize(v: Any) -> Any:
    """
    Strip tags and encode quotes in request strings. Lists and dicts are
    sanitized element-wise, other values pass through untouched.
    """
    if v is None:
        return None
    if isinstance(v, str):
        s = _TAGS.sub("", v)
        for quote, entity in _QUOTES.items():
            s = s.replace(quote, entity)
        return s
    if isinstance(v, list):
        return [sanitize(x) for x in v]
    if isinstance(v, dict):
        return {k: sanitize(x) for k, x in v.items()}
    return v


def clean(v: Any, *, empty_to_none: bool = True) -> str | None:
    """Helper cleans strings."""
    if v is None:
        return None
    if not isinstance(v, str):
        v = str(v)
    s = v.strip()
    if empty_to_none and s == "":
        return None
    return s

