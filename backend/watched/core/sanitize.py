"""Input sanitization helpers for request payloads."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE_RE = re.compile(r"\s+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _strip_control_chars(value: str, *, allow_newlines: bool) -> str:
    return "".join(
        ch for ch in value if (ch == "\n" and allow_newlines) or unicodedata.category(ch) != "Cc"
    )


def clean_text(value: str | None, *, allow_newlines: bool = False) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    value = value.replace("\r\n", "\n").replace("\r", "\n")
    value = _strip_control_chars(value, allow_newlines=allow_newlines).strip()
    if not allow_newlines:
        return _WHITESPACE_RE.sub(" ", value)
    value = "\n".join(line.rstrip() for line in value.split("\n"))
    return _BLANK_LINES_RE.sub("\n\n", value)


def clean_single_line(value: str | None) -> str:
    return clean_text(value, allow_newlines=False)


def clean_multiline(value: str | None) -> str:
    return clean_text(value, allow_newlines=True)


def clean_optional(value: str | None) -> str | None:
    cleaned = clean_single_line(value)
    return cleaned or None


def clean_email(value: str | None) -> str:
    return clean_single_line(value).lower()
