"""Text helpers for forwarded payloads and display lines."""

from __future__ import annotations

import re

TRUNCATION_MARKER = "[...truncated...]\n"

# CSI sequences, OSC sequences (BEL or ST terminated) and two-byte escapes.
_ANSI_RE = re.compile(
    r"""
    \x1b\[[0-?]*[ -/]*[@-~]
    | \x1b\][^\x07\x1b]*(?:\x07|\x1b\\)
    | \x1b[@-Z\\-_]
    """,
    re.VERBOSE,
)

_ENCODING = "utf-8"
_ERRORS = "surrogatepass"


def byte_length(text: str) -> int:
    return len(text.encode(_ENCODING, _ERRORS))


def truncate_forward(text: str, max_bytes: int, *, marker: str = TRUNCATION_MARKER) -> str:
    """Bound ``text`` to ``max_bytes`` UTF-8 bytes, keeping its tail.

    Text that fits is returned unchanged. Otherwise the result is ``marker``
    followed by the longest suffix that fits in the remaining budget, cut at a
    character boundary so no multi-byte character is split. A budget smaller
    than the marker yields the marker's own prefix.
    """
    encoded = text.encode(_ENCODING, _ERRORS)
    if len(encoded) <= max_bytes:
        return text

    marker_bytes = marker.encode(_ENCODING, _ERRORS)
    if max_bytes <= len(marker_bytes):
        return _decode_prefix(marker_bytes, max(max_bytes, 0))

    cut = len(encoded) - (max_bytes - len(marker_bytes))
    # Skip UTF-8 continuation bytes so the suffix starts on a character.
    while cut < len(encoded) and encoded[cut] & 0xC0 == 0x80:
        cut += 1
    return marker + encoded[cut:].decode(_ENCODING, _ERRORS)


def _decode_prefix(data: bytes, limit: int) -> str:
    end = limit
    while end > 0 and end < len(data) and data[end] & 0xC0 == 0x80:
        end -= 1
    return data[:end].decode(_ENCODING, _ERRORS)


def truncate_line(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return f"{text[:max_chars]}..."


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def preview(text: str, max_chars: int = 80) -> str:
    """Single-line preview used in log messages."""
    first = text.strip().replace("\n", " ")
    return truncate_line(first, max_chars)
