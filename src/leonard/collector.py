"""Incremental collection of one child's structured output stream."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from loguru import logger

from .events import parse_line
from .extract import describe_activity, extract_fragment
from .text import truncate_line
from .types import AgentRole, CollectedOutput, TextFragment

PARSE_PREVIEW_CHARS = 100

FragmentCallback = Callable[[TextFragment], None]
ActivityCallback = Callable[[AgentRole, str], None]


class StreamCollector:
    """Feed output lines through the role's extractor and keep the fragments in order."""

    def __init__(
        self,
        role: AgentRole,
        *,
        on_fragment: FragmentCallback | None = None,
        on_activity: ActivityCallback | None = None,
    ) -> None:
        self.role = role
        self._on_fragment = on_fragment
        self._on_activity = on_activity
        self._fragments: list[TextFragment] = []
        self._skipped = 0
        self._log = logger.bind(role=role.tag)

    @property
    def skipped_lines(self) -> int:
        return self._skipped

    def feed(self, line: str) -> TextFragment | None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return None
        event = parse_line(self.role, line)
        if event is None:
            self._skipped += 1
            self._log.warning("stream.parse.skip line={}", truncate_line(line, PARSE_PREVIEW_CHARS))
            return None

        if self._on_activity is not None:
            for activity in describe_activity(event):
                self._on_activity(self.role, activity)

        fragment = extract_fragment(self.role, event)
        if fragment is None:
            return None
        self._fragments.append(fragment)
        if self._on_fragment is not None:
            self._on_fragment(fragment)
        return fragment

    def result(self) -> CollectedOutput:
        return CollectedOutput(self.role, tuple(self._fragments))

    async def consume(self, stream: asyncio.StreamReader) -> CollectedOutput:
        """Read ``stream`` to EOF and return the collected output."""
        while True:
            try:
                raw = await stream.readline()
            except ValueError as exc:
                # Overlong line; the reader has already discarded it.
                self._skipped += 1
                self._log.warning("stream.read.overrun error={}", exc)
                continue
            if not raw:
                break
            self.feed(raw.decode("utf-8", errors="replace"))
        return self.result()


async def read_lines(stream: asyncio.StreamReader) -> list[str]:
    """Read a plain text stream (stderr) to EOF."""
    lines: list[str] = []
    while True:
        try:
            raw = await stream.readline()
        except ValueError:
            continue
        if not raw:
            return lines
        lines.append(raw.decode("utf-8", errors="replace").rstrip("\r\n"))
