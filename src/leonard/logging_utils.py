"""Runtime logging helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import loguru
from loguru import logger

DEFAULT_ROLE = "system"
TRANSCRIPT_KEY = "transcript"

_STDERR_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {extra[role]:<6} | {message}"
_TRANSCRIPT_FORMAT = "\n=== {extra[label]} [{time:YYYY-MM-DD[T]HH:mm:ssZ}] ===\n{message}\n"
_CONFIGURED: tuple[str, Path | None] | None = None


def _is_transcript(record: loguru.Record) -> bool:
    return TRANSCRIPT_KEY in record["extra"]


def _is_diagnostic(record: loguru.Record) -> bool:
    return TRANSCRIPT_KEY not in record["extra"]


def configure_logging(*, level: str = "INFO", log_file: Path | None = None) -> None:
    """Configure process-level logging once.

    Diagnostics go to stderr tagged with the agent role. When ``log_file`` is
    given, transcript records (prompts and outputs) are appended to it.
    """
    global _CONFIGURED
    if _CONFIGURED == (level, log_file):
        return

    logger.remove()
    logger.configure(extra={"role": DEFAULT_ROLE})
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=_STDERR_FORMAT,
        filter=_is_diagnostic,
        backtrace=False,
        diagnose=False,
    )
    if log_file is not None:
        logger.add(
            log_file,
            level="INFO",
            format=_TRANSCRIPT_FORMAT,
            filter=_is_transcript,
            encoding="utf-8",
            backtrace=False,
            diagnose=False,
        )
    _CONFIGURED = (level, log_file)


def log_transcript(label: str, content: str) -> None:
    """Record one prompt or output in the transcript file, if configured."""
    logger.bind(**{TRANSCRIPT_KEY: True, "label": label}).info(content)
