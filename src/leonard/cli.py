"""leonard CLI."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import typer
from loguru import logger

from .bootstrap import build_engine, build_recipes, run_relay
from .config import load_settings
from .errors import ConfigurationError, EmptyTaskError, LeonardError, RelayInterrupted
from .logging_utils import configure_logging
from .preflight import run_preflight

EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="leonard",
    help="Relay text between a Maker and a Critic agent.",
    add_completion=False,
)


def _normalize_task(task: str) -> str:
    stripped = task.strip()
    if not stripped:
        raise EmptyTaskError("task must not be empty")
    return stripped


@app.command()
def relay(
    task: str = typer.Option(..., "--task", "-t", help="Task to give the Maker"),
    cwd: Path | None = typer.Option(None, "--cwd", help="Working directory for both agents"),  # noqa: B008
    max_turns: int | None = typer.Option(None, "--max-turns", min=0, help="Maximum exchanges (0 = unlimited)"),
    strip_ansi: bool | None = typer.Option(
        None, "--strip-ansi/--no-strip-ansi", help="Strip ANSI escape codes from output"
    ),
    max_forward_bytes: int | None = typer.Option(
        None, "--max-forward-bytes", min=0, help="Max bytes of output to forward between agents"
    ),
    continue_session: bool = typer.Option(False, "--continue", "-c", help="Resume the previous agent sessions"),
    log_file: Path | None = typer.Option(None, "--log-file", help="Log prompts and responses to a file"),  # noqa: B008
    frame_prompts: bool | None = typer.Option(
        None, "--frame-prompts/--no-frame-prompts", help="Wrap prompts in the review framing"
    ),
    skip_preflight: bool = typer.Option(False, "--skip-preflight", help="Skip binary and directory checks"),
    log_level: str | None = typer.Option(None, "--log-level", help="Diagnostic log level"),
) -> None:
    """Run the Maker/Critic relay for one task."""

    settings = load_settings(
        cwd,
        max_turns=max_turns,
        strip_ansi=strip_ansi,
        max_forward_bytes=max_forward_bytes,
        continue_prior_session=continue_session or None,
        log_file=log_file,
        frame_prompts=frame_prompts,
        preflight=False if skip_preflight else None,
        log_level=log_level,
    )
    configure_logging(level=settings.log_level, log_file=settings.log_file)

    try:
        task_text = _normalize_task(task)
        logger.info("relay.task {}", task_text)
        if settings.preflight:
            run_preflight(settings.cwd, list(build_recipes(settings)), dict(os.environ))
        engine = build_engine(settings, task_text)
        state = asyncio.run(run_relay(engine))
    except RelayInterrupted as exc:
        logger.warning("relay.stopped reason={}", exc)
        raise typer.Exit(EXIT_INTERRUPTED) from exc
    except ConfigurationError as exc:
        logger.error("relay.config.error {}", exc)
        raise typer.Exit(EXIT_FAILURE) from exc
    except LeonardError as exc:
        logger.error("relay.failed {}", exc)
        raise typer.Exit(EXIT_FAILURE) from exc

    logger.info("relay.complete turns={}", state.turn_index)
