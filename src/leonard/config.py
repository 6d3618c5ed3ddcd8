"""Configuration management for leonard."""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .agents import DEFAULT_CRITIC_BINARY, DEFAULT_MAKER_BINARY

CONTEXT_FILE_NAME = "leonard.md"
ENV_FILE_NAME = ".env"


class RelaySettings(BaseSettings):
    """Relay settings, read from ``LEONARD_*`` variables and the workspace ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="LEONARD_",
        case_sensitive=False,
        env_file=ENV_FILE_NAME,
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Relay
    working_directory: Path | None = Field(default=None, description="Working directory for both agents")
    max_turns: int = Field(default=10, ge=0, description="Maximum Maker/Critic exchanges, 0 for unbounded")
    max_forward_bytes: int = Field(default=100_000, ge=0, description="Byte budget for relayed text")
    strip_ansi: bool = Field(default=True, description="Strip ANSI escape codes from collected output")
    continue_prior_session: bool = Field(default=False, description="Resume the previous agent sessions")
    frame_prompts: bool = Field(default=False, description="Wrap prompts in the review framing")
    preflight: bool = Field(default=True, description="Check binaries and working directory before starting")

    # Agents
    maker_binary: str = Field(default=DEFAULT_MAKER_BINARY, description="Maker executable")
    critic_binary: str = Field(default=DEFAULT_CRITIC_BINARY, description="Critic executable")
    anthropic_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LEONARD_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LEONARD_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_file: Path | None = Field(default=None, description="Append prompts and responses to this file")

    @property
    def cwd(self) -> Path:
        return (self.working_directory or Path.cwd()).resolve()


def load_settings(workspace: Path | None = None, **overrides: object) -> RelaySettings:
    """Load settings for ``workspace``, applying non-None ``overrides`` on top."""
    root = (workspace or Path.cwd()).resolve()
    settings = RelaySettings(_env_file=root / ENV_FILE_NAME)  # type: ignore[call-arg]
    updates: dict[str, object] = {key: value for key, value in overrides.items() if value is not None}
    if workspace is not None:
        updates["working_directory"] = root
    if updates:
        settings = settings.model_copy(update=updates)
    return settings


def read_context_file(workspace: Path) -> str | None:
    """Read the optional ``leonard.md`` context file from the workspace."""
    path = workspace / CONTEXT_FILE_NAME
    if not path.is_file():
        return None
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("config.context.unreadable path={} error={}", path, exc)
        return None
    return content if content.strip() else None
