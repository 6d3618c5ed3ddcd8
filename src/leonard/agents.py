"""Invocation recipes for the Maker and Critic agents."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from loguru import logger

from .process import ProcessRunner
from .text import preview
from .types import AgentRole, ProcessResult

DEFAULT_MAKER_BINARY = "claude"
DEFAULT_CRITIC_BINARY = "codex"


@dataclass(frozen=True)
class AgentRecipe:
    """How to invoke one agent role for a prompt."""

    role: AgentRole
    binary: str
    api_key_env: str
    api_key: str | None = None

    def argv(self, prompt: str, *, continuation: bool) -> list[str]:
        if self.role is AgentRole.MAKER:
            return self._maker_argv(prompt, continuation)
        return self._critic_argv(prompt, continuation)

    def _maker_argv(self, prompt: str, continuation: bool) -> list[str]:
        argv = [
            self.binary,
            "-p",
            "--verbose",
            "--output-format",
            "stream-json",
            "--dangerously-skip-permissions",
            "--permission-mode",
            "acceptEdits",
        ]
        if continuation:
            argv.append("--continue")
        argv.append(prompt)
        return argv

    def _critic_argv(self, prompt: str, continuation: bool) -> list[str]:
        argv = [self.binary, "exec", "--skip-git-repo-check"]
        if continuation:
            argv.extend(["resume", "--last", "--json", prompt])
        else:
            argv.extend(["--sandbox", "read-only", "--json", prompt])
        return argv

    def env_overlay(self) -> dict[str, str]:
        if self.api_key:
            return {self.api_key_env: self.api_key}
        return {}


def maker_recipe(binary: str = DEFAULT_MAKER_BINARY, api_key: str | None = None) -> AgentRecipe:
    return AgentRecipe(AgentRole.MAKER, binary, "ANTHROPIC_API_KEY", api_key)


def critic_recipe(binary: str = DEFAULT_CRITIC_BINARY, api_key: str | None = None) -> AgentRecipe:
    return AgentRecipe(AgentRole.CRITIC, binary, "OPENAI_API_KEY", api_key)


class AgentInvoker(Protocol):
    role: AgentRole

    async def invoke(self, prompt: str, *, continuation: bool) -> ProcessResult: ...

    def terminate_all(self) -> int: ...


class AgentProcess:
    """Bind a recipe to a process runner and a working directory."""

    def __init__(self, recipe: AgentRecipe, runner: ProcessRunner, *, cwd: Path | None = None) -> None:
        self.role = recipe.role
        self.recipe = recipe
        self.runner = runner
        self.cwd = cwd

    async def invoke(self, prompt: str, *, continuation: bool) -> ProcessResult:
        logger.bind(role=self.role.tag).info(
            "agent.invoke continuation={} prompt={}", continuation, preview(prompt)
        )
        return await self.runner.run(
            self.recipe.argv(prompt, continuation=continuation),
            cwd=self.cwd,
            env=self.recipe.env_overlay(),
        )

    def terminate_all(self) -> int:
        return self.runner.terminate_all()
