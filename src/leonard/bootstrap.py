"""Relay bootstrap helpers."""

from __future__ import annotations

import asyncio
import signal

from loguru import logger

from .agents import AgentProcess, AgentRecipe, critic_recipe, maker_recipe
from .config import RelaySettings, read_context_file
from .engine import RelayEngine
from .process import ProcessRunner
from .prompts import PromptBuilder
from .render import Renderer
from .types import TurnState

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def build_recipes(settings: RelaySettings) -> tuple[AgentRecipe, AgentRecipe]:
    return (
        maker_recipe(settings.maker_binary, settings.anthropic_api_key),
        critic_recipe(settings.critic_binary, settings.openai_api_key),
    )


def build_engine(settings: RelaySettings, task: str, *, renderer: Renderer | None = None) -> RelayEngine:
    """Wire recipes, runners and the renderer into a relay engine for ``task``."""
    renderer = renderer or Renderer()
    cwd = settings.cwd
    context = read_context_file(cwd) if settings.frame_prompts else None
    agents = [
        AgentProcess(
            recipe,
            ProcessRunner(recipe.role, on_fragment=renderer.fragment, on_activity=renderer.activity),
            cwd=cwd,
        )
        for recipe in build_recipes(settings)
    ]
    maker, critic = agents
    return RelayEngine(
        maker,
        critic,
        prompts=PromptBuilder(task, context=context, framed=settings.frame_prompts),
        max_turns=settings.max_turns,
        max_forward_bytes=settings.max_forward_bytes,
        strip_ansi=settings.strip_ansi,
        continue_prior_session=settings.continue_prior_session,
        renderer=renderer,
    )


async def run_relay(engine: RelayEngine) -> TurnState:
    """Run the relay with SIGINT and SIGTERM wired to its stop event."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _request_stop(sig: signal.Signals) -> None:
        logger.warning("relay.signal name={}", sig.name)
        stop_event.set()

    for sig in STOP_SIGNALS:
        loop.add_signal_handler(sig, _request_stop, sig)
    try:
        return await engine.run(stop_event)
    finally:
        for sig in STOP_SIGNALS:
            loop.remove_signal_handler(sig)
