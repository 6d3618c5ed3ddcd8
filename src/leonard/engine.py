"""Turn-based relay between the Maker and the Critic."""

from __future__ import annotations

import asyncio

from loguru import logger

from .agents import AgentInvoker
from .concurrency import wait_until_stopped
from .errors import NonZeroExitError, RelayInterrupted
from .logging_utils import log_transcript
from .prompts import PromptBuilder
from .render import Renderer
from .text import byte_length, strip_ansi, truncate_forward
from .types import AgentRole, RelayPhase, TurnState

DEFAULT_MAX_TURNS = 10
DEFAULT_MAX_FORWARD_BYTES = 100_000
STDERR_TAIL_LINES = 50


class RelayEngine:
    """Alternate Maker and Critic invocations until the turn bound, a failure or an interrupt.

    ``max_turns`` counts full exchanges: with ``max_turns=N`` the Maker and the
    Critic each run exactly N times. Zero means unbounded.
    """

    def __init__(
        self,
        maker: AgentInvoker,
        critic: AgentInvoker,
        *,
        prompts: PromptBuilder,
        max_turns: int = DEFAULT_MAX_TURNS,
        max_forward_bytes: int = DEFAULT_MAX_FORWARD_BYTES,
        strip_ansi: bool = True,
        continue_prior_session: bool = False,
        renderer: Renderer | None = None,
    ) -> None:
        self._agents: dict[AgentRole, AgentInvoker] = {AgentRole.MAKER: maker, AgentRole.CRITIC: critic}
        self._prompts = prompts
        self._max_turns = max_turns
        self._max_forward_bytes = max_forward_bytes
        self._strip_ansi = strip_ansi
        self._continue_prior_session = continue_prior_session
        self._renderer = renderer or Renderer()

    def initial_state(self) -> TurnState:
        return TurnState(
            max_turns=self._max_turns,
            pending_text=self._prompts.task,
            continuation_active=self._continue_prior_session,
            critic_continuation_active=self._continue_prior_session,
        )

    async def run(self, stop_event: asyncio.Event | None = None) -> TurnState:
        """Drive the relay to Done. Raises ``RelayError`` subclasses on fatal stops."""
        stop_event = stop_event or asyncio.Event()
        state = self.initial_state()
        logger.info(
            "relay.start max_turns={} max_forward_bytes={} continue={}",
            self._max_turns,
            self._max_forward_bytes,
            self._continue_prior_session,
        )
        while not state.done:
            await self.advance(state, stop_event)
        logger.info("relay.done turns={}", state.turn_index)
        return state

    async def advance(self, state: TurnState, stop_event: asyncio.Event) -> RelayPhase:
        """Run the next invocation and apply its transition to ``state``."""
        if state.done:
            return state.phase

        role = state.current_role
        if role is AgentRole.MAKER:
            continuation = state.continuation_active
            if state.phase is RelayPhase.INIT:
                prompt = self._prompts.maker_initial()
            else:
                prompt = self._prompts.maker_followup(state.pending_text)
        else:
            continuation = state.critic_continuation_active
            prompt = self._prompts.critic(state.pending_text, continuation=continuation)

        output = await self._invoke(role, prompt, continuation, state, stop_event)

        if role is AgentRole.MAKER:
            state.continuation_active = True
            state.pending_text = self._forward(role, output)
            state.phase = RelayPhase.CRITIC
            return state.phase

        state.critic_continuation_active = True
        state.last_output = output
        state.turn_index += 1
        if state.turn_limit_reached:
            logger.info("relay.max_turns reached={}", state.max_turns)
            state.phase = RelayPhase.DONE
        else:
            state.pending_text = self._forward(role, output)
            state.phase = RelayPhase.MAKER
        return state.phase

    async def _invoke(
        self,
        role: AgentRole,
        prompt: str,
        continuation: bool,
        state: TurnState,
        stop_event: asyncio.Event,
    ) -> str:
        log = logger.bind(role=role.tag)
        if stop_event.is_set():
            self._terminate_all()
            raise RelayInterrupted(role, state.turn_index)

        log.info("relay.turn.start turn={} continuation={}", state.turn_index, continuation)
        log_transcript(_transcript_label(role, "PROMPT", state.turn_index), prompt)
        self._renderer.section(role, state.turn_index)
        try:
            result = await wait_until_stopped(
                self._agents[role].invoke(prompt, continuation=continuation),
                stop_event,
            )
        except asyncio.CancelledError:
            if not stop_event.is_set():
                raise
            self._terminate_all()
            log.warning("relay.interrupted turn={}", state.turn_index)
            raise RelayInterrupted(role, state.turn_index) from None
        finally:
            self._renderer.end_section()

        if not result.ok:
            for line in result.stderr_lines[-STDERR_TAIL_LINES:]:
                logger.bind(role=f"{role.tag}-err").error(line)
            raise NonZeroExitError(
                role,
                result.returncode,
                partial_output=result.output.text,
                stderr_lines=result.stderr_lines,
            )
        for line in result.stderr_lines:
            log.debug("stderr: {}", line)

        output = result.output.text
        if self._strip_ansi:
            output = strip_ansi(output)
        if not output:
            log.warning("relay.output.empty turn={}", state.turn_index)
        log.info("relay.turn.end turn={} bytes={}", state.turn_index, byte_length(output))
        log_transcript(_transcript_label(role, "OUTPUT", state.turn_index), output)
        return output

    def _forward(self, role: AgentRole, output: str) -> str:
        forwarded = truncate_forward(output, self._max_forward_bytes)
        if forwarded != output:
            logger.bind(role=role.tag).warning(
                "relay.forward.truncated bytes={} budget={}", byte_length(output), self._max_forward_bytes
            )
        return forwarded

    def _terminate_all(self) -> None:
        for agent in self._agents.values():
            killed = agent.terminate_all()
            if killed:
                logger.bind(role=agent.role.tag).warning("relay.terminate killed={}", killed)


def _transcript_label(role: AgentRole, kind: str, turn_index: int) -> str:
    return f"{role.value.upper()} {kind} (turn {turn_index})"
