"""Shared relay dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class AgentRole(StrEnum):
    MAKER = "maker"
    CRITIC = "critic"

    @property
    def tag(self) -> str:
        return self.value

    @property
    def title(self) -> str:
        return self.value.capitalize()


class RelayPhase(StrEnum):
    INIT = "init"
    MAKER = "maker"
    CRITIC = "critic"
    DONE = "done"


@dataclass(frozen=True)
class TextFragment:
    """Text extracted from one structured event."""

    role: AgentRole
    text: str
    kind: str = "text"  # text|reasoning


@dataclass(frozen=True)
class CollectedOutput:
    """Ordered concatenation of every fragment from one child invocation."""

    role: AgentRole
    fragments: tuple[TextFragment, ...] = ()

    @property
    def text(self) -> str:
        return "".join(fragment.text for fragment in self.fragments)

    @property
    def size_bytes(self) -> int:
        return len(self.text.encode("utf-8", errors="surrogatepass"))


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one child process run."""

    output: CollectedOutput
    returncode: int
    stderr_lines: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@dataclass
class TurnState:
    """Mutable relay state, owned by a single RelayEngine run."""

    max_turns: int
    pending_text: str
    turn_index: int = 0
    continuation_active: bool = False
    critic_continuation_active: bool = False
    phase: RelayPhase = RelayPhase.INIT
    last_output: str = ""

    @property
    def turn_limit_reached(self) -> bool:
        return self.max_turns != 0 and self.turn_index >= self.max_turns

    @property
    def current_role(self) -> AgentRole:
        return AgentRole.CRITIC if self.phase is RelayPhase.CRITIC else AgentRole.MAKER

    @property
    def done(self) -> bool:
        return self.phase is RelayPhase.DONE
