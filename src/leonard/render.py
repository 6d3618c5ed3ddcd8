"""Terminal renderer for relay output."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from .text import truncate_line
from .types import AgentRole, TextFragment

THINKING_PREVIEW_CHARS = 80

_ROLE_STYLES: dict[AgentRole, str] = {
    AgentRole.MAKER: "cyan",
    AgentRole.CRITIC: "magenta",
}


class Renderer:
    """Primary output: section headers, streamed agent text, tool activity."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console(highlight=False, soft_wrap=True)

    def section(self, role: AgentRole, turn_index: int) -> None:
        """Render the header that precedes one invocation's output."""
        self.console.print(
            Text(f"=== {role.value.upper()} (turn {turn_index}) ===", style=f"bold {_ROLE_STYLES[role]}")
        )

    def fragment(self, fragment: TextFragment) -> None:
        style = _ROLE_STYLES[fragment.role]
        if fragment.kind == "reasoning":
            for line in fragment.text.splitlines():
                self.console.print(
                    Text(f"  thinking: {truncate_line(line, THINKING_PREVIEW_CHARS)}", style=f"dim {style}")
                )
            return
        self.console.print(Text(fragment.text, style=style))

    def activity(self, role: AgentRole, line: str) -> None:
        self.console.print(Text(f"  {line}", style=f"bright_{_ROLE_STYLES[role]}"))

    def end_section(self) -> None:
        self.console.print()
