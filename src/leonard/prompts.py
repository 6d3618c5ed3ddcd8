"""Prompt framing for Maker and Critic invocations.

Framing is optional. Without it the relay forwards text verbatim, and these
builders return their input unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass

MAKER_GUIDANCE = (
    "Explain your plan first, so your peer and critic can help identify blindspots, "
    "then build it with your critic's feedback."
)

CRITIC_ROLE = """ROLE: CODE REVIEWER
You are acting as a CODE REVIEWER. Your job is to evaluate the maker's work for the task below.
Do not offer to do things. Review, comment, critique and guide the maker.
Your job is not to block the maker, but to help them make progress and point out things they may have missed.
Progress is the goal, not perfection. We work iteratively, so we can improve incrementally."""

CRITIC_CONTINUATION = """The maker has responded:

---
{maker_output}
---

Review this response.
"""


@dataclass(frozen=True)
class PromptBuilder:
    task: str
    context: str | None = None
    framed: bool = False

    def maker_initial(self) -> str:
        if not self.framed:
            return self.task
        parts = [MAKER_GUIDANCE, f"## Task\n{self.task}"]
        if self.context:
            parts.append(f"## Context\n{self.context}")
        return "\n\n".join(parts)

    def maker_followup(self, critic_output: str) -> str:
        return critic_output

    def critic(self, maker_output: str, *, continuation: bool) -> str:
        if not self.framed:
            return maker_output
        if continuation:
            return CRITIC_CONTINUATION.format(maker_output=maker_output)
        sections = [CRITIC_ROLE, f"## Original Task\n{self.task}"]
        if self.context:
            sections.append(f"## Context\n{self.context}")
        sections.append(f"## Maker's Output\n\n---\n{maker_output}\n---\n")
        return "\n\n".join(sections)
