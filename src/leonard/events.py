"""Structured event dialects emitted by the Maker and Critic agents.

The Maker (Claude Code, ``--output-format stream-json``) and the Critic
(Codex, ``exec --json``) each write one JSON object per line. Both dialects
are modelled as closed tagged unions whose discriminator falls back to an
explicit ``unknown`` arm, so unrecognized event kinds validate cleanly and are
ignored downstream. Lines that are not valid JSON objects parse to ``None``.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter, ValidationError

from .types import AgentRole

UNKNOWN = "unknown"


def _discriminate(known: frozenset[str]):
    def _tag(value: Any) -> str:
        kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
        return kind if kind in known else UNKNOWN

    return _tag


class _Event(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class _Unknown(_Event):
    model_config = ConfigDict(extra="allow", frozen=True)

    type: str | None = None


# Maker dialect: stream-json


class TextBlock(_Event):
    type: Literal["text"] = "text"
    text: str = ""


class ToolUseBlock(_Event):
    type: Literal["tool_use"] = "tool_use"
    id: str | None = None
    name: str = ""


class ToolResultBlock(_Event):
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str | None = None
    content: Any = None


class UnknownBlock(_Unknown):
    pass


ContentBlock = Annotated[
    Annotated[TextBlock, Tag("text")]
    | Annotated[ToolUseBlock, Tag("tool_use")]
    | Annotated[ToolResultBlock, Tag("tool_result")]
    | Annotated[UnknownBlock, Tag(UNKNOWN)],
    Discriminator(_discriminate(frozenset({"text", "tool_use", "tool_result"}))),
]


class Message(_Event):
    content: list[ContentBlock] = Field(default_factory=list)


class AssistantEvent(_Event):
    type: Literal["assistant"] = "assistant"
    message: Message


class UserEvent(_Event):
    type: Literal["user"] = "user"
    message: Message


class ResultEvent(_Event):
    type: Literal["result"] = "result"
    result: str | None = None
    is_error: bool = False


class UnknownMakerEvent(_Unknown):
    pass


StreamJsonEvent = Annotated[
    Annotated[AssistantEvent, Tag("assistant")]
    | Annotated[UserEvent, Tag("user")]
    | Annotated[ResultEvent, Tag("result")]
    | Annotated[UnknownMakerEvent, Tag(UNKNOWN)],
    Discriminator(_discriminate(frozenset({"assistant", "user", "result"}))),
]


# Critic dialect: JSON lines


class ReasoningItem(_Event):
    type: Literal["reasoning"] = "reasoning"
    text: str | None = None


class AgentMessageItem(_Event):
    type: Literal["agent_message"] = "agent_message"
    text: str | None = None


class CommandExecutionItem(_Event):
    type: Literal["command_execution"] = "command_execution"
    command: str | None = None
    exit_code: int | None = None
    output: str | None = Field(default=None, alias="aggregated_output")

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)


class UnknownItem(_Unknown):
    pass


CriticItem = Annotated[
    Annotated[ReasoningItem, Tag("reasoning")]
    | Annotated[AgentMessageItem, Tag("agent_message")]
    | Annotated[CommandExecutionItem, Tag("command_execution")]
    | Annotated[UnknownItem, Tag(UNKNOWN)],
    Discriminator(_discriminate(frozenset({"reasoning", "agent_message", "command_execution"}))),
]


class ItemCompletedEvent(_Event):
    type: Literal["item.completed"] = "item.completed"
    item: CriticItem


class UnknownCriticEvent(_Unknown):
    pass


JsonLineEvent = Annotated[
    Annotated[ItemCompletedEvent, Tag("item.completed")] | Annotated[UnknownCriticEvent, Tag(UNKNOWN)],
    Discriminator(_discriminate(frozenset({"item.completed"}))),
]

RawEvent: TypeAlias = (
    AssistantEvent
    | UserEvent
    | ResultEvent
    | UnknownMakerEvent
    | ItemCompletedEvent
    | UnknownCriticEvent
)

_ADAPTERS: dict[AgentRole, TypeAdapter[Any]] = {
    AgentRole.MAKER: TypeAdapter(StreamJsonEvent),
    AgentRole.CRITIC: TypeAdapter(JsonLineEvent),
}


def parse_line(role: AgentRole, line: str) -> RawEvent | None:
    """Parse one output line in ``role``'s dialect, or return None if malformed."""
    try:
        return _ADAPTERS[role].validate_json(line)
    except ValidationError:
        return None
