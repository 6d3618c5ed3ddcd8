import json

import pytest

from leonard.events import (
    AgentMessageItem,
    AssistantEvent,
    CommandExecutionItem,
    ItemCompletedEvent,
    ReasoningItem,
    ResultEvent,
    ToolUseBlock,
    UnknownBlock,
    UnknownCriticEvent,
    UnknownItem,
    UnknownMakerEvent,
    parse_line,
)
from leonard.extract import describe_activity, extract_fragment, summarize_command_output, summarize_tool_result
from leonard.types import AgentRole


def _maker(payload: dict) -> str:
    return json.dumps(payload)


def _assistant(*blocks: dict) -> str:
    return _maker({"type": "assistant", "message": {"role": "assistant", "content": list(blocks)}})


def _codex_item(item: dict) -> str:
    return json.dumps({"type": "item.completed", "item": item})


def test_assistant_event_yields_text_blocks_in_order() -> None:
    line = _assistant(
        {"type": "text", "text": "first "},
        {"type": "tool_use", "id": "t1", "name": "Edit", "input": {}},
        {"type": "text", "text": "second"},
    )
    event = parse_line(AgentRole.MAKER, line)

    assert isinstance(event, AssistantEvent)
    fragment = extract_fragment(AgentRole.MAKER, event)
    assert fragment is not None
    assert fragment.text == "first second"
    assert fragment.kind == "text"
    assert isinstance(event.message.content[1], ToolUseBlock)


def test_assistant_event_with_only_tool_use_yields_nothing() -> None:
    event = parse_line(AgentRole.MAKER, _assistant({"type": "tool_use", "id": "t1", "name": "Bash", "input": {}}))

    assert extract_fragment(AgentRole.MAKER, event) is None
    assert describe_activity(event) == ["[Bash]"]


def test_unknown_content_block_is_ignored() -> None:
    event = parse_line(AgentRole.MAKER, _assistant({"type": "thinking", "thinking": "hmm"}, {"type": "text", "text": "ok"}))

    assert isinstance(event, AssistantEvent)
    assert isinstance(event.message.content[0], UnknownBlock)
    assert extract_fragment(AgentRole.MAKER, event).text == "ok"


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "system", "subtype": "init", "session_id": "abc"},
        {"type": "result", "result": "final", "is_error": False},
        {"type": "user", "message": {"content": [{"type": "tool_result", "tool_use_id": "t1", "content": "ok"}]}},
        {"no_type": True},
    ],
)
def test_non_assistant_maker_events_yield_nothing(payload: dict) -> None:
    event = parse_line(AgentRole.MAKER, _maker(payload))

    assert event is not None
    assert extract_fragment(AgentRole.MAKER, event) is None


def test_system_event_parses_to_unknown_arm() -> None:
    assert isinstance(parse_line(AgentRole.MAKER, _maker({"type": "system"})), UnknownMakerEvent)
    assert isinstance(parse_line(AgentRole.MAKER, _maker({"type": "result", "result": "x"})), ResultEvent)


@pytest.mark.parametrize("line", ["not json", "{", "42", '"text"', "[1, 2]", '{"type": "assistant"}'])
def test_malformed_lines_parse_to_none(line: str) -> None:
    assert parse_line(AgentRole.MAKER, line) is None
    assert extract_fragment(AgentRole.MAKER, None) is None


def test_critic_reasoning_and_agent_message_yield_fragments() -> None:
    reasoning = parse_line(AgentRole.CRITIC, _codex_item({"id": "i0", "type": "reasoning", "text": "looks fine"}))
    message = parse_line(AgentRole.CRITIC, _codex_item({"id": "i1", "type": "agent_message", "text": "LGTM"}))

    assert isinstance(reasoning, ItemCompletedEvent)
    assert isinstance(reasoning.item, ReasoningItem)
    assert isinstance(message.item, AgentMessageItem)
    assert extract_fragment(AgentRole.CRITIC, reasoning).kind == "reasoning"
    assert extract_fragment(AgentRole.CRITIC, reasoning).text == "looks fine"
    assert extract_fragment(AgentRole.CRITIC, message).text == "LGTM"


@pytest.mark.parametrize(
    "line",
    [
        json.dumps({"type": "thread.started", "thread_id": "t"}),
        json.dumps({"type": "turn.completed", "usage": {}}),
        _codex_item({"type": "agent_message", "text": ""}),
        _codex_item({"type": "reasoning"}),
        _codex_item({"type": "file_change", "changes": []}),
        _codex_item({"type": "command_execution", "command": "ls", "exit_code": 0, "aggregated_output": "a"}),
    ],
)
def test_other_critic_events_yield_nothing(line: str) -> None:
    event = parse_line(AgentRole.CRITIC, line)

    assert event is not None
    assert extract_fragment(AgentRole.CRITIC, event) is None


def test_critic_unknown_arms() -> None:
    assert isinstance(parse_line(AgentRole.CRITIC, json.dumps({"type": "turn.started"})), UnknownCriticEvent)
    event = parse_line(AgentRole.CRITIC, _codex_item({"type": "web_search", "query": "x"}))
    assert isinstance(event.item, UnknownItem)


def test_dialects_are_not_interchangeable() -> None:
    maker_line = _assistant({"type": "text", "text": "hi"})
    assert extract_fragment(AgentRole.CRITIC, parse_line(AgentRole.CRITIC, maker_line)) is None


def test_command_execution_activity_summary() -> None:
    event = parse_line(
        AgentRole.CRITIC,
        _codex_item({"type": "command_execution", "command": "pytest -q", "exit_code": 1, "output": "1 failed"}),
    )

    assert isinstance(event.item, CommandExecutionItem)
    assert describe_activity(event) == ["[exit 1] pytest -q -> 1 failed"]


def test_tool_result_activity_summary() -> None:
    line = _maker({"type": "user", "message": {"content": [{"type": "tool_result", "content": "a\nb\nc\nd"}]}})
    assert describe_activity(parse_line(AgentRole.MAKER, line)) == ["-> 4 lines"]


@pytest.mark.parametrize(
    ("content", "expected"),
    [
        (None, "done"),
        ("Short message", "Short message"),
        ("Line 1\nLine 2\nLine 3\nLine 4\nLine 5", "5 lines"),
        ([{"type": "image", "data": "..."}, {"type": "other", "value": 123}], "2 items"),
    ],
)
def test_summarize_tool_result(content: object, expected: str) -> None:
    assert summarize_tool_result(content) == expected


def test_summarize_tool_result_variants() -> None:
    long_result = summarize_tool_result("x" * 150)
    assert len(long_result) == 103
    assert long_result.endswith("...")

    texts = summarize_tool_result([{"type": "text", "text": "First message"}, {"type": "text", "text": "Second"}])
    assert "First message" in texts

    assert len(summarize_tool_result({"status": "ok", "count": 42})) <= 53


def test_summarize_command_output() -> None:
    assert summarize_command_output(None) == ""
    assert summarize_command_output("") == ""
    assert summarize_command_output("Command output") == "Command output"
    assert summarize_command_output("1\n2\n3\n4\n5") == "5 lines"
