import asyncio
import json

import pytest

from leonard.collector import StreamCollector, read_lines
from leonard.types import AgentRole, TextFragment


def _text_line(text: str) -> str:
    return json.dumps({"type": "assistant", "message": {"content": [{"type": "text", "text": text}]}})


def _reader(*lines: str) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    for line in lines:
        reader.feed_data(f"{line}\n".encode())
    reader.feed_eof()
    return reader


def test_collector_skips_garbage_and_keeps_order() -> None:
    collector = StreamCollector(AgentRole.MAKER)
    lines = [
        "warning: something non-json",
        _text_line("alpha "),
        "{broken json",
        json.dumps({"type": "system", "subtype": "init"}),
        _text_line("beta "),
        "",
        "Traceback (most recent call last):",
        _text_line("gamma"),
    ]
    for line in lines:
        collector.feed(line)

    output = collector.result()
    assert output.text == "alpha beta gamma"
    assert [fragment.text for fragment in output.fragments] == ["alpha ", "beta ", "gamma"]
    assert collector.skipped_lines == 3


def test_collector_adds_no_separators() -> None:
    collector = StreamCollector(AgentRole.MAKER)
    collector.feed(_text_line("one"))
    collector.feed(_text_line("two\n"))
    collector.feed(_text_line("three"))

    assert collector.result().text == "onetwo\nthree"


def test_collector_callbacks_receive_fragments_and_activity() -> None:
    fragments: list[TextFragment] = []
    activity: list[tuple[AgentRole, str]] = []
    collector = StreamCollector(
        AgentRole.MAKER,
        on_fragment=fragments.append,
        on_activity=lambda role, line: activity.append((role, line)),
    )
    collector.feed(
        json.dumps(
            {
                "type": "assistant",
                "message": {"content": [{"type": "tool_use", "name": "Read"}, {"type": "text", "text": "done"}]},
            }
        )
    )

    assert [fragment.text for fragment in fragments] == ["done"]
    assert activity == [(AgentRole.MAKER, "[Read]")]


def test_empty_output_is_empty_string() -> None:
    collector = StreamCollector(AgentRole.CRITIC)
    assert collector.result().text == ""
    assert collector.result().size_bytes == 0


@pytest.mark.asyncio
async def test_consume_reads_stream_to_eof() -> None:
    collector = StreamCollector(AgentRole.CRITIC)
    reader = _reader(
        json.dumps({"type": "thread.started"}),
        json.dumps({"type": "item.completed", "item": {"type": "reasoning", "text": "hmm "}}),
        "garbage",
        json.dumps({"type": "item.completed", "item": {"type": "agent_message", "text": "fine"}}),
    )

    output = await collector.consume(reader)

    assert output.role is AgentRole.CRITIC
    assert output.text == "hmm fine"
    assert [fragment.kind for fragment in output.fragments] == ["reasoning", "text"]


@pytest.mark.asyncio
async def test_consume_handles_crlf_and_utf8() -> None:
    reader = asyncio.StreamReader()
    reader.feed_data(_text_line("héllo 世界").encode() + b"\r\n")
    reader.feed_eof()

    output = await StreamCollector(AgentRole.MAKER).consume(reader)
    assert output.text == "héllo 世界"


@pytest.mark.asyncio
async def test_consume_skips_overlong_lines() -> None:
    reader = asyncio.StreamReader(limit=128)
    reader.feed_data(("x" * 200 + "\n").encode())
    reader.feed_data((_text_line("ok") + "\n").encode())
    reader.feed_eof()

    collector = StreamCollector(AgentRole.MAKER)
    output = await collector.consume(reader)

    assert output.text == "ok"
    assert collector.skipped_lines >= 1


@pytest.mark.asyncio
async def test_read_lines_strips_newlines() -> None:
    assert await read_lines(_reader("error: one", "error: two")) == ["error: one", "error: two"]
