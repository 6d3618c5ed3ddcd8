"""Reduce parsed agent events to forwardable text and display summaries."""

from __future__ import annotations

import json
from typing import Any

from .events import (
    AgentMessageItem,
    AssistantEvent,
    CommandExecutionItem,
    ItemCompletedEvent,
    RawEvent,
    ReasoningItem,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserEvent,
)
from .text import truncate_line
from .types import AgentRole, TextFragment

SUMMARY_MAX_LINES = 3
SUMMARY_MAX_CHARS = 100


def extract_fragment(role: AgentRole, event: RawEvent | None) -> TextFragment | None:
    """Return the forwardable text carried by ``event``, if any."""
    if isinstance(event, AssistantEvent):
        text = "".join(block.text for block in event.message.content if isinstance(block, TextBlock))
        return TextFragment(role, text) if text else None
    if isinstance(event, ItemCompletedEvent):
        item = event.item
        if isinstance(item, ReasoningItem) and item.text:
            return TextFragment(role, item.text, kind="reasoning")
        if isinstance(item, AgentMessageItem) and item.text:
            return TextFragment(role, item.text)
    return None


def describe_activity(event: RawEvent | None) -> list[str]:
    """Summarize tool and command activity for display. Never forwarded."""
    lines: list[str] = []
    if isinstance(event, AssistantEvent):
        for block in event.message.content:
            if isinstance(block, ToolUseBlock):
                lines.append(f"[{block.name}]")
    elif isinstance(event, UserEvent):
        for block in event.message.content:
            if isinstance(block, ToolResultBlock):
                lines.append(f"-> {summarize_tool_result(block.content)}")
    elif isinstance(event, ItemCompletedEvent) and isinstance(event.item, CommandExecutionItem):
        item = event.item
        if item.command:
            exit_code = item.exit_code if item.exit_code is not None else 0
            summary = summarize_command_output(item.output)
            if summary:
                lines.append(f"[exit {exit_code}] {truncate_line(item.command, 40)} -> {truncate_line(summary, 30)}")
            else:
                lines.append(f"[exit {exit_code}] {truncate_line(item.command, 60)}")
    return lines


def summarize_tool_result(content: Any) -> str:
    if content is None:
        return "done"
    if isinstance(content, str):
        return _summarize_text(content)
    if isinstance(content, list):
        parts = [
            part["text"]
            for part in content
            if isinstance(part, dict) and part.get("type") == "text" and isinstance(part.get("text"), str)
        ]
        if parts:
            return _summarize_text(" ".join(parts))
        return f"{len(content)} items"
    return truncate_line(json.dumps(content, separators=(",", ":")), 50)


def summarize_command_output(output: str | None) -> str:
    if not output:
        return ""
    return _summarize_text(output)


def _summarize_text(text: str) -> str:
    lines = text.splitlines()
    if len(lines) <= SUMMARY_MAX_LINES:
        return truncate_line(text, SUMMARY_MAX_CHARS)
    return f"{len(lines)} lines"