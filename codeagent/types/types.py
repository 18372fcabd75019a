"""Shared types for agent turns and their outputs."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class ToolCall(BaseModel):
    """A function call requested by the model."""

    call_id: str
    name: str
    arguments: str = "{}"


class ToolResult(BaseModel):
    """Text returned to the model for a tool call."""

    call_id: str
    name: str
    output: str


class OutputMessage(BaseModel):
    """One output item of an agent turn.

    ``content`` is either a plain string or a list of text segments.
    """

    type: Literal["text", "tool_call", "tool_result"] = "text"
    role: Literal["assistant", "user", "tool"] = "assistant"
    content: str | list[str] = ""


class Usage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


class AgentResult(BaseModel):
    """Result of one agent turn: a single LLM call and the tools it invoked."""

    agent_name: str
    turn: int
    output: list[OutputMessage] = Field(default_factory=list)
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_results: list[ToolResult] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
    stop_reason: str | None = None

    def to_messages(self) -> list[dict[str, Any]]:
        """Render this turn as Chat Completions messages for the next turn."""
        text = "".join(
            segment
            for message in self.output
            if message.type == "text"
            for segment in (
                message.content if isinstance(message.content, list) else [message.content]
            )
        )
        # Content may be null only alongside tool calls
        assistant: dict[str, Any] = {"role": "assistant", "content": text}
        if self.tool_calls:
            assistant["content"] = text or None
            assistant["tool_calls"] = [
                {
                    "id": call.call_id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments},
                }
                for call in self.tool_calls
            ]
        messages = [assistant]
        for result in self.tool_results:
            messages.append(
                {"role": "tool", "tool_call_id": result.call_id, "content": result.output}
            )
        return messages
