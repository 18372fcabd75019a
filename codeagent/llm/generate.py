"""Durable LLM generation for agent turns."""

from typing import Any

from ..core.context import WorkflowContext
from ..types.types import OutputMessage, ToolCall
from .providers import LLMProvider, LLMResponse


async def llm_generate(
    ctx: WorkflowContext,
    step_key: str,
    provider: LLMProvider,
    messages: list[dict[str, Any]],
    model: str,
    tools: list[dict[str, Any]] | None = None,
    temperature: float | None = None,
    max_tokens: int | None = None,
    system_prompt: str | None = None,
) -> LLMResponse:
    """
    Run one LLM call as a durable step.

    On replay the checkpointed LLMResponse is returned without calling the
    provider again.

    Args:
        ctx: WorkflowContext for the current execution
        step_key: Stable step key for this call
        provider: LLM provider to call
        messages: Chat Completions conversation (without the system prompt)
        model: Model identifier
        tools: Optional tool definitions
        temperature: Optional sampling temperature
        max_tokens: Optional output token limit
        system_prompt: Optional system prompt injected by the provider

    Returns:
        The provider's LLMResponse
    """
    return await ctx.step.run(
        step_key,
        provider.generate,
        messages=messages,
        model=model,
        tools=tools,
        temperature=temperature,
        max_tokens=max_tokens,
        agent_config={"system_prompt": system_prompt} if system_prompt else None,
    )


def response_tool_calls(response: LLMResponse) -> list[ToolCall]:
    """Normalize provider tool calls into ToolCall models."""
    calls = []
    for raw in response.tool_calls or []:
        function = raw.get("function", {})
        calls.append(
            ToolCall(
                call_id=raw.get("call_id") or raw.get("id") or "",
                name=function.get("name", ""),
                arguments=function.get("arguments") or "{}",
            )
        )
    return calls


def response_to_output(response: LLMResponse) -> list[OutputMessage]:
    """Convert an LLMResponse into the agent's output messages."""
    output = []
    if response.content:
        output.append(OutputMessage(type="text", role="assistant", content=response.content))
    for call in response_tool_calls(response):
        output.append(OutputMessage(type="tool_call", role="assistant", content=call.name))
    return output
