"""OpenAI Chat Completions provider."""

import logging
import os
from typing import Any

from openai import AsyncOpenAI

from .base import LLMProvider, LLMResponse, register_provider

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"


@register_provider("openai")
class OpenAIProvider(LLMProvider):
    """Calls ``chat.completions.create`` with function tools.

    Works with any OpenAI-compatible endpoint through ``base_url`` or
    ``OPENAI_BASE_URL``.
    """

    def __init__(self, api_key: str | None = None, base_url: str | None = None):
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self.api_key:
            raise ValueError(
                "Missing OpenAI credentials: pass api_key or set OPENAI_API_KEY."
            )
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL", DEFAULT_BASE_URL)
        self.client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)

    async def generate(
        self,
        messages: list[dict[str, Any]],
        model: str,
        tools: list[dict[str, Any]] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        agent_config: dict[str, Any] | None = None,
        **kwargs,
    ) -> LLMResponse:
        system_prompt = (agent_config or {}).get("system_prompt")
        conversation = _with_system_prompt(messages, system_prompt)

        params: dict[str, Any] = {"model": model, "messages": conversation}
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        if tools:
            function_tools = _validate_tools_chat_completions(tools)
            if function_tools:
                params["tools"] = function_tools
            else:
                logger.warning("Dropping tools with no usable definition: %s", tools)
        params.update(kwargs)

        try:
            completion = await self.client.chat.completions.create(**params)
        except Exception as e:
            raise RuntimeError(f"OpenAI Chat Completions API call failed: {e}") from e

        if not completion.choices:
            return LLMResponse(
                content="",
                usage=_usage(completion),
                raw_output=conversation,
                model=completion.model or model,
            )

        choice = completion.choices[0]
        reply = choice.message
        conversation.append(reply.model_dump(exclude_none=True, mode="json"))
        return LLMResponse(
            content=reply.content or "",
            usage=_usage(completion),
            tool_calls=[_tool_call(call) for call in reply.tool_calls or []],
            raw_output=conversation,
            model=completion.model or model,
            stop_reason=choice.finish_reason,
        )


def _with_system_prompt(
    messages: list[dict[str, Any]] | None, system_prompt: str | None
) -> list[dict[str, Any]]:
    """Copy the conversation, prepending the system prompt unless one is present."""
    conversation = [dict(message) for message in messages or []]
    if system_prompt and not any(m.get("role") == "system" for m in conversation):
        conversation.insert(0, {"role": "system", "content": system_prompt})
    return conversation


def _tool_call(call: Any) -> dict[str, Any]:
    return {
        "call_id": call.id,
        "type": "function",
        "function": {"name": call.function.name, "arguments": call.function.arguments},
    }


def _usage(completion: Any) -> dict[str, int]:
    usage = completion.usage
    if not usage:
        return {"input_tokens": 0, "output_tokens": 0, "total_tokens": 0}
    return {
        "input_tokens": usage.prompt_tokens,
        "output_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


def _validate_tools_chat_completions(tools: list[dict[str, Any]] | None) -> list[dict[str, Any]]:
    """Normalize tool definitions to ``{"type": "function", "function": {...}}``.

    Flat ``{"name", "description", "parameters"}`` definitions are wrapped;
    nested ones pass through; entries without a name are dropped.
    """
    normalized = []
    for tool in tools or []:
        if not isinstance(tool, dict):
            continue
        if isinstance(tool.get("function"), dict):
            normalized.append(tool)
        elif tool.get("name"):
            normalized.append(
                {
                    "type": "function",
                    "function": {
                        "name": tool["name"],
                        "description": tool.get("description", ""),
                        "parameters": tool.get("parameters", {}),
                    },
                }
            )
    return normalized
