"""Provider interface and registry for LLM calls."""

import importlib
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

_PROVIDER_REGISTRY: dict[str, type["LLMProvider"]] = {}

# Built-in providers, imported on first lookup so their SDK loads lazily
_BUILTIN_PROVIDER_MODULES = {"openai": "openai"}


def register_provider(name: str):
    """Class decorator that makes a provider available to ``get_provider(name)``.

    Example::

        @register_provider("my-llm")
        class MyProvider(LLMProvider):
            ...
    """

    def decorator(cls: type["LLMProvider"]) -> type["LLMProvider"]:
        _PROVIDER_REGISTRY[name.lower()] = cls
        return cls

    return decorator


class LLMResponse(BaseModel):
    """One model reply.

    ``tool_calls`` entries have the shape
    ``{"call_id", "type": "function", "function": {"name", "arguments"}}`` where
    ``arguments`` is the raw JSON string produced by the model.
    """

    content: str | None = None
    usage: dict[str, Any] | None = Field(default_factory=dict)
    tool_calls: list[dict[str, Any]] | None = Field(default_factory=list)
    raw_output: list[dict[str, Any]] | None = Field(default_factory=list)
    model: str | None = None
    stop_reason: str | None = None


class LLMProvider(ABC):
    @abstractmethod
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
        """Send one chat request.

        Args:
            messages: Conversation in Chat Completions format, without the system prompt
            model: Model identifier
            tools: Tool definitions (``Tool.to_llm_tool_definition`` format)
            temperature: Sampling temperature, provider default when None
            max_tokens: Output token limit, provider default when None
            agent_config: Extra agent settings; ``system_prompt`` is prepended
            **kwargs: Passed through to the provider SDK

        Raises:
            RuntimeError: If the provider call fails
        """
        ...


def get_provider(provider_name: str, **kwargs) -> LLMProvider:
    """Instantiate a registered provider by name (case-insensitive).

    Raises:
        ValueError: If no provider is registered under that name
    """
    name = provider_name.lower()
    if name not in _PROVIDER_REGISTRY and name in _BUILTIN_PROVIDER_MODULES:
        importlib.import_module(f"{__package__}.{_BUILTIN_PROVIDER_MODULES[name]}")

    provider_class = _PROVIDER_REGISTRY.get(name)
    if provider_class is None:
        available = ", ".join(sorted(set(_PROVIDER_REGISTRY) | set(_BUILTIN_PROVIDER_MODULES)))
        raise ValueError(
            f"Unknown LLM provider: {provider_name}. Supported providers: {available}."
        )
    return provider_class(**kwargs)
