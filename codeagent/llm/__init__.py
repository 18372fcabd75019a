from .generate import llm_generate, response_to_output, response_tool_calls
from .providers import LLMProvider, LLMResponse, get_provider, register_provider

__all__ = [
    "llm_generate",
    "response_to_output",
    "response_tool_calls",
    "LLMProvider",
    "LLMResponse",
    "get_provider",
    "register_provider",
]
