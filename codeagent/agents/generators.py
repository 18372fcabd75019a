"""One-shot agents that turn the final summary into user-facing text."""

from __future__ import annotations

from ..core.context import WorkflowContext
from ..llm.providers import LLMProvider
from ..prompts import FRAGMENT_TITLE_PROMPT, RESPONSE_PROMPT
from ..types.types import OutputMessage
from .agent import Agent

FRAGMENT_TITLE_FALLBACK = "Fragment"
RESPONSE_FALLBACK = "Here you go"


def extract_text(output: list[OutputMessage], fallback: str) -> str:
    """Return the text of the first output message, or ``fallback``.

    Falls back when there is no first message or it is not a text message.
    List content is joined into one string.
    """
    if not output or output[0].type != "text":
        return fallback
    content = output[0].content
    if isinstance(content, list):
        return "".join(content)
    return content


def create_title_generator(model: str, provider: str | LLMProvider = "openai") -> Agent:
    return Agent(
        name="fragment-title-generator",
        description="A fragment title generator",
        system_prompt=FRAGMENT_TITLE_PROMPT,
        model=model,
        provider=provider,
    )


def create_response_generator(model: str, provider: str | LLMProvider = "openai") -> Agent:
    return Agent(
        name="response-generator",
        description="A response generator",
        system_prompt=RESPONSE_PROMPT,
        model=model,
        provider=provider,
    )


async def generate_title(ctx: WorkflowContext, agent: Agent, summary: str) -> str:
    result = await agent.run(ctx, summary)
    return extract_text(result.output, FRAGMENT_TITLE_FALLBACK)


async def generate_response(ctx: WorkflowContext, agent: Agent, summary: str) -> str:
    result = await agent.run(ctx, summary)
    return extract_text(result.output, RESPONSE_FALLBACK)
