"""The code-agent workflow.

Triggered by a ``code-agent/run`` event carrying ``{projectId, value}``. The
run provisions a sandbox, lets the coding agent work in it until it reports
completion or runs out of turns, derives a title and a reply, and persists
exactly one result message.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from ..agents.agent import Agent
from ..agents.completion import observe_completion
from ..agents.conversation_history import load_previous_messages
from ..agents.generators import (
    create_response_generator,
    create_title_generator,
    generate_response,
    generate_title,
)
from ..agents.network import Network
from ..config import Settings
from ..core.context import WorkflowContext
from ..core.state import AgentState
from ..core.workflow import Workflow, workflow
from ..execution.sandbox import SandboxProvider
from ..execution.sandbox_tools import sandbox_tools
from ..llm.providers import LLMProvider, get_provider
from ..persistence.messages import (
    Fragment,
    Message,
    MessageRole,
    MessageStore,
    MessageType,
    NewMessage,
)
from ..prompts import PROMPT

logger = logging.getLogger(__name__)

CODE_AGENT_EVENT = "code-agent/run"

ERROR_MESSAGE = "Something went wrong. Please try again."


class CodeAgentPayload(BaseModel):
    """Trigger event data."""

    model_config = ConfigDict(populate_by_name=True)

    project_id: str = Field(alias="projectId", description="Project the request belongs to")
    value: str = Field(description="The user's instruction")


class CodeAgentResult(BaseModel):
    url: str
    title: str
    files: dict[str, str] = Field(default_factory=dict)
    summary: str = ""


def is_error_result(state: AgentState) -> bool:
    """A run failed unless it produced both a summary and at least one file."""
    return not state.summary or not state.files


def create_code_agent_workflow(
    sandbox_provider: SandboxProvider,
    message_store: MessageStore,
    settings: Settings | None = None,
    llm_provider: LLMProvider | None = None,
) -> Workflow:
    """Build and register the code-agent workflow.

    Args:
        sandbox_provider: Creates and re-resolves the run's sandbox
        message_store: Source of history and destination of the result message
        settings: Model, sandbox and loop settings (defaults to ``Settings()``)
        llm_provider: LLM provider; resolved from ``settings.llm_provider`` when omitted

    Returns:
        The registered Workflow
    """
    settings = settings or Settings()

    @workflow(id="code-agent", trigger_on_event=CODE_AGENT_EVENT, state_schema=AgentState)
    async def code_agent(ctx: WorkflowContext, payload: CodeAgentPayload) -> CodeAgentResult:
        provider = llm_provider or get_provider(settings.llm_provider)
        state: AgentState = ctx.state

        async def create_sandbox() -> str:
            sandbox = await sandbox_provider.create(settings.sandbox_template)
            await sandbox.set_timeout(settings.sandbox_timeout_seconds)
            return sandbox.sandbox_id

        sandbox_id = await ctx.step.run("get-sandbox-id", create_sandbox)
        logger.info("Execution %s uses sandbox %s", ctx.execution_id, sandbox_id)

        history = await load_previous_messages(
            ctx, message_store, payload.project_id, limit=settings.history_limit
        )

        coding_agent = Agent(
            name="code-agent",
            description="An expert coding agent",
            system_prompt=PROMPT,
            model=settings.model,
            provider=provider,
            tools=sandbox_tools(sandbox_provider, sandbox_id),
            temperature=settings.temperature,
            on_response=observe_completion,
        )
        network = Network(
            name="coding-agent-network",
            agents=[coding_agent],
            max_iter=settings.max_iter,
        )
        result = await network.run(ctx, payload.value, state, history=history)
        logger.info(
            "Network finished after %d turn(s) (%s)", result.turns, result.stop_reason
        )

        title = await generate_title(
            ctx, create_title_generator(settings.aux_model, provider), state.summary
        )
        response = await generate_response(
            ctx, create_response_generator(settings.aux_model, provider), state.summary
        )

        is_error = is_error_result(state)

        async def get_sandbox_url() -> str:
            sandbox = await sandbox_provider.connect(sandbox_id)
            return f"https://{sandbox.get_host(settings.sandbox_port)}"

        sandbox_url = await ctx.step.run("get-sandbox-url", get_sandbox_url)

        # One message per execution, however often the create is attempted
        message_id = f"{ctx.execution_id}:save-result"

        async def save_result() -> Message:
            if is_error:
                message = NewMessage(
                    id=message_id,
                    project_id=payload.project_id,
                    content=ERROR_MESSAGE,
                    role=MessageRole.ASSISTANT,
                    type=MessageType.ERROR,
                )
            else:
                message = NewMessage(
                    id=message_id,
                    project_id=payload.project_id,
                    content=response,
                    role=MessageRole.ASSISTANT,
                    type=MessageType.RESULT,
                    fragment=Fragment(sandbox_url=sandbox_url, title=title, files=state.files),
                )
            return await message_store.create_message(message)

        await ctx.step.run("save-result", save_result)

        return CodeAgentResult(
            url=sandbox_url,
            title=title,
            files=state.files,
            summary=state.summary,
        )

    return code_agent
