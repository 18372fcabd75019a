"""Agent: an LLM with a system prompt, tools and response hooks."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Any

from opentelemetry import trace

from ..core.context import WorkflowContext
from ..core.state import WorkflowState
from ..llm.generate import llm_generate, response_to_output, response_tool_calls
from ..llm.providers import LLMProvider, get_provider
from ..tools.tool import Tool, ToolInputError, ToolInvocation
from ..types.types import AgentResult, OutputMessage, ToolCall, ToolResult, Usage
from ..utils.agent import convert_input_to_messages

logger = logging.getLogger(__name__)

tracer = trace.get_tracer(__name__)

# (result, state) -> None, sync or async
ResponseHook = Callable[[AgentResult, Any], Any]


class Agent:
    """
    An LLM-backed agent.

    One turn is one durable LLM call followed by the tool calls the model
    requested, executed sequentially in the requested order. After each turn
    the ``on_response`` hooks run with the turn's result and the shared state.

    Step keys:
        - LLM call: ``llm_generate:{name}:{turn}``
        - Tool call: ``{name}:{turn}.tool.{index}.{tool_name}``
    """

    def __init__(
        self,
        name: str,
        system_prompt: str,
        model: str,
        provider: str | LLMProvider = "openai",
        tools: list[Tool] | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        on_response: ResponseHook | list[ResponseHook] | None = None,
        description: str | None = None,
    ):
        """
        Initialize an agent.

        Args:
            name: Agent name, also used in step keys (must be unique within a run)
            system_prompt: System prompt sent with every call
            model: Model identifier
            provider: Provider name or LLMProvider instance
            tools: Tools the model may call
            temperature: Optional sampling temperature
            max_tokens: Optional output token limit
            on_response: Hook(s) called after every turn
            description: Optional human readable description
        """
        self.name = name
        self.system_prompt = system_prompt
        self.model = model
        self.provider = provider
        self.tools = tools or []
        self.temperature = temperature
        self.max_tokens = max_tokens
        if on_response is None:
            self.on_response: list[ResponseHook] = []
        elif isinstance(on_response, list):
            self.on_response = on_response
        else:
            self.on_response = [on_response]
        self.description = description
        self._tools_by_name = {tool.id: tool for tool in self.tools}
        self._provider_instance: LLMProvider | None = None

    def _get_provider(self) -> LLMProvider:
        if isinstance(self.provider, LLMProvider):
            return self.provider
        if self._provider_instance is None:
            self._provider_instance = get_provider(self.provider)
        return self._provider_instance

    def _tool_definitions(self) -> list[dict[str, Any]] | None:
        if not self.tools:
            return None
        return [tool.to_llm_tool_definition() for tool in self.tools]

    async def _execute_tool(
        self,
        ctx: WorkflowContext,
        state: WorkflowState | None,
        call: ToolCall,
        step_key: str,
    ) -> str:
        """Run one tool call and return the text handed back to the model.

        Unknown tools and invalid arguments become error results so the model
        can correct itself.
        """
        tool = self._tools_by_name.get(call.name)
        if tool is None:
            logger.warning("Agent %s requested unknown tool %s", self.name, call.name)
            return f"Error: Unknown tool: {call.name}"

        invocation = ToolInvocation(ctx=ctx, state=state, step_key=step_key)
        try:
            return await tool.execute(invocation, call.arguments)
        except ToolInputError as e:
            logger.warning("Agent %s sent invalid arguments to %s: %s", self.name, call.name, e)
            return f"Error: {e}"

    async def run_turn(
        self,
        ctx: WorkflowContext,
        messages: list[dict[str, Any]],
        turn: int,
        state: WorkflowState | None = None,
    ) -> AgentResult:
        """Execute one turn.

        Args:
            ctx: Workflow context used for durable steps
            messages: Conversation so far in Chat Completions format
            turn: 1-based turn number, part of every step key
            state: Shared state passed to tools and hooks

        Returns:
            AgentResult for this turn
        """
        with tracer.start_as_current_span(
            name=f"agent.{self.name}.turn",
            attributes={"agent.name": self.name, "agent.turn": turn},
        ):
            response = await llm_generate(
                ctx,
                f"llm_generate:{self.name}:{turn}",
                self._get_provider(),
                messages=messages,
                model=self.model,
                tools=self._tool_definitions(),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                system_prompt=self.system_prompt,
            )

            output = response_to_output(response)
            tool_calls = response_tool_calls(response)
            tool_results = []
            for idx, call in enumerate(tool_calls):
                step_key = f"{self.name}:{turn}.tool.{idx}.{call.name}"
                tool_output = await self._execute_tool(ctx, state, call, step_key)
                tool_results.append(
                    ToolResult(call_id=call.call_id, name=call.name, output=tool_output)
                )
                output.append(OutputMessage(type="tool_result", role="tool", content=tool_output))

            result = AgentResult(
                agent_name=self.name,
                turn=turn,
                output=output,
                tool_calls=tool_calls,
                tool_results=tool_results,
                usage=Usage.model_validate(response.usage or {}),
                stop_reason=response.stop_reason,
            )

            for hook in self.on_response:
                hook_result = hook(result, state)
                if inspect.isawaitable(hook_result):
                    await hook_result

            logger.debug(
                "Agent %s finished turn %d with %d tool call(s)", self.name, turn, len(tool_calls)
            )
            return result

    async def run(
        self,
        ctx: WorkflowContext,
        input: str | list[dict[str, Any]],
        state: WorkflowState | None = None,
    ) -> AgentResult:
        """Run a single turn on ``input`` (used for one-shot agents)."""
        return await self.run_turn(ctx, convert_input_to_messages(input), turn=1, state=state)
