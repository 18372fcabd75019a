"""Tool class for defining tools that can be called by LLM agents."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from ..core.context import WorkflowContext
from ..core.state import WorkflowState

logger = logging.getLogger(__name__)


class ToolInputError(Exception):
    """Raised when the model sends arguments a tool cannot accept."""


@dataclass
class ToolInvocation:
    """Everything a tool handler needs for one call.

    ``step_key`` is stable across replays of the same execution, so a handler
    that runs its side effects through ``run_step`` executes them at most once
    per successful completion.
    """

    ctx: WorkflowContext
    state: WorkflowState | None
    step_key: str

    async def run_step(self, func: Callable, *args, **kwargs) -> Any:
        """Run ``func`` as the durable step for this call."""
        return await self.ctx.step.run(self.step_key, func, *args, **kwargs)


class Tool:
    """
    A function the LLM can call.

    The handler receives a ToolInvocation and the validated input model and
    returns the text handed back to the model.
    """

    def __init__(
        self,
        id: str,
        func: Callable[[ToolInvocation, BaseModel], Awaitable[str]],
        input_schema: type[BaseModel],
        description: str | None = None,
    ):
        """
        Initialize a tool.

        Args:
            id: Tool name exposed to the LLM
            func: Async handler ``(invocation, input) -> str``
            input_schema: Pydantic model describing the tool arguments
            description: Description for the LLM (what this tool does)
        """
        self.id = id
        self.func = func
        self._input_schema_class = input_schema
        self._tool_description = description or self.__doc__ or ""
        self._tool_parameters = input_schema.model_json_schema()

    def parse_input(self, arguments: str | dict[str, Any] | None) -> BaseModel:
        """Validate raw model arguments against the input schema.

        Raises:
            ToolInputError: If the arguments are not valid JSON or fail validation
        """
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError as e:
                raise ToolInputError(f"Invalid JSON arguments for {self.id}: {e}") from e
        try:
            return self._input_schema_class.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolInputError(f"Invalid arguments for {self.id}: {e}") from e

    async def execute(
        self, invocation: ToolInvocation, arguments: str | dict[str, Any] | None
    ) -> str:
        """Validate arguments and run the handler."""
        input_obj = self.parse_input(arguments)
        logger.debug("Executing tool %s (step_key=%s)", self.id, invocation.step_key)
        return await self.func(invocation, input_obj)

    def to_llm_tool_definition(self) -> dict[str, Any]:
        """Convert tool to the LLM function calling format."""
        return {
            "type": "function",
            "name": self.id,
            "description": self._tool_description,
            "parameters": self._tool_parameters,
        }
