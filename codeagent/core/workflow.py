from __future__ import annotations

import asyncio
import inspect
import logging
import typing
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode
from pydantic import BaseModel

from ..runtime.store import StepStore
from .context import WorkflowContext

logger = logging.getLogger(__name__)

tracer = trace.get_tracer(__name__)

# Global registry of workflows
_WORKFLOW_REGISTRY: dict[str, Workflow] = {}

# Context variable holding the running execution (see WorkflowContext.to_dict)
_execution_context: ContextVar[dict[str, Any] | None] = ContextVar(
    "execution_context", default=None
)


class StepExecutionError(Exception):
    """
    Exception raised when a step fails and the workflow must fail.
    """

    def __init__(self, reason: str | None = None):
        self.reason = reason
        super().__init__(reason)


class WorkflowNotFoundError(Exception):
    """Raised when no workflow is registered under a given id or event."""


def _extract_payload_schema(func: Callable) -> type[BaseModel] | None:
    """Return the Pydantic model annotated on the second parameter, if any."""
    params = list(inspect.signature(func).parameters.values())
    if len(params) < 2:
        return None
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        hints = {}
    annotation = hints.get(params[1].name, params[1].annotation)
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    return None


class Workflow:
    """A durable function triggered directly or by an event.

    The function receives a ``WorkflowContext`` and, optionally, a payload.
    When the payload parameter is annotated with a Pydantic model, incoming
    dict payloads are validated against it.
    """

    def __init__(
        self,
        id: str,
        func: Callable,
        description: str | None = None,
        trigger_on_event: str | None = None,
        payload_schema_class: type[BaseModel] | None = None,
        state_schema: type[BaseModel] | None = None,
    ):
        self.id = id
        self.func = func
        self.description = description
        self.trigger_on_event = trigger_on_event
        self.state_schema = state_schema
        self.is_async = asyncio.iscoroutinefunction(func)
        self.has_payload_param = len(inspect.signature(func).parameters) >= 2
        self._payload_schema_class = payload_schema_class or _extract_payload_schema(func)

    def _prepare_payload(self, payload: BaseModel | dict[str, Any] | None) -> Any:
        if self._payload_schema_class is None or payload is None:
            return payload
        if isinstance(payload, self._payload_schema_class):
            return payload
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", by_alias=True)
        return self._payload_schema_class.model_validate(payload)

    async def run(
        self,
        payload: BaseModel | dict[str, Any] | None = None,
        execution_id: str | None = None,
        store: StepStore | None = None,
        initial_state: dict[str, Any] | None = None,
    ) -> Any:
        """Execute the workflow and return its result.

        Re-running with the same ``execution_id`` and ``store`` resumes the
        execution: completed steps return their checkpointed outputs.

        Args:
            payload: Workflow payload (dict or Pydantic model)
            execution_id: Execution identifier; a new one is generated if omitted
            store: Step store for checkpoints; in-memory if omitted
            initial_state: Optional initial values for the state schema

        Returns:
            Whatever the workflow function returns

        Raises:
            pydantic.ValidationError: If the payload does not match the payload schema
            StepExecutionError: If a step fails after its retries
        """
        execution_id = execution_id or str(uuid.uuid4())
        ctx = WorkflowContext(
            workflow_id=self.id,
            execution_id=execution_id,
            store=store,
            created_at=datetime.now(timezone.utc),
            state_schema=self.state_schema,
            initial_state=initial_state,
        )
        prepared = self._prepare_payload(payload)

        token = _execution_context.set(ctx.to_dict())
        try:
            with tracer.start_as_current_span(
                name=f"workflow.{self.id}",
                attributes={"workflow.id": self.id, "workflow.execution_id": execution_id},
            ) as span:
                logger.info("Running workflow %s (execution_id=%s)", self.id, execution_id)
                try:
                    if self.has_payload_param:
                        result = self.func(ctx, prepared)
                    else:
                        result = self.func(ctx)
                    if inspect.isawaitable(result):
                        result = await result
                except Exception as e:
                    span.record_exception(e)
                    span.set_status(Status(StatusCode.ERROR, str(e)))
                    raise
                span.set_status(Status(StatusCode.OK))
                return result
        finally:
            _execution_context.reset(token)


def workflow(
    id: str | None = None,
    description: str | None = None,
    trigger_on_event: str | None = None,
    state_schema: type[BaseModel] | None = None,
):
    """
    Decorator to register a durable workflow.

    Usage:
        @workflow(id="code-agent", trigger_on_event="code-agent/run")
        async def code_agent(ctx: WorkflowContext, payload: CodeAgentPayload):
            ...

    Args:
        id: Workflow identifier (defaults to the function name)
        description: Optional human readable description
        trigger_on_event: Optional event name that triggers this workflow
        state_schema: Optional Pydantic model used for ``ctx.state``

    Returns:
        Decorator returning the registered Workflow
    """

    def decorator(func: Callable) -> Workflow:
        workflow_id = id or func.__name__
        wf = Workflow(
            id=workflow_id,
            func=func,
            description=description,
            trigger_on_event=trigger_on_event,
            state_schema=state_schema,
        )
        _WORKFLOW_REGISTRY[workflow_id] = wf
        return wf

    return decorator


def get_workflow(workflow_id: str) -> Workflow:
    """Look up a registered workflow by id."""
    wf = _WORKFLOW_REGISTRY.get(workflow_id)
    if wf is None:
        raise WorkflowNotFoundError(f"Workflow '{workflow_id}' is not registered")
    return wf
