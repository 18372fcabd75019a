"""Unit tests for codeagent.core.workflow module."""

import uuid

import pytest
from pydantic import BaseModel, ValidationError

from codeagent.core.context import WorkflowContext
from codeagent.core.state import AgentState
from codeagent.core.workflow import (
    Workflow,
    WorkflowNotFoundError,
    _execution_context,
    get_workflow,
    workflow,
)
from codeagent.runtime.store import InMemoryStepStore


class GreetPayload(BaseModel):
    name: str


class TestWorkflowDecorator:
    """Tests for the @workflow decorator and registry."""

    def test_registers_workflow(self):
        @workflow(id="test-greet", trigger_on_event="test/greet")
        async def greet(ctx: WorkflowContext, payload: GreetPayload):
            return f"hi {payload.name}"

        assert isinstance(greet, Workflow)
        assert get_workflow("test-greet") is greet
        assert greet.trigger_on_event == "test/greet"
        assert greet._payload_schema_class is GreetPayload

    def test_defaults_id_to_function_name(self):
        @workflow()
        async def unnamed_test_workflow(ctx: WorkflowContext):
            return None

        assert unnamed_test_workflow.id == "unnamed_test_workflow"

    def test_unknown_workflow(self):
        with pytest.raises(WorkflowNotFoundError):
            get_workflow("does-not-exist")


class TestWorkflowRun:
    """Tests for Workflow.run."""

    @pytest.mark.asyncio
    async def test_validates_dict_payload(self):
        @workflow(id="test-validate")
        async def greet(ctx: WorkflowContext, payload: GreetPayload):
            return f"hi {payload.name}"

        assert await greet.run({"name": "Ada"}) == "hi Ada"
        with pytest.raises(ValidationError):
            await greet.run({"nom": "Ada"})

    @pytest.mark.asyncio
    async def test_provides_state_and_execution_context(self):
        seen = {}

        @workflow(id="test-state", state_schema=AgentState)
        async def stateful(ctx: WorkflowContext):
            seen["state"] = ctx.state
            seen["exec"] = _execution_context.get()
            ctx.state.summary = "done"
            return ctx.state.summary

        result = await stateful.run(execution_id="exec-1")

        assert result == "done"
        assert isinstance(seen["state"], AgentState)
        assert seen["exec"]["execution_id"] == "exec-1"
        assert _execution_context.get() is None

    @pytest.mark.asyncio
    async def test_resume_skips_completed_steps(self):
        """Re-running an execution id on the same store replays completed steps."""
        store = InMemoryStepStore()
        calls = []

        async def expensive():
            calls.append(1)
            return len(calls)

        @workflow(id="test-resume")
        async def resumable(ctx: WorkflowContext):
            return await ctx.step.run("expensive", expensive)

        execution_id = str(uuid.uuid4())
        first = await resumable.run(execution_id=execution_id, store=store)
        second = await resumable.run(execution_id=execution_id, store=store)

        assert first == second == 1
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_sync_workflow_function(self):
        def double(ctx, payload):
            return payload["n"] * 2

        wf = Workflow(id="test-sync", func=double)
        assert await wf.run({"n": 4}) == 8

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        @workflow(id="test-error")
        async def failing(ctx: WorkflowContext):
            raise RuntimeError("kaput")

        with pytest.raises(RuntimeError, match="kaput"):
            await failing.run()
        assert _execution_context.get() is None
