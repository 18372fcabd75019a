"""State carried through a workflow execution."""

from pydantic import BaseModel, ConfigDict, Field


class WorkflowState(BaseModel):
    """Base class for workflow state.

    Workflow state is a Pydantic model owned by a single execution. It is
    created fresh for every run and rebuilt on replay from checkpointed step
    outputs, so it is never stored on its own.

    Example:
        class MyState(WorkflowState):
            counter: int = 0

        @workflow(id="counter", state_schema=MyState)
        async def counter(ctx: WorkflowContext, payload: dict):
            ctx.state.counter += 1
    """

    model_config = ConfigDict(validate_assignment=True)


class AgentState(WorkflowState):
    """Shared state of the coding agent network.

    ``summary`` is set at most once, by the completion hook. ``files`` is
    replaced wholesale by the file-writing tool after each successful write.
    """

    summary: str = ""
    files: dict[str, str] = Field(default_factory=dict)
