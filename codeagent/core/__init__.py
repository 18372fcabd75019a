from .context import WorkflowContext
from .state import AgentState, WorkflowState
from .step import Step
from .workflow import (
    StepExecutionError,
    Workflow,
    WorkflowNotFoundError,
    get_workflow,
    workflow,
)

__all__ = [
    "WorkflowContext",
    "WorkflowState",
    "AgentState",
    "Step",
    "Workflow",
    "StepExecutionError",
    "WorkflowNotFoundError",
    "get_workflow",
    "workflow",
]
