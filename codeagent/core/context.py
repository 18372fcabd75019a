"""Context classes for workflow execution."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from ..runtime.store import InMemoryStepStore, StepStore


class WorkflowContext:
    """Context available to all workflow functions.

    Carries execution identity, the typed workflow state and a Step helper
    whose outputs are checkpointed in ``store``.
    """

    def __init__(
        self,
        workflow_id: str,
        execution_id: str,
        store: StepStore | None = None,
        root_execution_id: str | None = None,
        created_at: datetime | None = None,
        state_schema: type[BaseModel] | None = None,
        initial_state: dict[str, Any] | None = None,
    ):
        self.workflow_id = workflow_id
        self.execution_id = execution_id
        self.root_execution_id = root_execution_id or execution_id
        self.created_at = created_at
        self.store = store if store is not None else InMemoryStepStore()

        if state_schema:
            if initial_state:
                self.state = state_schema.model_validate(initial_state)
            else:
                self.state = state_schema()
        else:
            self.state = None

        from .step import Step

        self.step = Step(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for the execution context variable."""
        return {
            "workflow_id": self.workflow_id,
            "execution_id": self.execution_id,
            "root_execution_id": self.root_execution_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
