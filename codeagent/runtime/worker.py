"""Worker that runs workflows in response to events."""

from __future__ import annotations

import asyncio
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..core.workflow import Workflow, WorkflowNotFoundError
from ..utils.serializer import serialize
from .store import InMemoryStepStore, StepStore

logger = logging.getLogger(__name__)


class Event(BaseModel):
    """A trigger event. ``id`` doubles as the execution id."""

    name: str
    data: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None


class ExecutionRecord(BaseModel):
    execution_id: str
    workflow_id: str
    event_name: str
    status: Literal["running", "completed", "failed"] = "running"
    result: Any = None
    error: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: datetime | None = None


class Worker:
    """Runs registered workflows when their trigger events arrive.

    Re-dispatching an event with the same id resumes that execution from its
    checkpoints in ``store``. Only the ``max_execution_records`` most recently
    finished executions keep their records.
    """

    def __init__(
        self,
        workflows: list[Workflow],
        store: StepStore | None = None,
        max_concurrent_workflows: int = 4,
        max_execution_records: int = 1000,
    ):
        self.store = store if store is not None else InMemoryStepStore()
        self.max_concurrent_workflows = max_concurrent_workflows
        self.max_execution_records = max_execution_records
        self.execution_semaphore = asyncio.Semaphore(max_concurrent_workflows)
        self.executions: dict[str, ExecutionRecord] = {}
        self.active_executions: set[str] = set()
        self._tasks: dict[str, asyncio.Task] = {}
        self.workflows_by_event: dict[str, Workflow] = {}
        for wf in workflows:
            if not wf.trigger_on_event:
                logger.warning("Workflow %s has no trigger event; skipping", wf.id)
                continue
            self.workflows_by_event[wf.trigger_on_event] = wf

    @property
    def is_at_capacity(self) -> bool:
        return len(self.active_executions) >= self.max_concurrent_workflows

    def resolve(self, event_name: str) -> Workflow:
        wf = self.workflows_by_event.get(event_name)
        if wf is None:
            raise WorkflowNotFoundError(f"No workflow is triggered by event '{event_name}'")
        return wf

    def get_execution(self, execution_id: str) -> ExecutionRecord | None:
        return self.executions.get(execution_id)

    async def dispatch(self, event: Event) -> ExecutionRecord:
        """Run the workflow for ``event`` and wait for it to finish.

        Failures are recorded on the returned ExecutionRecord rather than raised.

        Raises:
            WorkflowNotFoundError: If no workflow handles the event
        """
        wf = self.resolve(event.name)
        execution_id = event.id or str(uuid.uuid4())
        record = ExecutionRecord(
            execution_id=execution_id, workflow_id=wf.id, event_name=event.name
        )
        self.executions[execution_id] = record
        await self._execute_workflow_with_semaphore(wf, event.data, record)
        return record

    def submit(self, event: Event) -> ExecutionRecord:
        """Start the workflow for ``event`` in the background.

        An event whose execution is still running is not started twice.

        Raises:
            WorkflowNotFoundError: If no workflow handles the event
        """
        wf = self.resolve(event.name)
        execution_id = event.id or str(uuid.uuid4())
        existing = self._tasks.get(execution_id)
        if existing is not None and not existing.done():
            return self.executions[execution_id]

        record = ExecutionRecord(
            execution_id=execution_id, workflow_id=wf.id, event_name=event.name
        )
        self.executions[execution_id] = record
        # Count as active immediately so capacity checks see queued work
        self.active_executions.add(execution_id)
        task = asyncio.create_task(self._execute_workflow_with_semaphore(wf, event.data, record))
        self._tasks[execution_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(execution_id, None))
        return record

    async def _execute_workflow_with_semaphore(
        self, wf: Workflow, payload: dict[str, Any], record: ExecutionRecord
    ) -> None:
        """Execute a workflow with semaphore control for concurrency limiting."""
        self.active_executions.add(record.execution_id)
        try:
            async with self.execution_semaphore:
                await self._execute_workflow(wf, payload, record)
        finally:
            self.active_executions.discard(record.execution_id)

    async def _execute_workflow(
        self, wf: Workflow, payload: dict[str, Any], record: ExecutionRecord
    ) -> None:
        logger.info(
            "Executing workflow %s (execution_id=%s, event=%s)",
            wf.id,
            record.execution_id,
            record.event_name,
        )
        try:
            result = await wf.run(payload, execution_id=record.execution_id, store=self.store)
            record.result = serialize(result)
            record.status = "completed"
            logger.info("Execution %s completed", record.execution_id)
        except Exception as error:
            record.error = str(error)
            record.status = "failed"
            logger.error(
                "Execution error: %s\nStack trace:\n%s", error, traceback.format_exc()
            )
        finally:
            record.completed_at = datetime.now(timezone.utc)
            self._prune_executions()

    def _prune_executions(self) -> None:
        """Drop the oldest finished records beyond ``max_execution_records``."""
        finished = [r for r in self.executions.values() if r.status != "running"]
        excess = len(finished) - self.max_execution_records
        if excess <= 0:
            return
        finished.sort(key=lambda r: r.completed_at)
        for record in finished[:excess]:
            del self.executions[record.execution_id]
        logger.debug("Pruned %d finished execution record(s)", excess)

    async def shutdown(self) -> None:
        """Wait for background executions to finish."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
