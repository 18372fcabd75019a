"""Durable steps: checkpointed, retried units of work inside a workflow."""

from __future__ import annotations

import asyncio
import contextvars
import json
import logging
from collections.abc import Callable
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..runtime.store import StepRecord
from ..utils.retry import retry_with_backoff
from ..utils.serializer import deserialize, safe_serialize, schema_name_for, serialize
from .context import WorkflowContext
from .workflow import StepExecutionError

logger = logging.getLogger(__name__)

tracer = trace.get_tracer(__name__)


class Step:
    """Runs callables as durable steps of one execution.

    A step's output is recorded in the context's store under its key. When
    the execution is replayed the recorded output is returned and the
    callable is not invoked.
    """

    def __init__(self, ctx: WorkflowContext):
        self.ctx = ctx
        self._seen_keys: set[str] = set()

    def _claim_key(self, step_key: str) -> None:
        """Reject a step key already used in this execution."""
        if step_key in self._seen_keys:
            raise StepExecutionError(
                f"Step key '{step_key}' was already used in execution {self.ctx.execution_id}"
            )
        self._seen_keys.add(step_key)

    async def _check_existing_step(self, step_key: str) -> StepRecord | None:
        return await self.ctx.store.get(self.ctx.execution_id, step_key)

    async def _save_step_output(self, step_key: str, result: Any) -> None:
        """Checkpoint a successful step output.

        Pydantic outputs are stored with their schema name so that replay
        returns the same model type.

        Raises:
            StepExecutionError: If the result is not JSON serializable
        """
        try:
            outputs = serialize(result)
        except TypeError as e:
            raise StepExecutionError(
                f"Step '{step_key}' returned a value that cannot be checkpointed: {e}"
            ) from e

        await self.ctx.store.put(
            StepRecord(
                execution_id=self.ctx.execution_id,
                step_key=step_key,
                outputs=outputs,
                output_schema_name=schema_name_for(result),
            )
        )

    async def run(
        self,
        step_key: str,
        func: Callable,
        *args,
        max_retries: int = 2,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
        **kwargs,
    ) -> Any:
        """
        Run ``func(*args, **kwargs)`` once per execution under ``step_key``.

        A recorded output for the key is returned as-is. Otherwise the call
        is attempted up to ``max_retries + 1`` times with exponential backoff
        and its result recorded. Only successes are recorded, so a failed
        step runs again when the execution is resumed.

        Args:
            step_key: Key of this step, unique within the execution
            func: Sync or async callable
            *args: Positional arguments for ``func``
            max_retries: Retries after the first failed attempt
            base_delay: First backoff delay in seconds
            max_delay: Upper bound for a backoff delay in seconds
            **kwargs: Keyword arguments for ``func``

        Returns:
            The callable's result, or the recorded output on replay

        Raises:
            StepExecutionError: If the key is reused or every attempt fails
        """
        self._claim_key(step_key)

        existing_step = await self._check_existing_step(step_key)
        if existing_step is not None:
            logger.debug(
                "Replaying step %s for execution %s", step_key, self.ctx.execution_id
            )
            return deserialize(existing_step.outputs, existing_step.output_schema_name)

        func_name = func.__name__ if hasattr(func, "__name__") else str(func)

        with tracer.start_as_current_span(
            name=f"step.{step_key}",
            attributes={
                "step.key": step_key,
                "step.function": func_name,
                "step.execution_id": self.ctx.execution_id,
                "step.max_retries": max_retries,
            },
        ) as step_span:
            step_span.set_attribute(
                "step.input",
                json.dumps(
                    {
                        "args": [safe_serialize(arg) for arg in args],
                        "kwargs": {k: safe_serialize(v) for k, v in kwargs.items()},
                    }
                ),
            )

            async def _execute_func() -> Any:
                if asyncio.iscoroutinefunction(func):
                    return await func(*args, **kwargs)
                # Run sync functions in the default executor with ContextVars preserved
                func_ctx = contextvars.copy_context()
                loop = asyncio.get_running_loop()
                return await loop.run_in_executor(None, lambda: func_ctx.run(func, *args, **kwargs))

            try:
                result = await retry_with_backoff(
                    _execute_func,
                    max_retries=max_retries,
                    base_delay=base_delay,
                    max_delay=max_delay,
                )
            except Exception as e:
                step_span.record_exception(e)
                step_span.set_status(Status(StatusCode.ERROR, str(e)))
                logger.error(
                    "Step %s failed for execution %s: %s", step_key, self.ctx.execution_id, e
                )
                raise StepExecutionError(
                    f"Step execution failed after {max_retries} retries: {str(e)}"
                ) from e

            await self._save_step_output(step_key, result)
            step_span.set_status(Status(StatusCode.OK))
            return result
