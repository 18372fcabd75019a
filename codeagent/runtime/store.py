"""Checkpoint storage for durable step outputs.

A step record is written once, after the step succeeds. Replaying an
execution against the same store returns the recorded outputs instead of
re-running the step.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class StepRecord(BaseModel):
    """Checkpointed output of one completed step."""

    execution_id: str
    step_key: str
    outputs: Any = None
    output_schema_name: str | None = None
    completed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class StepStore(ABC):
    """Abstract checkpoint store keyed by ``(execution_id, step_key)``."""

    @abstractmethod
    async def get(self, execution_id: str, step_key: str) -> StepRecord | None:
        """Return the record for a completed step, or None."""
        ...

    @abstractmethod
    async def put(self, record: StepRecord) -> None:
        """Persist the record for a completed step."""
        ...

    @abstractmethod
    async def list_steps(self, execution_id: str) -> list[StepRecord]:
        """Return every completed step of an execution in completion order."""
        ...


class InMemoryStepStore(StepStore):
    """Process-local store. Checkpoints are lost when the process exits."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, StepRecord]] = {}

    async def get(self, execution_id: str, step_key: str) -> StepRecord | None:
        return self._records.get(execution_id, {}).get(step_key)

    async def put(self, record: StepRecord) -> None:
        self._records.setdefault(record.execution_id, {})[record.step_key] = record

    async def list_steps(self, execution_id: str) -> list[StepRecord]:
        return list(self._records.get(execution_id, {}).values())


class FileStepStore(StepStore):
    """Store that keeps one JSON file per execution under ``directory``.

    Survives process restarts, so re-running an execution id after a crash
    resumes from the last completed step. File I/O runs in a worker thread.
    """

    def __init__(self, directory: str) -> None:
        self.directory = os.path.abspath(directory)
        os.makedirs(self.directory, exist_ok=True)
        self._lock = asyncio.Lock()

    def _path(self, execution_id: str) -> str:
        return os.path.join(self.directory, f"{quote(execution_id, safe='')}.json")

    def _load(self, execution_id: str) -> dict[str, StepRecord]:
        path = self._path(execution_id)
        if not os.path.exists(path):
            return {}
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        return {key: StepRecord.model_validate(value) for key, value in raw.items()}

    def _write(self, record: StepRecord) -> None:
        records = self._load(record.execution_id)
        records[record.step_key] = record
        path = self._path(record.execution_id)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump({key: value.model_dump(mode="json") for key, value in records.items()}, f)
        os.replace(tmp_path, path)

    async def get(self, execution_id: str, step_key: str) -> StepRecord | None:
        async with self._lock:
            records = await asyncio.to_thread(self._load, execution_id)
        return records.get(step_key)

    async def put(self, record: StepRecord) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write, record)
        logger.debug(
            "Checkpointed step %s for execution %s", record.step_key, record.execution_id
        )

    async def list_steps(self, execution_id: str) -> list[StepRecord]:
        async with self._lock:
            records = await asyncio.to_thread(self._load, execution_id)
        return list(records.values())
