"""File tools -- write and read files inside the sandbox."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, Field

from ...core.state import AgentState
from ...tools.tool import Tool, ToolInvocation
from ..sandbox import Sandbox

logger = logging.getLogger(__name__)


class FileEntry(BaseModel):
    path: str = Field(description="Path of the file inside the sandbox")
    content: str = Field(description="Full content of the file")


class CreateOrUpdateFilesInput(BaseModel):
    """Input schema for the createOrUpdateFiles tool."""

    files: list[FileEntry] = Field(description="Files to create or overwrite")


class ReadFilesInput(BaseModel):
    """Input schema for the readFiles tool."""

    files: list[str] = Field(description="Paths of the files to read")


def create_write_files_tool(get_sandbox: Callable[[], Awaitable[Sandbox]]) -> Tool:
    """Create the createOrUpdateFiles tool.

    The durable step writes the files in order, merging each one into a copy
    of ``state.files`` as soon as it is written. It returns
    ``{"files": merged, "error": None | "Error: ..."}``. The merged mapping
    always replaces ``state.files``, so after a failed write the state still
    matches what reached the sandbox.

    Args:
        get_sandbox: Async callable that resolves the run's sandbox.

    Returns:
        A Tool instance named ``createOrUpdateFiles``.
    """

    async def write_files(
        files: list[dict[str, str]], current: dict[str, str]
    ) -> dict[str, Any]:
        updated = dict(current)
        try:
            sandbox = await get_sandbox()
            for file in files:
                await sandbox.write_file(file["path"], file["content"])
                updated[file["path"]] = file["content"]
        except Exception as e:
            logger.warning("Writing files to sandbox failed: %s", e)
            return {"files": updated, "error": f"Error: {e}"}
        return {"files": updated, "error": None}

    async def handler(invocation: ToolInvocation, input: CreateOrUpdateFilesInput) -> str:
        state = invocation.state
        if not isinstance(state, AgentState):
            raise TypeError("createOrUpdateFiles requires AgentState")

        result = await invocation.run_step(
            write_files,
            [entry.model_dump() for entry in input.files],
            dict(state.files),
        )
        state.files = result["files"]
        if result["error"]:
            return result["error"]
        return "Updated files: " + ", ".join(entry.path for entry in input.files)

    return Tool(
        id="createOrUpdateFiles",
        description="Create or update files in the sandbox",
        input_schema=CreateOrUpdateFilesInput,
        func=handler,
    )


def create_read_files_tool(get_sandbox: Callable[[], Awaitable[Sandbox]]) -> Tool:
    """Create the readFiles tool.

    Returns a JSON array of ``{path, content}`` objects, or ``"Error: ..."``
    if any read fails.
    """

    async def read_files(paths: list[str]) -> str:
        try:
            sandbox = await get_sandbox()
            contents: list[dict[str, Any]] = []
            for path in paths:
                contents.append({"path": path, "content": await sandbox.read_file(path)})
            return json.dumps(contents)
        except Exception as e:
            logger.warning("Reading files from sandbox failed: %s", e)
            return f"Error: {e}"

    async def handler(invocation: ToolInvocation, input: ReadFilesInput) -> str:
        return await invocation.run_step(read_files, list(input.files))

    return Tool(
        id="readFiles",
        description="Read files from the sandbox",
        input_schema=ReadFilesInput,
        func=handler,
    )
