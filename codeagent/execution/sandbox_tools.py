"""Sandbox tools factory.

Creates the coding tools (terminal, createOrUpdateFiles, readFiles) bound to
one sandbox id. Each call re-resolves the sandbox from that id, so tools keep
working across process restarts as long as the sandbox is alive.

Example::

    tools = sandbox_tools(E2BSandboxProvider(), sandbox_id)
    agent = Agent(name="code-agent", system_prompt=PROMPT, tools=tools, ...)
"""

from __future__ import annotations

from ..tools.tool import Tool
from .sandbox import Sandbox, SandboxProvider
from .tools.files import create_read_files_tool, create_write_files_tool
from .tools.terminal import create_terminal_tool


def sandbox_tools(provider: SandboxProvider, sandbox_id: str) -> list[Tool]:
    """Create the coding tools for a run.

    Args:
        provider: Provider used to resolve the sandbox.
        sandbox_id: Identifier of the run's sandbox.
    """

    async def get_sandbox() -> Sandbox:
        return await provider.connect(sandbox_id)

    return [
        create_terminal_tool(get_sandbox),
        create_write_files_tool(get_sandbox),
        create_read_files_tool(get_sandbox),
    ]
