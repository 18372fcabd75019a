"""Terminal tool -- run shell commands inside the sandbox."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

from ...tools.tool import Tool, ToolInvocation
from ..output import OutputBuffer
from ..sandbox import Sandbox

logger = logging.getLogger(__name__)


class TerminalInput(BaseModel):
    """Input schema for the terminal tool."""

    command: str = Field(description="The shell command to run")


def format_command_failure(error: Exception, stdout: str, stderr: str) -> str:
    return f"Command failed: {error}\nstdout: {stdout}\nstderr: {stderr}"


def create_terminal_tool(get_sandbox: Callable[[], Awaitable[Sandbox]]) -> Tool:
    """Create the terminal tool.

    The command's output is captured incrementally, so a failure report
    includes whatever was printed before the command failed.

    Args:
        get_sandbox: Async callable that resolves the run's sandbox.

    Returns:
        A Tool instance named ``terminal``.
    """

    async def run_command(command: str) -> str:
        stdout = OutputBuffer()
        stderr = OutputBuffer()
        try:
            sandbox = await get_sandbox()
            result = await sandbox.run_command(command, on_stdout=stdout, on_stderr=stderr)
            return result.stdout
        except Exception as e:
            logger.warning("Command failed in sandbox: %s (%s)", command, e)
            return format_command_failure(e, stdout.text, stderr.text)

    async def handler(invocation: ToolInvocation, input: TerminalInput) -> str:
        return await invocation.run_step(run_command, input.command)

    return Tool(
        id="terminal",
        description="Use the terminal to run commands",
        input_schema=TerminalInput,
        func=handler,
    )
