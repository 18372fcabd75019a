"""Abstract interface for ephemeral sandboxes.

A sandbox is created once per workflow run and is afterwards re-resolved
from its identifier alone, so every step can reach it without holding a
live handle. Sandboxes expire on their own; nothing here destroys them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from pydantic import BaseModel, Field

OutputCallback = Callable[[str], None]

# Command timeout in seconds when run_command is given none
DEFAULT_COMMAND_TIMEOUT_SECONDS = 60


class SandboxError(Exception):
    """Base class for sandbox failures."""


class SandboxExpiredError(SandboxError):
    """Raised when a sandbox is used after its deadline or no longer exists."""

    def __init__(self, sandbox_id: str, message: str | None = None):
        self.sandbox_id = sandbox_id
        super().__init__(message or f"Sandbox {sandbox_id} has expired")


class CommandExitError(SandboxError):
    """Raised when a command exits with a non-zero code."""

    def __init__(
        self,
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
        error: str | None = None,
    ):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        message = f"Command exited with code {exit_code}"
        if error:
            message += f" and error:\n{error}"
        super().__init__(message)


class CommandResult(BaseModel):
    """Result of a command that exited successfully."""

    exit_code: int = Field(default=0, description="Process exit code (0 = success)")
    stdout: str = Field(default="", description="Standard output")
    stderr: str = Field(default="", description="Standard error")
    duration_ms: int = Field(default=0, description="Execution duration in milliseconds")


class Sandbox(ABC):
    """A live handle to one sandbox."""

    @property
    @abstractmethod
    def sandbox_id(self) -> str:
        """Opaque identifier used to re-resolve this sandbox."""
        ...

    @abstractmethod
    async def set_timeout(self, seconds: int) -> None:
        """Set the sandbox deadline to ``seconds`` from now."""
        ...

    @abstractmethod
    async def run_command(
        self,
        command: str,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """Run a shell command, streaming output chunks to the callbacks.

        ``timeout`` is in seconds and defaults to ``DEFAULT_COMMAND_TIMEOUT_SECONDS``.

        Raises:
            CommandExitError: If the command exits with a non-zero code
            SandboxExpiredError: If the sandbox has expired
        """
        ...

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        """Write a file, creating parent directories as needed."""
        ...

    @abstractmethod
    async def read_file(self, path: str) -> str:
        """Read a file as UTF-8 text."""
        ...

    @abstractmethod
    def get_host(self, port: int) -> str:
        """Return the public host (without scheme) that forwards to ``port``."""
        ...


class SandboxProvider(ABC):
    """Creates sandboxes and re-resolves them by id."""

    @abstractmethod
    async def create(self, template: str | None = None) -> Sandbox:
        """Create a new sandbox from a template."""
        ...

    @abstractmethod
    async def connect(self, sandbox_id: str) -> Sandbox:
        """Resolve an existing sandbox.

        Raises:
            SandboxExpiredError: If the sandbox no longer exists
        """
        ...
