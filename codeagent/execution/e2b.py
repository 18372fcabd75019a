"""E2B cloud sandboxes.

Wraps ``e2b_code_interpreter.AsyncSandbox``. Sandboxes are created from a
template and later reconnected by id from any step.
"""

from __future__ import annotations

import logging
import os
import time

from e2b import CommandExitException, NotFoundException
from e2b_code_interpreter import AsyncSandbox

from .sandbox import (
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    CommandExitError,
    CommandResult,
    OutputCallback,
    Sandbox,
    SandboxExpiredError,
    SandboxProvider,
)

logger = logging.getLogger(__name__)


class E2BSandbox(Sandbox):
    """A connected E2B sandbox."""

    def __init__(self, sandbox: AsyncSandbox):
        self._sandbox = sandbox

    @property
    def sandbox_id(self) -> str:
        return self._sandbox.sandbox_id

    async def set_timeout(self, seconds: int) -> None:
        await self._sandbox.set_timeout(seconds)

    async def run_command(
        self,
        command: str,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        start = time.monotonic()
        try:
            result = await self._sandbox.commands.run(
                command,
                on_stdout=on_stdout,
                on_stderr=on_stderr,
                timeout=timeout if timeout is not None else DEFAULT_COMMAND_TIMEOUT_SECONDS,
            )
        except CommandExitException as e:
            raise CommandExitError(
                exit_code=e.exit_code, stdout=e.stdout, stderr=e.stderr, error=e.error
            ) from e
        return CommandResult(
            exit_code=result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    async def write_file(self, path: str, content: str) -> None:
        await self._sandbox.files.write(path, content)

    async def read_file(self, path: str) -> str:
        return await self._sandbox.files.read(path)

    def get_host(self, port: int) -> str:
        return self._sandbox.get_host(port)


class E2BSandboxProvider(SandboxProvider):
    """Creates and reconnects E2B sandboxes."""

    def __init__(self, api_key: str | None = None, template: str | None = None):
        """Initialize the provider.

        Args:
            api_key: E2B API key. Defaults to the E2B_API_KEY env var.
            template: Default template id used by ``create``.
        """
        self.api_key = api_key or os.getenv("E2B_API_KEY")
        self.template = template

    async def create(self, template: str | None = None) -> Sandbox:
        template = template or self.template
        logger.info("Creating E2B sandbox (template: %s)", template)
        sandbox = await AsyncSandbox.create(template=template, api_key=self.api_key)
        logger.info("E2B sandbox created: %s", sandbox.sandbox_id)
        return E2BSandbox(sandbox)

    async def connect(self, sandbox_id: str) -> Sandbox:
        try:
            sandbox = await AsyncSandbox.connect(sandbox_id, api_key=self.api_key)
        except NotFoundException as e:
            raise SandboxExpiredError(sandbox_id, str(e)) from e
        return E2BSandbox(sandbox)
