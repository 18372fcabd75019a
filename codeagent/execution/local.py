"""Local sandboxes.

Each sandbox is a directory on the host with a metadata file next to it
holding its deadline. Commands run through ``sh -c`` inside the directory.
Useful for development and tests; there is no isolation beyond the
working directory and path checks on file operations.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import time
import uuid

from .output import truncate_output
from .sandbox import (
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    CommandExitError,
    CommandResult,
    OutputCallback,
    Sandbox,
    SandboxError,
    SandboxExpiredError,
    SandboxProvider,
)

logger = logging.getLogger(__name__)

# Default sandbox lifetime until set_timeout is called
DEFAULT_SANDBOX_TIMEOUT_SECONDS = 300

_READ_CHUNK_SIZE = 4096


async def _pump(stream: asyncio.StreamReader, callback: OutputCallback | None) -> str:
    chunks = []
    while True:
        data = await stream.read(_READ_CHUNK_SIZE)
        if not data:
            break
        text = data.decode("utf-8", errors="replace")
        chunks.append(text)
        if callback:
            callback(text)
    return "".join(chunks)


class LocalSandbox(Sandbox):
    """A sandbox backed by a host directory."""

    def __init__(self, sandbox_id: str, root: str, max_output_chars: int | None = None):
        self._sandbox_id = sandbox_id
        self._root = root
        self._max_output_chars = max_output_chars

    @property
    def sandbox_id(self) -> str:
        return self._sandbox_id

    @property
    def workdir(self) -> str:
        return os.path.join(self._root, self._sandbox_id)

    @property
    def _metadata_path(self) -> str:
        return os.path.join(self._root, f"{self._sandbox_id}.json")

    def _read_metadata(self) -> dict:
        try:
            with open(self._metadata_path, encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError as e:
            raise SandboxExpiredError(
                self._sandbox_id, f"Sandbox {self._sandbox_id} not found"
            ) from e

    def _write_metadata(self, metadata: dict) -> None:
        with open(self._metadata_path, "w", encoding="utf-8") as f:
            json.dump(metadata, f)

    def _ensure_alive(self) -> None:
        metadata = self._read_metadata()
        if time.time() >= metadata["deadline"]:
            raise SandboxExpiredError(self._sandbox_id)

    def _resolve_path(self, path: str) -> str:
        # Absolute paths are rooted at the sandbox directory
        base = os.path.realpath(self.workdir)
        resolved = os.path.realpath(os.path.join(base, path.lstrip("/")))
        if resolved != base and not resolved.startswith(base + os.sep):
            raise SandboxError(f"Path escapes the sandbox: {path}")
        return resolved

    async def set_timeout(self, seconds: int) -> None:
        metadata = self._read_metadata()
        metadata["deadline"] = time.time() + seconds
        self._write_metadata(metadata)

    async def run_command(
        self,
        command: str,
        on_stdout: OutputCallback | None = None,
        on_stderr: OutputCallback | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        self._ensure_alive()
        timeout_seconds = timeout if timeout is not None else DEFAULT_COMMAND_TIMEOUT_SECONDS
        start = time.monotonic()

        proc = await asyncio.create_subprocess_exec(
            "sh",
            "-c",
            command,
            cwd=self.workdir,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        readers = asyncio.gather(_pump(proc.stdout, on_stdout), _pump(proc.stderr, on_stderr))
        try:
            stdout, stderr = await asyncio.wait_for(readers, timeout=timeout_seconds)
            exit_code = await proc.wait()
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise CommandExitError(
                exit_code=137, error=f"Process killed: timeout of {timeout_seconds}s exceeded"
            ) from None

        stdout, _ = truncate_output(stdout, self._max_output_chars)
        stderr, _ = truncate_output(stderr, self._max_output_chars)
        if exit_code != 0:
            raise CommandExitError(exit_code=exit_code, stdout=stdout, stderr=stderr)

        return CommandResult(
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    async def write_file(self, path: str, content: str) -> None:
        self._ensure_alive()
        resolved = self._resolve_path(path)
        os.makedirs(os.path.dirname(resolved), exist_ok=True)
        with open(resolved, "w", encoding="utf-8") as f:
            f.write(content)

    async def read_file(self, path: str) -> str:
        self._ensure_alive()
        resolved = self._resolve_path(path)
        with open(resolved, encoding="utf-8") as f:
            return f.read()

    def get_host(self, port: int) -> str:
        return f"localhost:{port}"


class LocalSandboxProvider(SandboxProvider):
    """Creates sandboxes as directories under ``root``."""

    def __init__(self, root: str | None = None, max_output_chars: int | None = None):
        self.root = os.path.abspath(
            root or os.path.join(tempfile.gettempdir(), "codeagent-sandboxes")
        )
        self.max_output_chars = max_output_chars
        os.makedirs(self.root, exist_ok=True)

    async def create(self, template: str | None = None) -> Sandbox:
        sandbox_id = uuid.uuid4().hex
        sandbox = LocalSandbox(sandbox_id, self.root, self.max_output_chars)
        os.makedirs(sandbox.workdir)
        sandbox._write_metadata(
            {
                "template": template,
                "created_at": time.time(),
                "deadline": time.time() + DEFAULT_SANDBOX_TIMEOUT_SECONDS,
            }
        )
        logger.info("Created local sandbox %s at %s", sandbox_id, sandbox.workdir)
        return sandbox

    async def connect(self, sandbox_id: str) -> Sandbox:
        if not sandbox_id.isalnum():
            raise SandboxError(f"Invalid sandbox id: {sandbox_id}")
        sandbox = LocalSandbox(sandbox_id, self.root, self.max_output_chars)
        sandbox._read_metadata()
        return sandbox
