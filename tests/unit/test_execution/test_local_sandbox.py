"""Tests for local sandboxes."""

import os

import pytest

from codeagent.execution import create_sandbox_provider
from codeagent.execution.local import LocalSandboxProvider
from codeagent.execution.sandbox import CommandExitError, SandboxError, SandboxExpiredError


@pytest.fixture
def provider(tmp_path):
    return LocalSandboxProvider(root=str(tmp_path))


class TestLocalSandboxProvider:
    @pytest.mark.asyncio
    async def test_create_and_connect(self, provider):
        sandbox = await provider.create("nextjs")

        connected = await provider.connect(sandbox.sandbox_id)

        assert connected.sandbox_id == sandbox.sandbox_id
        assert os.path.isdir(connected.workdir)

    @pytest.mark.asyncio
    async def test_connect_unknown_id(self, provider):
        with pytest.raises(SandboxExpiredError):
            await provider.connect("doesnotexist")

    @pytest.mark.asyncio
    async def test_connect_rejects_path_like_ids(self, provider):
        with pytest.raises(SandboxError, match="Invalid sandbox id"):
            await provider.connect("../etc")


class TestLocalSandbox:
    """Tests for LocalSandbox operations."""

    @pytest.mark.asyncio
    async def test_run_command_streams_output(self, provider):
        sandbox = await provider.create()
        chunks = []

        result = await sandbox.run_command("echo hello", on_stdout=chunks.append)

        assert result.exit_code == 0
        assert result.stdout == "hello\n"
        assert "".join(chunks) == "hello\n"

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self, provider):
        sandbox = await provider.create()
        stderr = []

        with pytest.raises(CommandExitError) as exc_info:
            await sandbox.run_command("echo out; echo err >&2; exit 3", on_stderr=stderr.append)

        assert exc_info.value.exit_code == 3
        assert exc_info.value.stdout == "out\n"
        assert exc_info.value.stderr == "err\n"
        assert "".join(stderr) == "err\n"

    @pytest.mark.asyncio
    async def test_command_timeout_kills_process(self, provider):
        sandbox = await provider.create()

        with pytest.raises(CommandExitError) as exc_info:
            await sandbox.run_command("sleep 10", timeout=1)

        assert exc_info.value.exit_code == 137

    @pytest.mark.asyncio
    async def test_files_round_trip_under_workdir(self, provider):
        """Absolute paths are rooted at the sandbox directory."""
        sandbox = await provider.create()

        await sandbox.write_file("/home/user/app/page.tsx", "export default 1")

        assert await sandbox.read_file("home/user/app/page.tsx") == "export default 1"
        assert os.path.isfile(os.path.join(sandbox.workdir, "home/user/app/page.tsx"))

    @pytest.mark.asyncio
    async def test_rejects_escaping_paths(self, provider):
        sandbox = await provider.create()
        with pytest.raises(SandboxError, match="escapes"):
            await sandbox.write_file("../outside.txt", "x")

    @pytest.mark.asyncio
    async def test_expired_sandbox_rejects_operations(self, provider):
        sandbox = await provider.create()
        await sandbox.set_timeout(-1)

        with pytest.raises(SandboxExpiredError):
            await sandbox.run_command("echo hi")
        with pytest.raises(SandboxExpiredError):
            await sandbox.read_file("a.txt")

    @pytest.mark.asyncio
    async def test_get_host(self, provider):
        sandbox = await provider.create()
        assert sandbox.get_host(3000) == "localhost:3000"


class TestCreateSandboxProvider:
    def test_local(self, tmp_path):
        provider = create_sandbox_provider("local", root=str(tmp_path))
        assert isinstance(provider, LocalSandboxProvider)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown sandbox provider"):
            create_sandbox_provider("docker")
