"""Tests for the terminal tool."""

import pytest

from codeagent.core.context import WorkflowContext
from codeagent.core.state import AgentState
from codeagent.execution.sandbox_tools import sandbox_tools
from codeagent.execution.tools.terminal import create_terminal_tool, format_command_failure
from codeagent.tools.tool import ToolInputError, ToolInvocation


def invocation_for(ctx, step_key="code-agent:1.tool.0.terminal"):
    return ToolInvocation(ctx=ctx, state=AgentState(), step_key=step_key)


@pytest.fixture
def terminal(fake_sandbox_provider):
    return create_terminal_tool(lambda: fake_sandbox_provider.connect("sbx-1"))


class TestTerminalTool:
    """Tests for the terminal tool handler."""

    @pytest.mark.asyncio
    async def test_returns_stdout(self, terminal, fake_sandbox_provider, mock_workflow_context):
        fake_sandbox_provider.command_handler = lambda command: (0, "added 12 packages\n", "")

        output = await terminal.execute(
            invocation_for(mock_workflow_context), {"command": "npm install"}
        )

        assert output == "added 12 packages\n"
        assert fake_sandbox_provider.commands == ["npm install"]
        assert fake_sandbox_provider.connected == ["sbx-1"]

    @pytest.mark.asyncio
    async def test_failure_includes_both_streams(
        self, terminal, fake_sandbox_provider, mock_workflow_context
    ):
        """A non-zero exit reports the error and everything printed so far."""
        fake_sandbox_provider.command_handler = lambda command: (1, "partial out", "ERR boom")

        output = await terminal.execute(invocation_for(mock_workflow_context), {"command": "x"})

        assert output.startswith("Command failed: Command exited with code 1")
        assert "\nstdout: partial out\n" in output
        assert output.endswith("stderr: ERR boom")

    @pytest.mark.asyncio
    async def test_expired_sandbox_is_reported(
        self, terminal, fake_sandbox_provider, mock_workflow_context
    ):
        fake_sandbox_provider.expired.add("sbx-1")

        output = await terminal.execute(invocation_for(mock_workflow_context), {"command": "ls"})

        assert output == "Command failed: Sandbox sbx-1 has expired\nstdout: \nstderr: "
        assert fake_sandbox_provider.commands == []

    @pytest.mark.asyncio
    async def test_replay_does_not_rerun_command(
        self, terminal, fake_sandbox_provider, mock_workflow_context, step_store
    ):
        """A completed command is returned from the checkpoint on resume."""
        fake_sandbox_provider.command_handler = lambda command: (0, "ok", "")
        await terminal.execute(invocation_for(mock_workflow_context), {"command": "touch a"})

        resumed = WorkflowContext(
            workflow_id="test-workflow",
            execution_id=mock_workflow_context.execution_id,
            store=step_store,
        )
        output = await terminal.execute(invocation_for(resumed), {"command": "touch a"})

        assert output == "ok"
        assert fake_sandbox_provider.commands == ["touch a"]

    @pytest.mark.asyncio
    async def test_missing_command_is_input_error(self, terminal, mock_workflow_context):
        with pytest.raises(ToolInputError):
            await terminal.execute(invocation_for(mock_workflow_context), "{}")

    def test_definition(self, terminal):
        definition = terminal.to_llm_tool_definition()

        assert definition["name"] == "terminal"
        assert definition["description"] == "Use the terminal to run commands"
        assert definition["parameters"]["required"] == ["command"]


class TestFormatCommandFailure:
    def test_format(self):
        message = format_command_failure(RuntimeError("exit 2"), "out", "err")
        assert message == "Command failed: exit 2\nstdout: out\nstderr: err"


class TestSandboxTools:
    def test_tool_names(self, fake_sandbox_provider):
        tools = sandbox_tools(fake_sandbox_provider, "sbx-9")
        assert [tool.id for tool in tools] == ["terminal", "createOrUpdateFiles", "readFiles"]

    @pytest.mark.asyncio
    async def test_tools_reconnect_by_id(self, fake_sandbox_provider, mock_workflow_context):
        """Every call resolves the sandbox from its id."""
        terminal = sandbox_tools(fake_sandbox_provider, "sbx-9")[0]

        await terminal.execute(
            invocation_for(mock_workflow_context, "a.tool.0.terminal"), {"command": "ls"}
        )
        await terminal.execute(
            invocation_for(mock_workflow_context, "a.tool.1.terminal"), {"command": "pwd"}
        )

        assert fake_sandbox_provider.connected == ["sbx-9", "sbx-9"]
