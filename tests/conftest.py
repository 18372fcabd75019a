"""Shared pytest configuration and fixtures."""

import copy
import json
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from codeagent.core.context import WorkflowContext
from codeagent.core.state import AgentState
from codeagent.execution.sandbox import (
    CommandExitError,
    CommandResult,
    Sandbox,
    SandboxExpiredError,
    SandboxProvider,
)
from codeagent.llm.providers import LLMProvider, LLMResponse
from codeagent.persistence.messages import InMemoryMessageStore
from codeagent.prompts import FRAGMENT_TITLE_PROMPT
from codeagent.runtime.store import InMemoryStepStore


def text_response(text):
    return LLMResponse(content=text, tool_calls=[], stop_reason="stop")


def tool_response(*calls, content=""):
    """Build a response requesting ``calls``, each a ``(name, arguments)`` pair."""
    tool_calls = []
    for idx, (name, arguments) in enumerate(calls):
        tool_calls.append(
            {
                "call_id": f"call_{idx}_{uuid.uuid4().hex[:8]}",
                "type": "function",
                "function": {
                    "name": name,
                    "arguments": arguments if isinstance(arguments, str) else json.dumps(arguments),
                },
            }
        )
    return LLMResponse(content=content, tool_calls=tool_calls, stop_reason="tool_calls")


class ScriptedProvider(LLMProvider):
    """LLM provider whose replies come from ``responder(call)``."""

    def __init__(self, responder):
        self.responder = responder
        self.calls = []

    async def generate(
        self,
        messages,
        model,
        tools=None,
        temperature=None,
        max_tokens=None,
        agent_config=None,
        **kwargs,
    ):
        call = {
            "messages": copy.deepcopy(messages),
            "model": model,
            "tools": tools,
            "temperature": temperature,
            "system_prompt": (agent_config or {}).get("system_prompt"),
        }
        self.calls.append(call)
        result = self.responder(call)
        if isinstance(result, Exception):
            raise result
        return result

    @property
    def tool_calls(self):
        """Calls made with tools attached (coding agent turns)."""
        return [call for call in self.calls if call["tools"]]


def scripted_agent_responder(script, title="Counter App", response="Here is your counter."):
    """Route coding-agent calls through ``script`` and answer generator calls.

    Once ``script`` is exhausted the coding agent keeps replying with plain
    text that never completes the task.
    """
    remaining = list(script)

    def responder(call):
        if call["tools"]:
            if remaining:
                return remaining.pop(0)
            return text_response("Still working on it.")
        if call["system_prompt"] == FRAGMENT_TITLE_PROMPT:
            return title if isinstance(title, LLMResponse) else text_response(title)
        return response if isinstance(response, LLMResponse) else text_response(response)

    return responder


class FakeSandbox(Sandbox):
    def __init__(self, sandbox_id, provider):
        self._sandbox_id = sandbox_id
        self.provider = provider

    @property
    def sandbox_id(self):
        return self._sandbox_id

    async def set_timeout(self, seconds):
        self.provider.timeouts[self._sandbox_id] = seconds

    async def run_command(self, command, on_stdout=None, on_stderr=None, timeout=None):
        self.provider.commands.append(command)
        exit_code, stdout, stderr = self.provider.command_handler(command)
        if stdout and on_stdout:
            on_stdout(stdout)
        if stderr and on_stderr:
            on_stderr(stderr)
        if exit_code != 0:
            raise CommandExitError(exit_code=exit_code, stdout=stdout, stderr=stderr)
        return CommandResult(exit_code=exit_code, stdout=stdout, stderr=stderr)

    async def write_file(self, path, content):
        if path in self.provider.failing_paths:
            raise OSError(f"cannot write {path}")
        self.provider.writes.append(path)
        self.provider.files[path] = content

    async def read_file(self, path):
        if path not in self.provider.files:
            raise FileNotFoundError(f"No such file: {path}")
        return self.provider.files[path]

    def get_host(self, port):
        return f"{port}-{self._sandbox_id}.sandbox.test"


class FakeSandboxProvider(SandboxProvider):
    """In-memory sandboxes sharing one file system, recording every call."""

    def __init__(self):
        self.created = []
        self.templates = []
        self.connected = []
        self.timeouts = {}
        self.files = {}
        self.writes = []
        self.commands = []
        self.failing_paths = set()
        self.expired = set()
        self.command_handler = lambda command: (0, "", "")

    async def create(self, template=None):
        sandbox_id = f"sbx-{len(self.created) + 1}"
        self.created.append(sandbox_id)
        self.templates.append(template)
        return FakeSandbox(sandbox_id, self)

    async def connect(self, sandbox_id):
        self.connected.append(sandbox_id)
        if sandbox_id in self.expired:
            raise SandboxExpiredError(sandbox_id)
        return FakeSandbox(sandbox_id, self)


@pytest.fixture
def llm():
    """Response builders and the scripted provider class."""
    return SimpleNamespace(
        text=text_response,
        tools=tool_response,
        provider=ScriptedProvider,
        agent_responder=scripted_agent_responder,
    )


@pytest.fixture
def step_store():
    return InMemoryStepStore()


@pytest.fixture
def mock_workflow_context(step_store):
    """Create a WorkflowContext with AgentState and an in-memory step store."""
    return WorkflowContext(
        workflow_id="test-workflow",
        execution_id=str(uuid.uuid4()),
        store=step_store,
        state_schema=AgentState,
    )


@pytest.fixture
def fake_sandbox_provider():
    return FakeSandboxProvider()


@pytest.fixture
def message_store():
    return InMemoryMessageStore()


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI AsyncOpenAI client."""
    client = AsyncMock()
    client.chat.completions.create = AsyncMock()
    return client
