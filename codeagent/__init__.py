__version__ = "0.1.0"

from .agents import (
    Agent,
    Complete,
    Continue,
    Incomplete,
    Network,
    NetworkResult,
    Stop,
)
from .config import Settings
from .core import (
    AgentState,
    StepExecutionError,
    Workflow,
    WorkflowContext,
    WorkflowState,
    workflow,
)
from .execution import (
    LocalSandboxProvider,
    Sandbox,
    SandboxProvider,
    create_sandbox_provider,
    sandbox_tools,
)
from .llm import LLMProvider, LLMResponse, get_provider, register_provider
from .persistence import (
    Fragment,
    HttpMessageStore,
    InMemoryMessageStore,
    Message,
    MessageRole,
    MessageStore,
    MessageType,
)
from .runtime import FileStepStore, InMemoryStepStore, StepStore
from .tools import Tool, ToolInvocation
from .workflows import CodeAgentPayload, CodeAgentResult, create_code_agent_workflow

__all__ = [
    "Agent",
    "AgentState",
    "CodeAgentPayload",
    "CodeAgentResult",
    "Complete",
    "Continue",
    "FileStepStore",
    "Fragment",
    "HttpMessageStore",
    "Incomplete",
    "InMemoryMessageStore",
    "InMemoryStepStore",
    "LLMProvider",
    "LLMResponse",
    "LocalSandboxProvider",
    "Message",
    "MessageRole",
    "MessageStore",
    "MessageType",
    "Network",
    "NetworkResult",
    "Sandbox",
    "SandboxProvider",
    "Settings",
    "StepExecutionError",
    "StepStore",
    "Stop",
    "Tool",
    "ToolInvocation",
    "Workflow",
    "WorkflowContext",
    "WorkflowState",
    "create_code_agent_workflow",
    "create_sandbox_provider",
    "get_provider",
    "register_provider",
    "sandbox_tools",
    "workflow",
]
