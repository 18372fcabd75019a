from .code_agent import (
    CODE_AGENT_EVENT,
    ERROR_MESSAGE,
    CodeAgentPayload,
    CodeAgentResult,
    create_code_agent_workflow,
)

__all__ = [
    "CODE_AGENT_EVENT",
    "ERROR_MESSAGE",
    "CodeAgentPayload",
    "CodeAgentResult",
    "create_code_agent_workflow",
]
