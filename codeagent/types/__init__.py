from .types import AgentResult, OutputMessage, ToolCall, ToolResult, Usage

__all__ = ["AgentResult", "OutputMessage", "ToolCall", "ToolResult", "Usage"]
