from .tool import Tool, ToolInputError, ToolInvocation

__all__ = ["Tool", "ToolInputError", "ToolInvocation"]
