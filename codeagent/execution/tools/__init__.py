from .files import create_read_files_tool, create_write_files_tool
from .terminal import create_terminal_tool

__all__ = ["create_terminal_tool", "create_write_files_tool", "create_read_files_tool"]
