"""Sandboxes and the tools that operate inside them."""

from .local import LocalSandboxProvider
from .sandbox import (
    CommandExitError,
    CommandResult,
    Sandbox,
    SandboxError,
    SandboxExpiredError,
    SandboxProvider,
)
from .sandbox_tools import sandbox_tools


def create_sandbox_provider(kind: str, **kwargs) -> SandboxProvider:
    """Build a sandbox provider by name ("e2b" or "local")."""
    if kind == "local":
        return LocalSandboxProvider(**kwargs)
    if kind == "e2b":
        from .e2b import E2BSandboxProvider

        return E2BSandboxProvider(**kwargs)
    raise ValueError(f"Unknown sandbox provider: {kind}. Supported providers: e2b, local.")


__all__ = [
    "CommandExitError",
    "CommandResult",
    "LocalSandboxProvider",
    "Sandbox",
    "SandboxError",
    "SandboxExpiredError",
    "SandboxProvider",
    "create_sandbox_provider",
    "sandbox_tools",
]
