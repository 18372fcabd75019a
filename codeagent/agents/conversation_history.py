"""Loading prior conversation for a project."""

from __future__ import annotations

from typing import Any

from ..core.context import WorkflowContext
from ..persistence.messages import MessageRole, MessageStore

DEFAULT_HISTORY_LIMIT = 5


async def load_previous_messages(
    ctx: WorkflowContext,
    store: MessageStore,
    project_id: str,
    limit: int = DEFAULT_HISTORY_LIMIT,
    step_key: str = "get-previous-messages",
) -> list[dict[str, Any]]:
    """Load the most recent messages of a project as a durable step.

    The store returns messages newest first; the result is reversed so the
    agent reads them in chronological order.

    Args:
        ctx: WorkflowContext for durable execution
        store: Message store to read from
        project_id: Project identifier
        limit: Maximum number of messages (default: 5)
        step_key: Step key for the checkpoint

    Returns:
        List of ``{"type": "text", "role": "assistant" | "user", "content"}`` dicts,
        oldest first
    """

    async def fetch() -> list[dict[str, Any]]:
        messages = await store.recent_messages(project_id, limit)
        formatted = [
            {
                "type": "text",
                "role": "assistant" if message.role == MessageRole.ASSISTANT else "user",
                "content": message.content,
            }
            for message in messages[:limit]
        ]
        return list(reversed(formatted))

    return await ctx.step.run(step_key, fetch)
