from typing import Any

from ..types.types import AgentResult, OutputMessage


def convert_input_to_messages(
    input_data: str | list[dict[str, Any]],
    history: list[dict[str, Any]] | None = None,
) -> list[dict[str, Any]]:
    """
    Convert input to Chat Completions messages.

    Args:
        input_data: String instruction or array of message dicts
        history: Optional prior conversation as text output items
            (``{"type": "text", "role", "content"}``), oldest first

    Returns:
        List of message dicts
    """
    messages = []

    for item in history or []:
        content = item.get("content", "")
        if isinstance(content, list):
            content = "".join(content)
        messages.append({"role": item.get("role", "user"), "content": content})

    if isinstance(input_data, str):
        messages.append({"role": "user", "content": input_data})
    elif isinstance(input_data, list):
        messages.extend(input_data)

    return messages


def message_text(message: OutputMessage) -> str:
    if isinstance(message.content, list):
        return "".join(message.content)
    return message.content


def last_assistant_text(result: AgentResult) -> str | None:
    """Return the text of the last assistant text message in a turn, if any."""
    for message in reversed(result.output):
        if message.type == "text" and message.role == "assistant":
            return message_text(message)
    return None
