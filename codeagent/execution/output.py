"""Output utilities for sandbox commands."""

from __future__ import annotations

import re

# Default maximum output characters
DEFAULT_MAX_CHARS = 100_000

# Head portion of truncated output (20% of max)
HEAD_RATIO = 0.2

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")


def truncate_output(output: str, max_chars: int | None = None) -> tuple[str, bool]:
    """Truncate output that exceeds the maximum character limit.

    Keeps the first 20% characters (head) and last 80% characters (tail)
    of the max, with a truncation message in between.

    Args:
        output: The output string to potentially truncate.
        max_chars: Maximum character limit (default: 100,000).

    Returns:
        A tuple of (text, truncated) where truncated is True if output was truncated.
    """
    max_c = max_chars if max_chars is not None else DEFAULT_MAX_CHARS
    if len(output) <= max_c:
        return output, False

    head_size = int(max_c * HEAD_RATIO)
    tail_size = max_c - head_size
    omitted = len(output) - head_size - tail_size

    head = output[:head_size]
    tail = output[-tail_size:]
    return f"{head}\n\n--- truncated {omitted} characters ---\n\n{tail}", True


def strip_ansi(text: str) -> str:
    """Strip ANSI escape codes from text."""
    return _ANSI_RE.sub("", text)


class OutputBuffer:
    """Accumulates streamed command output.

    Instances are callable so they can be passed directly as ``on_stdout``
    or ``on_stderr`` callbacks.
    """

    def __init__(self) -> None:
        self._chunks: list[str] = []

    def __call__(self, chunk: str) -> None:
        self._chunks.append(chunk)

    @property
    def text(self) -> str:
        return strip_ansi("".join(self._chunks))
