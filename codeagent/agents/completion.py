"""Completion detection for the coding agent.

The agent signals that it is done by ending a message with a
``<task_summary>`` block. Each turn's last assistant text is decoded once
into ``Incomplete`` or ``Complete``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.state import AgentState
from ..types.types import AgentResult
from ..utils.agent import last_assistant_text

logger = logging.getLogger(__name__)

TASK_SUMMARY_MARKER = "<task_summary>"


@dataclass(frozen=True)
class Incomplete:
    pass


@dataclass(frozen=True)
class Complete:
    summary: str


Completion = Incomplete | Complete


def parse_completion(text: str | None) -> Completion:
    """Decode a message into a completion signal.

    The whole message becomes the summary, not only the marked block.
    """
    if text and TASK_SUMMARY_MARKER in text:
        return Complete(summary=text)
    return Incomplete()


def observe_completion(result: AgentResult, state: AgentState) -> Completion:
    """on_response hook: record the first completion signal in ``state.summary``.

    Later signals are ignored so the summary is set at most once.
    """
    completion = parse_completion(last_assistant_text(result))
    if isinstance(completion, Complete) and not state.summary:
        logger.info("Agent %s completed on turn %d", result.agent_name, result.turn)
        state.summary = completion.summary
    return completion
