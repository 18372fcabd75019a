"""Tests for task completion detection."""

from codeagent.agents.completion import (
    Complete,
    Incomplete,
    observe_completion,
    parse_completion,
)
from codeagent.core.state import AgentState
from codeagent.types.types import AgentResult, OutputMessage


def turn_result(*texts, turn=1):
    return AgentResult(
        agent_name="code-agent",
        turn=turn,
        output=[OutputMessage(type="text", role="assistant", content=text) for text in texts],
    )


class TestParseCompletion:
    def test_marker_completes_with_whole_message(self):
        text = "All set.\n<task_summary>\nCreated a counter.\n</task_summary>"
        assert parse_completion(text) == Complete(summary=text)

    def test_without_marker(self):
        assert parse_completion("Installing dependencies") == Incomplete()

    def test_none_and_empty(self):
        assert parse_completion(None) == Incomplete()
        assert parse_completion("") == Incomplete()


class TestObserveCompletion:
    """Tests for the on_response completion hook."""

    def test_sets_summary_once(self):
        state = AgentState()

        observe_completion(turn_result("<task_summary>first</task_summary>"), state)
        observe_completion(turn_result("<task_summary>second</task_summary>", turn=2), state)

        assert state.summary == "<task_summary>first</task_summary>"

    def test_uses_last_assistant_text(self):
        state = AgentState()

        completion = observe_completion(
            turn_result("<task_summary>old</task_summary>", "still working"), state
        )

        assert completion == Incomplete()
        assert state.summary == ""

    def test_ignores_tool_results(self):
        state = AgentState()
        result = AgentResult(
            agent_name="code-agent",
            turn=1,
            output=[
                OutputMessage(type="tool_result", role="tool", content="<task_summary>x"),
            ],
        )

        assert observe_completion(result, state) == Incomplete()
        assert state.summary == ""

    def test_joins_list_content(self):
        state = AgentState()
        result = AgentResult(
            agent_name="code-agent",
            turn=1,
            output=[OutputMessage(content=["Done ", "<task_summary>ok</task_summary>"])],
        )

        observe_completion(result, state)

        assert state.summary == "Done <task_summary>ok</task_summary>"
