"""Agent network: a bounded loop that routes turns between agents.

Before every turn the router looks at the shared state and decides whether
to run another agent turn or stop. The loop also stops after ``max_iter``
turns whatever the router says.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, Field

from ..core.context import WorkflowContext
from ..core.state import AgentState
from ..types.types import AgentResult
from ..utils.agent import convert_input_to_messages
from .agent import Agent

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITER = 15


@dataclass(frozen=True)
class Continue:
    agent: Agent


@dataclass(frozen=True)
class Stop:
    pass


NextAction = Continue | Stop


@dataclass
class RouterContext:
    """What the router sees before a turn."""

    network: Network
    state: AgentState
    turn: int
    results: list[AgentResult] = field(default_factory=list)

    @property
    def last_result(self) -> AgentResult | None:
        return self.results[-1] if self.results else None


Router = Callable[[RouterContext], NextAction]


def summary_router(router_ctx: RouterContext) -> NextAction:
    """Stop once a summary is recorded, otherwise hand the turn to the first agent."""
    if router_ctx.state.summary:
        return Stop()
    return Continue(router_ctx.network.agents[0])


class NetworkResult(BaseModel):
    state: AgentState
    turns: int
    results: list[AgentResult] = Field(default_factory=list)
    stop_reason: Literal["completed", "max_iterations"]


class Network:
    """A set of agents sharing one AgentState, driven by a router."""

    def __init__(
        self,
        name: str,
        agents: list[Agent],
        router: Router | None = None,
        max_iter: int = DEFAULT_MAX_ITER,
    ):
        if not agents:
            raise ValueError("Network requires at least one agent")
        if max_iter < 1:
            raise ValueError("max_iter must be at least 1")
        self.name = name
        self.agents = agents
        self.router = router or summary_router
        self.max_iter = max_iter

    async def run(
        self,
        ctx: WorkflowContext,
        input: str,
        state: AgentState,
        history: list[dict[str, Any]] | None = None,
    ) -> NetworkResult:
        """Run the loop until the router stops it or the turn budget is spent.

        Each turn sees the history, then the user instruction, then every
        earlier turn's assistant and tool messages.

        Args:
            ctx: Workflow context used for durable steps
            input: User instruction
            state: Shared state, mutated in place by tools and hooks
            history: Prior conversation, oldest first

        Returns:
            NetworkResult with the final state and per-turn results
        """
        messages = convert_input_to_messages(input, history)
        results: list[AgentResult] = []

        while True:
            action = self.router(
                RouterContext(network=self, state=state, turn=len(results), results=results)
            )
            if isinstance(action, Stop):
                stop_reason = "completed"
                break
            if len(results) >= self.max_iter:
                stop_reason = "max_iterations"
                break

            turn = len(results) + 1
            logger.debug("Network %s: turn %d routed to %s", self.name, turn, action.agent.name)
            result = await action.agent.run_turn(ctx, messages, turn=turn, state=state)
            results.append(result)
            messages.extend(result.to_messages())

        if stop_reason == "max_iterations":
            logger.warning(
                "Network %s stopped after %d turns without completing", self.name, self.max_iter
            )

        return NetworkResult(
            state=state, turns=len(results), results=results, stop_reason=stop_reason
        )
