"""Shared helpers for role strategies."""

from __future__ import annotations

from typing import Callable, Optional

from ..agent import Agent
from ..geometry import Vector3
from ..schemas import AIDecision, DecisionAction, GameState

Branch = Callable[[Agent, Vector3, float, GameState], AIDecision]
"""Decision branch: (agent, opponent_position, distance, game_state) -> decision."""

Override = Callable[[Agent, Vector3, float, GameState], Optional[AIDecision]]
"""Pre-table check that may pre-empt the personality branch."""


def build_decision(
    agent: Agent,
    action: DecisionAction,
    target: Vector3,
    *,
    strategy: str,
    has_memory: bool,
    reasoning: str,
) -> AIDecision:
    """Create a decision stamped with the agent's clock and confidence.

    Also records ``strategy`` as the agent's current strategy so the
    learning ledger credits the branch that actually produced the move.
    """

    agent.role_state.strategy = strategy
    return AIDecision(
        agent_id=agent.id,
        action=action,
        target=target,
        timestamp=agent.clock(),
        confidence=agent.calculate_confidence(strategy, has_memory),
        reasoning=reasoning,
    )
