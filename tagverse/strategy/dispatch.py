"""
Strategy table and role dispatch.

Decision logic is selected by ``(role, personality_type)`` instead of by
agent subclass. Each role may register an override that runs before the
table lookup (the evader's danger check), a hook that remembers the
opponent's position for the next prediction, and a learning update.
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from ..agent import Agent
from ..geometry import Vector3
from ..schemas import (
    AgentStatus,
    AIDecision,
    GameState,
    Outcome,
    PersonalityType,
    Role,
)
from . import chaser, evader
from .common import Branch, Override

LearningUpdate = Callable[[Agent, GameState, AIDecision, Outcome], None]

STRATEGY_TABLE: Dict[Tuple[Role, PersonalityType], Branch] = {
    **{(Role.CHASER, kind): branch for kind, branch in chaser.BRANCHES.items()},
    **{(Role.EVADER, kind): branch for kind, branch in evader.BRANCHES.items()},
}

ROLE_OVERRIDES: Dict[Role, Override] = {
    Role.EVADER: evader.danger_override,
}

OPPONENT_TRACKERS: Dict[Role, Callable[[Agent, Vector3], None]] = {
    Role.CHASER: chaser.remember_opponent,
    Role.EVADER: evader.remember_opponent,
}

LEARNING_UPDATES: Dict[Role, LearningUpdate] = {
    Role.CHASER: chaser.update_learning,
    Role.EVADER: evader.update_learning,
}


def decide(agent: Agent, game_state: GameState) -> AIDecision:
    """Produce this tick's decision for ``agent``.

    The decision is recorded in the agent's memory and becomes its current
    target; the opponent's position is kept for next tick's prediction.
    """

    opponent = agent.opponent_position(game_state)
    separation = agent.distance_to(opponent)
    agent.observe_opponent(opponent)

    decision = None
    override = ROLE_OVERRIDES.get(agent.role)
    if override is not None:
        decision = override(agent, opponent, separation, game_state)
    if decision is None:
        branch = STRATEGY_TABLE[(agent.role, agent.personality.type)]
        decision = branch(agent, opponent, separation, game_state)

    agent.record_decision(decision)
    agent.set_target(decision.target)
    OPPONENT_TRACKERS[agent.role](agent, opponent)
    return decision


def update_learning(
    agent: Agent, game_state: GameState, decision: AIDecision, outcome: Outcome
) -> None:
    """Apply the role-specific learning update for a finished round."""

    agent.set_status(AgentStatus.LEARNING)
    LEARNING_UPDATES[agent.role](agent, game_state, decision, outcome)
    agent.set_status(AgentStatus.ACTIVE)
