"""
Evader decision branches.

Before the personality table is consulted, the danger override fires when
the chaser is closer than ``1.5 * tag_distance`` and forces an emergency
escape. Otherwise:

- strategic: hold a separation of ``2 * tag_distance``
- defensive: steady retreat at 90% evasion speed
- aggressive: occasionally taunt (30% step toward the chaser) when safely
  far away, otherwise escape
- random: 60% escape, 40% random wander
"""

from __future__ import annotations

from typing import Dict, Optional

from ..agent import Agent, EvaderState
from ..geometry import Vector3, escape_direction, step_along
from ..schemas import (
    AIDecision,
    DecisionAction,
    GameState,
    Outcome,
    PersonalityType,
)
from .common import Branch, build_decision

DANGER_FACTOR = 1.5
OPTIMAL_DISTANCE_FACTOR = 2.0
EMERGENCY_FACTOR = 2.0
STRATEGIC_RETREAT = 1.5
PATROL_RADIUS = 1.0
DEFENSIVE_FACTOR = 0.9
TAUNT_PROBABILITY = 0.3
TAUNT_STEP = 0.3
AGGRESSIVE_ESCAPE_STEP = 1.2
RANDOM_ESCAPE_BIAS = 0.6
RANDOM_ESCAPE_STEP = 0.8
RANDOM_WANDER_RADIUS = 3.0
MAX_ESCAPE_ROUTES = 10


def _state(agent: Agent) -> EvaderState:
    state = agent.role_state
    if not isinstance(state, EvaderState):
        raise TypeError(f"Agent {agent.id} is not evading this round")
    return state


def calculate_escape_direction(agent: Agent, chaser: Vector3) -> Vector3:
    """Unit vector away from the chaser; random heading when coincident."""

    return escape_direction(agent.position, chaser, agent.rng)


def danger_override(
    agent: Agent, chaser: Vector3, distance: float, game_state: GameState
) -> Optional[AIDecision]:
    if distance >= agent.config.tag_distance * DANGER_FACTOR:
        return None

    speed = agent.calculate_movement_speed("evade")
    target = step_along(
        agent.position, calculate_escape_direction(agent, chaser), speed * EMERGENCY_FACTOR
    )
    return build_decision(
        agent,
        DecisionAction.EVADE,
        target,
        strategy="emergency_escape",
        has_memory=True,
        reasoning=f"Emergency escape - distance to chaser: {distance:.2f}",
    )


def strategic_positioning(
    agent: Agent, chaser: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    optimal = agent.config.tag_distance * OPTIMAL_DISTANCE_FACTOR
    action = DecisionAction.EVADE

    if distance < optimal:
        target = step_along(
            agent.position, calculate_escape_direction(agent, chaser), STRATEGIC_RETREAT
        )
    elif distance > optimal:
        # Close half of the excess so the separation converges on the optimum
        target = step_along(agent.position, agent.direction_to(chaser), (distance - optimal) * 0.5)
    else:
        target = agent.random_position_in_range(agent.position, PATROL_RADIUS)
        action = DecisionAction.PATROL

    return build_decision(
        agent,
        action,
        target,
        strategy="strategic_distance",
        has_memory=True,
        reasoning=f"Strategic positioning - maintaining distance: {distance:.2f}",
    )


def defensive_evasion(
    agent: Agent, chaser: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    speed = agent.calculate_movement_speed("evade") * DEFENSIVE_FACTOR
    target = step_along(agent.position, calculate_escape_direction(agent, chaser), speed)

    return build_decision(
        agent,
        DecisionAction.EVADE,
        target,
        strategy="defensive_evasion",
        has_memory=True,
        reasoning="Defensive evasion - maintaining maximum distance",
    )


def aggressive_evasion(
    agent: Agent, chaser: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    roll = agent.rng.random()
    safe = distance > agent.config.tag_distance * OPTIMAL_DISTANCE_FACTOR

    if roll < TAUNT_PROBABILITY and safe:
        target = step_along(agent.position, agent.direction_to(chaser), TAUNT_STEP)
        reasoning = f"Aggressive evasion - taunting chaser (factor {roll:.2f})"
    else:
        target = step_along(
            agent.position, calculate_escape_direction(agent, chaser), AGGRESSIVE_ESCAPE_STEP
        )
        reasoning = f"Aggressive evasion - taunt factor: {roll:.2f}"

    return build_decision(
        agent,
        DecisionAction.EVADE,
        target,
        strategy="aggressive_evasion",
        has_memory=True,
        reasoning=reasoning,
    )


def random_evasion(
    agent: Agent, chaser: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    roll = agent.rng.random()
    if roll < RANDOM_ESCAPE_BIAS:
        target = step_along(
            agent.position, calculate_escape_direction(agent, chaser), RANDOM_ESCAPE_STEP
        )
    else:
        target = agent.random_position_in_range(agent.position, RANDOM_WANDER_RADIUS)

    return build_decision(
        agent,
        DecisionAction.EVADE,
        target,
        strategy="random_evasion",
        has_memory=False,
        reasoning=f"Random evasion - factor: {roll:.2f}",
    )


BRANCHES: Dict[PersonalityType, Branch] = {
    PersonalityType.STRATEGIC: strategic_positioning,
    PersonalityType.DEFENSIVE: defensive_evasion,
    PersonalityType.AGGRESSIVE: aggressive_evasion,
    PersonalityType.RANDOM: random_evasion,
}


def remember_opponent(agent: Agent, chaser: Vector3) -> None:
    _state(agent).last_chaser_position = chaser


def update_learning(
    agent: Agent, game_state: GameState, decision: AIDecision, outcome: Outcome
) -> None:
    """Credit the round outcome and keep track of escapes that worked."""

    state = _state(agent)
    strategy = state.strategy

    if outcome == "success":
        agent.learning_data.wins_as_evader += 1
        state.survival_time += 1
        agent.record_strategy_outcome(
            strategy, "success", decision.reasoning or "successful evasion", decision.confidence
        )
        if decision.action == DecisionAction.EVADE:
            state.escape_routes.append(decision.target)
            if len(state.escape_routes) > MAX_ESCAPE_ROUTES:
                del state.escape_routes[0]
    else:
        state.survival_time = 0
        agent.record_strategy_outcome(
            strategy, "failure", decision.reasoning or "failed evasion", decision.confidence
        )


def survival_time(agent: Agent) -> int:
    return _state(agent).survival_time


def escape_routes(agent: Agent) -> list:
    return list(_state(agent).escape_routes)
