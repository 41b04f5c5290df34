"""
Chaser decision branches.

Each personality type maps to one branch:

- aggressive: direct pursuit, aiming past the opponent
- strategic: linear prediction of the opponent plus interception
- defensive: cautious approach anchored to the chaser's own position
- random: 70% biased toward the opponent, 30% random wander

Prediction extrapolates the opponent's last displacement over a fixed
0.5s horizon: ``predicted = current + (current - previous) * 0.5``.
"""

from __future__ import annotations

from typing import Dict, Optional

from ..agent import Agent, ChaserState
from ..geometry import EPSILON, Vector3, step_along
from ..schemas import (
    AIDecision,
    DecisionAction,
    GameState,
    Outcome,
    PersonalityType,
)
from .common import Branch, build_decision

PREDICTION_HORIZON = 0.5
INTERCEPT_FACTOR = 1.5
AGGRESSIVE_OVERSHOOT = 2.0
DEFENSIVE_FACTOR = 0.8
RANDOM_PURSUIT_BIAS = 0.7
RANDOM_PURSUIT_STEP = 0.5
RANDOM_WANDER_RADIUS = 2.0


def _state(agent: Agent) -> ChaserState:
    state = agent.role_state
    if not isinstance(state, ChaserState):
        raise TypeError(f"Agent {agent.id} is not chasing this round")
    return state


def aggressive_chase(
    agent: Agent, opponent: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    speed = agent.calculate_movement_speed("chase")
    direction = agent.direction_to(opponent)
    target = step_along(opponent, direction, speed * AGGRESSIVE_OVERSHOOT)

    return build_decision(
        agent,
        DecisionAction.CHASE,
        target,
        strategy="aggressive_chase",
        has_memory=True,
        reasoning=f"Aggressive direct chase - distance: {distance:.2f}",
    )


def predict_opponent_position(current: Vector3, previous: Optional[Vector3]) -> Vector3:
    """Extrapolate the opponent's position half a second ahead."""

    if previous is None:
        return current
    velocity = current.sub(previous)
    return current.add(velocity.scale(PREDICTION_HORIZON))


def intercept_point(agent: Agent, predicted: Vector3) -> Vector3:
    direction = agent.direction_to(predicted)
    speed = agent.calculate_movement_speed("chase")
    return step_along(agent.position, direction, speed * INTERCEPT_FACTOR)


def strategic_intercept(
    agent: Agent, opponent: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    predicted = predict_opponent_position(opponent, _state(agent).last_opponent_position)
    target = intercept_point(agent, predicted)

    return build_decision(
        agent,
        DecisionAction.CHASE,
        target,
        strategy="strategic_intercept",
        has_memory=True,
        reasoning=f"Strategic intercept - predicted position: ({predicted.x:.2f}, {predicted.z:.2f})",
    )


def defensive_approach(
    agent: Agent, opponent: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    speed = agent.calculate_movement_speed("chase") * DEFENSIVE_FACTOR
    direction = agent.direction_to(opponent)
    target = step_along(agent.position, direction, speed)

    return build_decision(
        agent,
        DecisionAction.CHASE,
        target,
        strategy="defensive_approach",
        has_memory=True,
        reasoning=f"Defensive approach - maintaining distance: {distance:.2f}",
    )


def random_chase(
    agent: Agent, opponent: Vector3, distance: float, game_state: GameState
) -> AIDecision:
    roll = agent.rng.random()
    if roll < RANDOM_PURSUIT_BIAS:
        target = step_along(agent.position, agent.direction_to(opponent), RANDOM_PURSUIT_STEP)
    else:
        target = agent.random_position_in_range(agent.position, RANDOM_WANDER_RADIUS)

    return build_decision(
        agent,
        DecisionAction.CHASE,
        target,
        strategy="random_chase",
        has_memory=False,
        reasoning=f"Random chase decision - factor: {roll:.2f}",
    )


BRANCHES: Dict[PersonalityType, Branch] = {
    PersonalityType.AGGRESSIVE: aggressive_chase,
    PersonalityType.STRATEGIC: strategic_intercept,
    PersonalityType.DEFENSIVE: defensive_approach,
    PersonalityType.RANDOM: random_chase,
}


def remember_opponent(agent: Agent, opponent: Vector3) -> None:
    _state(agent).last_opponent_position = opponent


def update_learning(
    agent: Agent, game_state: GameState, decision: AIDecision, outcome: Outcome
) -> None:
    """Credit the round outcome and refresh prediction accuracy.

    Accuracy compares the real distance to the opponent with the distance
    to the decision's target: ``1 - |actual - predicted| / actual``,
    averaged 50/50 with the previous value. A zero actual distance is
    not an observation and leaves the average untouched.
    """

    state = _state(agent)
    strategy = state.strategy

    if outcome == "success":
        agent.learning_data.wins_as_chaser += 1
        agent.record_strategy_outcome(
            strategy, "success", decision.reasoning or "successful chase", decision.confidence
        )
    else:
        agent.record_strategy_outcome(
            strategy, "failure", decision.reasoning or "failed chase", decision.confidence
        )

    if state.last_opponent_position is None:
        return

    actual_distance = agent.distance_to(agent.opponent_position(game_state))
    if actual_distance < EPSILON:
        return
    predicted_distance = agent.distance_to(decision.target)
    accuracy = 1 - abs(actual_distance - predicted_distance) / actual_distance
    state.prediction_accuracy = (state.prediction_accuracy + accuracy) / 2


def prediction_accuracy(agent: Agent) -> float:
    return _state(agent).prediction_accuracy
