"""Tests for chaser decision branches, prediction and learning."""

import random

import pytest

from tagverse.agent import Agent
from tagverse.clock import ManualClock
from tagverse.geometry import Vector3
from tagverse.schemas import (
    AIDecision,
    DecisionAction,
    GameState,
    Role,
    TagGameConfig,
    personality_preset,
)
from tagverse.strategy import decide, predict_opponent_position, prediction_accuracy, update_learning


def make_chaser(personality: str, rng=None) -> Agent:
    return Agent(
        "p1",
        Vector3.zero(),
        personality_preset(personality),
        TagGameConfig(tag_distance=2.0),
        role=Role.CHASER,
        rng=rng or random.Random(5),
        clock=ManualClock(1000.0),
    )


def state_with(opponent: Vector3) -> GameState:
    return GameState(
        p1_position=Vector3.zero(),
        p2_position=opponent,
        current_chaser="p1",
        tag_distance=2.0,
    )


def test_aggressive_chase_overshoots_opponent():
    chaser = make_chaser("aggressive")

    decision = decide(chaser, state_with(Vector3(x=4.0)))

    # chase speed clamps to 1.0, overshoot by 2 units past the opponent
    assert decision.action == DecisionAction.CHASE
    assert decision.target.x == pytest.approx(6.0)
    assert decision.target.z == pytest.approx(0.0)
    assert chaser.strategy == "aggressive_chase"
    assert chaser.target == decision.target
    assert decision.timestamp == 1000.0


def test_strategic_intercept_uses_prediction():
    chaser = make_chaser("strategic")

    first = decide(chaser, state_with(Vector3(x=4.0)))
    assert first.target.x == pytest.approx(1.5)
    assert first.confidence == pytest.approx(0.8)

    # Opponent moved (0, 0, 2): predicted (4, 0, 3), heading (0.8, 0.6)
    second = decide(chaser, state_with(Vector3(x=4.0, z=2.0)))
    assert second.target.x == pytest.approx(1.2)
    assert second.target.z == pytest.approx(0.9)
    assert chaser.strategy == "strategic_intercept"


def test_predict_opponent_position():
    current = Vector3(x=2.0, y=0.0, z=1.0)

    assert predict_opponent_position(current, None) == current
    predicted = predict_opponent_position(current, Vector3(x=0.0, y=0.0, z=1.0))
    assert predicted.x == pytest.approx(3.0)
    assert predicted.z == pytest.approx(1.0)


def test_defensive_approach_is_cautious():
    chaser = make_chaser("defensive")

    decision = decide(chaser, state_with(Vector3(x=5.0)))

    # 0.7 * (1 + 0.3 * 0.5) * 0.8
    assert decision.target.x == pytest.approx(0.644)
    assert chaser.strategy == "defensive_approach"


def test_random_chase_stays_close():
    chaser = make_chaser("random", rng=random.Random(21))

    for _ in range(10):
        decision = decide(chaser, state_with(Vector3(x=6.0)))
        assert decision.target.distance_to(Vector3.zero()) <= 2.0 + 1e-9
        assert decision.confidence == pytest.approx(0.3)
        assert chaser.strategy == "random_chase"


def test_coincident_opponent_never_raises():
    chaser = make_chaser("aggressive")

    decision = decide(chaser, state_with(Vector3.zero()))

    assert decision.target == Vector3.zero()


def test_learning_success_updates_ledger_and_accuracy():
    chaser = make_chaser("strategic")
    state = state_with(Vector3(x=4.0))
    decide(chaser, state)

    decision = AIDecision(
        agent_id="p1",
        action=DecisionAction.CHASE,
        target=Vector3(x=3.0),
        timestamp=1000.0,
        confidence=0.8,
    )
    update_learning(chaser, state, decision, "success")

    assert chaser.learning_data.wins_as_chaser == 1
    assert [r.strategy for r in chaser.memory.successful_strategies] == ["strategic_intercept"]
    # actual 4, predicted 3 -> accuracy 0.75, averaged with 0.5
    assert prediction_accuracy(chaser) == pytest.approx(0.625)


def test_learning_failure_goes_to_failed_ledger():
    chaser = make_chaser("defensive")
    state = state_with(Vector3(x=4.0))
    decision = decide(chaser, state)

    update_learning(chaser, state, decision, "failure")

    assert chaser.learning_data.wins_as_chaser == 0
    assert chaser.memory.failed_strategies[0].strategy == "defensive_approach"
    assert chaser.memory.failed_strategies[0].success_rate == 0.0


def test_accuracy_skipped_when_opponent_coincides():
    chaser = make_chaser("strategic")
    decide(chaser, state_with(Vector3(x=4.0)))
    decision = chaser.memory.recent_decisions[-1]

    update_learning(chaser, state_with(Vector3.zero()), decision, "success")

    assert prediction_accuracy(chaser) == pytest.approx(0.5)


def test_chaser_helpers_reject_evaders():
    evader = Agent(
        "p2", Vector3.zero(), personality_preset("random"), TagGameConfig(), role=Role.EVADER
    )

    with pytest.raises(TypeError):
        prediction_accuracy(evader)
