"""Tests for Agent primitives: speed, confidence, memory and ledgers."""

import random

import pytest

from tagverse.agent import Agent, ChaserState, EvaderState
from tagverse.clock import ManualClock
from tagverse.geometry import Vector3
from tagverse.schemas import (
    AIDecision,
    AIPersonality,
    DecisionAction,
    GameState,
    PersonalityType,
    Role,
    TagGameConfig,
    personality_preset,
)


def make_agent(personality="strategic", role=Role.CHASER, **config) -> Agent:
    return Agent(
        "p1",
        Vector3.zero(),
        personality_preset(personality),
        TagGameConfig(**config),
        role=role,
        rng=random.Random(0),
        clock=ManualClock(),
    )


def test_unknown_agent_id_rejected():
    with pytest.raises(ValueError):
        Agent("p3", Vector3.zero(), personality_preset("random"), TagGameConfig())


def test_movement_speed_by_situation():
    agent = make_agent("strategic")

    # 0.8 * (1 + 0.6 * 0.5) = 1.04, clamped
    assert agent.calculate_movement_speed("chase") == pytest.approx(1.0)
    assert agent.calculate_movement_speed("evade") == pytest.approx(0.8 * 1.12)
    assert agent.calculate_movement_speed("patrol") == pytest.approx(0.56)
    assert agent.calculate_movement_speed("wander") == pytest.approx(0.8)


def test_movement_speed_lower_clamp():
    personality = AIPersonality(type="random", speed=0.05, aggression=0.0, caution=0.0)
    agent = Agent("p2", Vector3.zero(), personality, TagGameConfig())

    assert agent.calculate_movement_speed("patrol") == pytest.approx(0.1)


def test_confidence_by_personality():
    assert make_agent("strategic").calculate_confidence("any", True) == pytest.approx(0.8)
    assert make_agent("aggressive").calculate_confidence("any", False) == pytest.approx(0.5)
    assert make_agent("random").calculate_confidence("any", False) == pytest.approx(0.3)


def test_recent_positions_are_bounded_fifo():
    agent = make_agent(memory_size=3)

    for step in range(1, 6):
        agent.update_position(Vector3(x=float(step), y=0.0, z=0.0))

    assert [p.x for p in agent.memory.recent_positions] == [3.0, 4.0, 5.0]
    assert agent.velocity == Vector3(x=1.0, y=0.0, z=0.0)


def test_recent_decisions_are_bounded():
    agent = make_agent(memory_size=2)

    for step in range(4):
        agent.record_decision(
            AIDecision(
                agent_id="p1",
                action=DecisionAction.MOVE,
                target=Vector3(x=float(step)),
                timestamp=float(step),
                confidence=0.5,
            )
        )

    assert [d.timestamp for d in agent.memory.recent_decisions] == [2.0, 3.0]


def test_strategy_ledger_upserts():
    agent = make_agent()

    agent.record_strategy_outcome("strategic_intercept", "success", "caught")
    record = agent.record_strategy_outcome("strategic_intercept", "success", "caught again")
    failed = agent.record_strategy_outcome("strategic_intercept", "failure", "missed")

    assert len(agent.memory.successful_strategies) == 1
    assert record.times_used == 2
    assert record.success_rate == 1.0
    assert failed.success_rate == 0.0
    assert len(agent.memory.failed_strategies) == 1
    assert len(agent.learning_data.strategy_evolution) == 3


def test_set_role_resets_role_state_and_counts_round():
    agent = make_agent(role=Role.CHASER)
    assert isinstance(agent.role_state, ChaserState)

    agent.set_role(Role.EVADER)

    assert isinstance(agent.role_state, EvaderState)
    assert agent.strategy == "flee"
    assert agent.learning_data.total_rounds == 1


def test_reassigned_shares_personality_and_learning():
    agent = make_agent()
    agent.update_position(Vector3(x=1.0))
    agent.record_strategy_outcome("strategic_intercept", "success", "caught")
    agent.observe_opponent(Vector3(x=5.0))
    agent.observe_opponent(Vector3(x=4.0))

    successor = agent.reassigned(Role.EVADER, Vector3(x=5.0))

    assert successor.personality is agent.personality
    assert successor.learning_data is agent.learning_data
    assert successor.memory.successful_strategies is agent.memory.successful_strategies
    assert successor.memory.opponent_patterns is agent.memory.opponent_patterns
    assert successor.memory.recent_positions == []
    assert successor.role == Role.EVADER
    assert successor.position.x == 5.0
    assert successor.learning_data.total_rounds == 1


def test_observe_opponent_counts_patterns():
    agent = make_agent(tag_distance=2.0)

    assert agent.observe_opponent(Vector3(x=12.0)) is None
    agent.observe_opponent(Vector3(x=11.0))
    pattern = agent.observe_opponent(Vector3(x=10.0))

    assert pattern.situation == "far"
    assert pattern.opponent_action == "approaching"
    assert pattern.frequency == 2

    agent.observe_opponent(Vector3(x=2.5))
    assert agent.most_common_opponent_action("close") == "approaching"
    assert agent.most_common_opponent_action("mid") is None


def test_opponent_range_check():
    agent = make_agent(tag_distance=2.0)

    state = GameState(
        p1_position=Vector3.zero(), p2_position=Vector3(x=1.5), tag_distance=2.0
    )

    assert agent.opponent_position(state).x == 1.5
    assert agent.is_opponent_in_range(state)
    assert not agent.is_opponent_in_range(state, 1.0)


def test_personality_type_is_enum():
    assert make_agent("defensive").personality.type is PersonalityType.DEFENSIVE
