"""Tests for pydantic schemas: validation, presets and JSON round trips."""

import pytest
from pydantic import ValidationError

from tagverse.communication.messages import (
    CommunicationMessage,
    CommunicationType,
    MessagePriority,
)
from tagverse.geometry import Vector3
from tagverse.schemas import (
    AIDecision,
    AIPersonality,
    DecisionAction,
    GameState,
    LearningData,
    PersonalityType,
    Role,
    RoundEndCause,
    RoundSummary,
    TagGameConfig,
    other_agent,
    personality_preset,
)


def test_tag_game_config_defaults():
    config = TagGameConfig()

    assert config.tag_distance == 2.0
    assert config.max_rounds == 10
    assert config.tick_interval_ms == pytest.approx(100.0)
    assert config.round_duration_ms == pytest.approx(30_000.0)
    assert config.outcome_attribution == "end_cause"


@pytest.mark.parametrize(
    "field, value",
    [
        ("tag_distance", 0),
        ("game_duration", -1),
        ("max_rounds", 0),
        ("ai_update_rate", 0),
        ("memory_size", 0),
        ("adaptation_rate", 1.5),
        ("outcome_attribution", "winner"),
    ],
)
def test_tag_game_config_rejects_invalid_values(field, value):
    with pytest.raises(ValidationError):
        TagGameConfig(**{field: value})


def test_personality_presets():
    strategic = personality_preset("strategic")

    assert strategic.type == PersonalityType.STRATEGIC
    assert strategic.speed == 0.8
    assert strategic.confidence == 0.8
    assert personality_preset("strategic") is not strategic

    with pytest.raises(ValueError):
        personality_preset("reckless")


def test_personality_values_are_bounded():
    with pytest.raises(ValidationError):
        AIPersonality(type="aggressive", speed=1.2, aggression=0.5, caution=0.5)


def test_other_agent():
    assert other_agent("p1") == "p2"
    assert other_agent("p2") == "p1"
    with pytest.raises(ValueError):
        other_agent("p3")


def test_game_state_lookups_and_deep_copy():
    state = GameState(
        p1_position=Vector3(x=1.0, y=0.0, z=0.0),
        p2_position=Vector3(x=2.0, y=0.0, z=0.0),
        current_chaser="p2",
        tag_distance=2.0,
    )

    assert state.position_of("p2").x == 2.0
    assert state.role_of("p1") == Role.EVADER
    assert state.role_of("p2") == Role.CHASER

    snapshot = state.model_copy(deep=True)
    snapshot.p1_position = Vector3(x=9.0, y=0.0, z=0.0)
    assert state.p1_position.x == 1.0


def test_decision_is_frozen():
    decision = AIDecision(
        agent_id="p1",
        action=DecisionAction.CHASE,
        target=Vector3.zero(),
        timestamp=0.0,
        confidence=0.5,
    )

    with pytest.raises(ValidationError):
        decision.confidence = 0.9


def test_learning_data_running_mean():
    data = LearningData()

    data.record_round_duration(10.0)
    data.record_round_duration(20.0)
    data.record_round_duration(30.0)

    assert data.rounds_timed == 3
    assert data.average_game_duration == pytest.approx(20.0)
    assert data.learning_rate == 0.1
    assert data.adaptation_speed == 0.05


def test_round_summary_outcome_lookup():
    summary = RoundSummary(
        round_number=1,
        chaser="p1",
        cause=RoundEndCause.TAG,
        duration_ms=1200.0,
        p1_outcome="success",
        p2_outcome="failure",
        ended_at=1200.0,
    )

    assert summary.outcome_for("p1") == "success"
    assert summary.outcome_for("p2") == "failure"


def test_communication_message_json_round_trip():
    message = CommunicationMessage(
        id="msg_1000_abc123def",
        sender_id="p1",
        receiver_id="broadcast",
        message_type=CommunicationType.THREAT_ASSESSMENT,
        content={
            "threat_level": 0.9,
            "threat_source": {"x": 1.0, "y": 0.0, "z": -2.5},
            "recommended_action": "evasive_maneuver",
        },
        timestamp=1000.0,
        priority=MessagePriority.HIGH,
        expires_at=6000.0,
    )

    restored = CommunicationMessage.model_validate_json(message.model_dump_json())

    assert restored == message
    assert restored.priority is MessagePriority.HIGH
    assert restored.content["threat_source"]["z"] == -2.5


def test_message_priority_ordering():
    assert MessagePriority.CRITICAL < MessagePriority.HIGH < MessagePriority.NORMAL
    assert MessagePriority.LOW < MessagePriority.DEBUG
    assert int(MessagePriority.DEBUG) == 4
