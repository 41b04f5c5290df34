"""Tests for CommunicativeGame wiring the bus into the coordinator."""

import random

import pytest

from tagverse.clock import ManualClock
from tagverse.communication import CommunicationConfig, CommunicationType, CommunicativeGame
from tagverse.coordinator import GameCoordinator
from tagverse.geometry import Vector3
from tagverse.schemas import DecisionAction, TagGameConfig, TickResult


def make_game(**config):
    clock = ManualClock()
    coordinator = GameCoordinator(TagGameConfig(**config), clock=clock, rng=random.Random(9))
    game = CommunicativeGame(coordinator)
    return game, coordinator, clock


def close_quarters(coordinator: GameCoordinator) -> None:
    coordinator.start_game()
    coordinator.sync_positions(Vector3.zero(), Vector3(x=2.5))


def test_registers_listeners_and_uses_coordinator_clock():
    game, coordinator, _ = make_game()

    assert game.on_tick in coordinator.tick_listeners
    assert game.on_round_end in coordinator.round_listeners
    assert game.bus.clock is coordinator.clock


def test_tick_exchange_nudges_personalities():
    game, coordinator, _ = make_game()
    close_quarters(coordinator)

    game.on_tick(TickResult(round_number=1), coordinator.get_game_state(), coordinator)

    # p1: accelerate +0.1, flanking +0.05, evasive (threat) -0.1
    assert coordinator.p1_agent.personality.aggression == pytest.approx(0.65)
    assert coordinator.p1_agent.target == Vector3(x=2.5)
    # p2: evasive -0.1 on aggression, defensive positioning -0.05 on confidence
    assert coordinator.p2_agent.personality.aggression == pytest.approx(0.7)
    assert coordinator.p2_agent.personality.confidence == pytest.approx(0.65)

    p1_actions = sorted(d.action.value for d in game.applied_decisions["p1"])
    assert p1_actions == ["accelerate_towards", "evasive_maneuver", "flanking_maneuver"]


def test_messages_are_acted_on_once():
    game, coordinator, _ = make_game()
    close_quarters(coordinator)
    game.on_tick(TickResult(round_number=1), coordinator.get_game_state(), coordinator)

    assert game.process_new_messages("p1", coordinator.get_game_state()) == []
    assert game.process_new_messages("p2", coordinator.get_game_state()) == []


def test_cleanup_forgets_expired_ids():
    clock = ManualClock()
    coordinator = GameCoordinator(TagGameConfig(), clock=clock, rng=random.Random(9))
    game = CommunicativeGame(coordinator, config=CommunicationConfig(message_expiration_time=100))
    close_quarters(coordinator)
    game.on_tick(TickResult(round_number=1), coordinator.get_game_state(), coordinator)
    assert game._acted_on["p1"]

    clock.advance(100)

    assert game.cleanup() > 0
    assert game._acted_on == {"p1": set(), "p2": set()}
    assert game.bus.pending_messages() == []


def test_round_end_shares_learning():
    game, coordinator, clock = make_game(game_duration=30)
    coordinator.start_game()
    clock.advance(30_000)

    coordinator.tick()

    history = game.bus.channels["learning"].message_history
    by_sender = {message.sender_id: message for message in history}
    assert len(history) == 2
    assert by_sender["p1"].message_type == CommunicationType.FAILURE_ANALYSIS
    assert by_sender["p2"].message_type == CommunicationType.SUCCESS_SHARING
    assert by_sender["p2"].content["analysis"]["cause"] == "timeout"


def test_custom_message_and_challenge():
    game, _, _ = make_game()

    custom = game.send_custom_message("p2", "over here")
    challenge = game.send_challenge("p1", "speed_challenge", 0.5)

    assert custom.content["intention"] == "custom_message"
    assert custom.content["strategy"] == "over here"
    assert challenge.receiver_id == "p2"
    advice = game.bus.process_communication_for_agent("p2", game.coordinator.get_game_state())
    assert [d.action for d in advice] == [DecisionAction.INCREASE_SPEED]


@pytest.mark.asyncio
async def test_run_and_stats():
    game, _, clock = make_game()

    async def fake_sleep(seconds):
        clock.advance(seconds * 1000)

    await game.run(max_ticks=5, sleep=fake_sleep)
    stats = game.get_communication_stats()

    assert stats["system"].total_messages > 0
    assert stats["system"].messages_by_type["position_update"] == 10
    assert stats["p1"]["my_message_count"] > 0
    assert set(stats) == {"system", "p1", "p2"}


def test_dispose_detaches_everything():
    game, coordinator, _ = make_game()
    coordinator.start_game()

    game.dispose()

    assert game.on_tick not in coordinator.tick_listeners
    assert game.on_round_end not in coordinator.round_listeners
    assert not coordinator.is_game_running()
    assert game.bus.channels == {}
