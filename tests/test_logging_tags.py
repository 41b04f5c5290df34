"""Tests for the tagged console output of the coordinator and the bus."""

import contextlib
import io
import random

import pytest

from tagverse.clock import ManualClock
from tagverse.communication import CommunicationBus, CommunicationConfig, CommunicationType
from tagverse.coordinator import GameCoordinator
from tagverse.logging_utils import Color, colored, log_decision, log_error
from tagverse.schemas import TagGameConfig


@pytest.fixture
def no_color(monkeypatch):
    monkeypatch.setenv("TAGVERSE_NO_COLOR", "1")


def capture(fn, *args, **kwargs) -> str:
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        fn(*args, **kwargs)
    return buf.getvalue()


def test_plain_tags_without_color(no_color):
    assert capture(log_decision, "P1 chose") == "[•] P1 chose\n"
    assert capture(log_error, "bad") == "[!] bad\n"


def test_colored_wraps_in_ansi(monkeypatch):
    monkeypatch.delenv("TAGVERSE_NO_COLOR", raising=False)

    text = colored("hi", Color.GREEN, bold=True)

    assert text == f"{Color.BOLD.value}{Color.GREEN.value}hi{Color.RESET.value}"


def test_coordinator_debug_logs_decisions(no_color):
    coordinator = GameCoordinator(
        TagGameConfig(debug=True), clock=ManualClock(), rng=random.Random(2)
    )

    out = capture(lambda: (coordinator.start_game(), coordinator.tick()))

    assert "[>] Starting tag game - Round 1/10" in out
    assert "[•] P1 Decision:" in out
    assert "[•] P2 Decision:" in out


def test_coordinator_quiet_without_debug(no_color):
    coordinator = GameCoordinator(TagGameConfig(), clock=ManualClock(), rng=random.Random(2))
    coordinator.start_game()

    out = capture(coordinator.tick)

    assert "Decision:" not in out


def test_bus_debug_logs_traffic_and_rejections(no_color):
    bus = CommunicationBus(CommunicationConfig(debug_mode=True), clock=ManualClock())

    sent = capture(bus.send_message, "p1", "p2", CommunicationType.POSITION_UPDATE, {})
    rejected = capture(
        bus.send_message, "p1", "p2", CommunicationType.POSITION_UPDATE, {}, channel_id="nope"
    )

    assert sent.startswith("[~] p1 -> p2: position_update")
    assert rejected.startswith("[!] Rejected message from p1 on 'nope'")


def test_bus_silent_without_debug(no_color):
    bus = CommunicationBus(CommunicationConfig(), clock=ManualClock())

    out = capture(bus.send_message, "p1", "p2", CommunicationType.POSITION_UPDATE, {}, channel_id="nope")

    assert out == ""
