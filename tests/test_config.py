"""Tests for environment-driven configuration."""

import pytest

from tagverse.config import Config


@pytest.fixture
def env(monkeypatch):
    yield monkeypatch
    monkeypatch.undo()
    Config.reload()


def test_reload_reads_environment(env):
    env.setenv("TAG_DISTANCE", "3.5")
    env.setenv("MAX_ROUNDS", "4")
    env.setenv("LEARNING_ENABLED", "false")
    env.setenv("TAGVERSE_DEBUG", "yes")
    Config.reload()

    game_config = Config.tag_game_config()

    assert game_config.tag_distance == 3.5
    assert game_config.max_rounds == 4
    assert game_config.learning_enabled is False
    assert game_config.debug is True
    assert Config.communication_config().debug_mode is True


def test_communication_config_from_environment(env):
    env.setenv("MAX_MESSAGE_HISTORY", "12")
    env.setenv("MESSAGE_EXPIRATION_MS", "750")
    Config.reload()

    config = Config.communication_config()

    assert config.max_message_history == 12
    assert config.message_expiration_time == 750


@pytest.mark.parametrize(
    "name, value",
    [
        ("TAG_DISTANCE", "0"),
        ("GAME_DURATION", "-1"),
        ("MAX_ROUNDS", "0"),
        ("AI_UPDATE_RATE", "0"),
        ("MEMORY_SIZE", "0"),
        ("ADAPTATION_RATE", "1.5"),
        ("MAX_MESSAGE_HISTORY", "0"),
        ("MESSAGE_EXPIRATION_MS", "0"),
    ],
)
def test_validate_rejects_out_of_range(env, name, value):
    env.setenv(name, value)
    Config.reload()

    with pytest.raises(ValueError, match=name):
        Config.validate()


def test_defaults_validate_and_display(env):
    for name in ("TAG_DISTANCE", "MAX_ROUNDS", "LEARNING_ENABLED", "GAME_DURATION"):
        env.delenv(name, raising=False)
    Config.reload()

    Config.validate()
    text = Config.display()

    assert text.startswith("Tagverse Configuration:")
    assert "Tag Distance: 2.0" in text
    assert "Learning: on" in text
