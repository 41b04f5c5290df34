"""
Tagverse Configuration

Loads game and communication defaults from environment variables.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

from .communication.messages import CommunicationConfig
from .schemas import TagGameConfig

# Load .env file if it exists
load_dotenv()

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


class Config:
    """Application configuration loaded from environment variables."""

    # Game
    TAG_DISTANCE: float = float(os.getenv("TAG_DISTANCE", "2.0"))
    GAME_DURATION: float = float(os.getenv("GAME_DURATION", "30"))
    MAX_ROUNDS: int = int(os.getenv("MAX_ROUNDS", "10"))
    LEARNING_ENABLED: bool = _env_flag("LEARNING_ENABLED", "true")
    AI_UPDATE_RATE: float = float(os.getenv("AI_UPDATE_RATE", "10"))
    MEMORY_SIZE: int = int(os.getenv("MEMORY_SIZE", "50"))
    ADAPTATION_RATE: float = float(os.getenv("ADAPTATION_RATE", "0.1"))
    DEBUG: bool = _env_flag("TAGVERSE_DEBUG", "false")

    # Communication
    MAX_MESSAGE_HISTORY: int = int(os.getenv("MAX_MESSAGE_HISTORY", "100"))
    MESSAGE_EXPIRATION_MS: float = float(os.getenv("MESSAGE_EXPIRATION_MS", "5000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    MATCHES_DIR: Path = PROJECT_ROOT / "examples" / "matches"

    @classmethod
    def reload(cls) -> None:
        """Re-read every value from the current environment."""
        cls.TAG_DISTANCE = float(os.getenv("TAG_DISTANCE", "2.0"))
        cls.GAME_DURATION = float(os.getenv("GAME_DURATION", "30"))
        cls.MAX_ROUNDS = int(os.getenv("MAX_ROUNDS", "10"))
        cls.LEARNING_ENABLED = _env_flag("LEARNING_ENABLED", "true")
        cls.AI_UPDATE_RATE = float(os.getenv("AI_UPDATE_RATE", "10"))
        cls.MEMORY_SIZE = int(os.getenv("MEMORY_SIZE", "50"))
        cls.ADAPTATION_RATE = float(os.getenv("ADAPTATION_RATE", "0.1"))
        cls.DEBUG = _env_flag("TAGVERSE_DEBUG", "false")
        cls.MAX_MESSAGE_HISTORY = int(os.getenv("MAX_MESSAGE_HISTORY", "100"))
        cls.MESSAGE_EXPIRATION_MS = float(os.getenv("MESSAGE_EXPIRATION_MS", "5000"))
        cls.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors for out-of-range values."""
        if cls.TAG_DISTANCE <= 0:
            raise ValueError("TAG_DISTANCE must be greater than 0")

        if cls.GAME_DURATION <= 0:
            raise ValueError("GAME_DURATION must be greater than 0 seconds")

        if cls.MAX_ROUNDS < 1:
            raise ValueError("MAX_ROUNDS must be at least 1")

        if cls.AI_UPDATE_RATE <= 0:
            raise ValueError("AI_UPDATE_RATE must be greater than 0 (ticks per second)")

        if cls.MEMORY_SIZE < 1:
            raise ValueError("MEMORY_SIZE must be at least 1")

        if not 0.0 <= cls.ADAPTATION_RATE <= 1.0:
            raise ValueError("ADAPTATION_RATE must be between 0 and 1")

        if cls.MAX_MESSAGE_HISTORY < 1:
            raise ValueError("MAX_MESSAGE_HISTORY must be at least 1")

        if cls.MESSAGE_EXPIRATION_MS <= 0:
            raise ValueError("MESSAGE_EXPIRATION_MS must be greater than 0")

    @classmethod
    def tag_game_config(cls) -> TagGameConfig:
        """Build a validated TagGameConfig from the environment defaults."""
        return TagGameConfig(
            tag_distance=cls.TAG_DISTANCE,
            game_duration=cls.GAME_DURATION,
            max_rounds=cls.MAX_ROUNDS,
            learning_enabled=cls.LEARNING_ENABLED,
            ai_update_rate=cls.AI_UPDATE_RATE,
            memory_size=cls.MEMORY_SIZE,
            adaptation_rate=cls.ADAPTATION_RATE,
            debug=cls.DEBUG,
        )

    @classmethod
    def communication_config(cls) -> CommunicationConfig:
        return CommunicationConfig(
            max_message_history=cls.MAX_MESSAGE_HISTORY,
            message_expiration_time=cls.MESSAGE_EXPIRATION_MS,
            debug_mode=cls.DEBUG,
        )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Tagverse Configuration:",
            f"  Tag Distance: {cls.TAG_DISTANCE}",
            f"  Round Duration: {cls.GAME_DURATION}s",
            f"  Max Rounds: {cls.MAX_ROUNDS}",
            f"  Learning: {'on' if cls.LEARNING_ENABLED else 'off'}",
            f"  AI Update Rate: {cls.AI_UPDATE_RATE} Hz",
            f"  Memory Size: {cls.MEMORY_SIZE}",
            f"  Message History: {cls.MAX_MESSAGE_HISTORY}",
            f"  Message Expiry: {cls.MESSAGE_EXPIRATION_MS}ms",
            f"  Log Level: {cls.LOG_LEVEL}",
        ]
        return "\n".join(lines)
