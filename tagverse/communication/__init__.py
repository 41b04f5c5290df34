"""Inter-agent communication: bus, per-agent helpers and advisory influence."""

from .bus import DEFAULT_CHANNEL, CommunicationBus
from .game import CommunicativeGame
from .helper import CommunicationContext, CommunicationHelper
from .influence import apply_advisory_decision
from .messages import (
    ChannelStats,
    CommunicationChannel,
    CommunicationConfig,
    CommunicationMessage,
    CommunicationStats,
    CommunicationType,
    EmotionalState,
    MessagePriority,
)

__all__ = [
    "DEFAULT_CHANNEL",
    "CommunicationBus",
    "CommunicativeGame",
    "CommunicationContext",
    "CommunicationHelper",
    "apply_advisory_decision",
    "ChannelStats",
    "CommunicationChannel",
    "CommunicationConfig",
    "CommunicationMessage",
    "CommunicationStats",
    "CommunicationType",
    "EmotionalState",
    "MessagePriority",
]
