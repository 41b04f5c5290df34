"""
Tagverse - personality-driven two-agent tag simulation library.

Two agents take turns chasing and evading. Each tick both pick a move from
a strategy table keyed by role and personality; a coordinator detects tags,
swaps roles between rounds and feeds outcomes back into each agent's
strategy ledger. An optional message bus lets the agents talk to each other.

No rendering, no physics and no global engine: every collaborator
(config, clock, random source, listeners) is injected by the host.
"""

__version__ = "0.1.0"

# Main game components
from .coordinator import GameCoordinator, SPAWN_POSITIONS
from .agent import Agent, ChaserState, EvaderState
from .strategy import decide, update_learning, STRATEGY_TABLE

# Time and geometry
from .clock import Clock, SystemClock, ManualClock
from .geometry import Vector3, distance, direction_to, escape_direction

# Core schemas
from .schemas import (
    AIDecision,
    AIPersonality,
    AgentMemory,
    AgentStatus,
    DecisionAction,
    GamePhase,
    GameState,
    LearningData,
    OpponentPattern,
    PersonalityType,
    Role,
    RoundEndCause,
    RoundSummary,
    StrategyRecord,
    TagGameConfig,
    TickResult,
    DEFAULT_TAG_GAME_CONFIG,
    DEFAULT_PERSONALITIES,
    personality_preset,
)

# Communication
from .communication import (
    CommunicationBus,
    CommunicationConfig,
    CommunicationHelper,
    CommunicationMessage,
    CommunicationType,
    CommunicativeGame,
    MessagePriority,
    apply_advisory_decision,
)

# Configuration and match files
from .config import Config
from .scenario import MatchDefinition, MatchLoader, load_match

__all__ = [
    # Main classes
    "GameCoordinator",
    "SPAWN_POSITIONS",
    "Agent",
    "ChaserState",
    "EvaderState",
    "decide",
    "update_learning",
    "STRATEGY_TABLE",
    # Time and geometry
    "Clock",
    "SystemClock",
    "ManualClock",
    "Vector3",
    "distance",
    "direction_to",
    "escape_direction",
    # Schemas
    "AIDecision",
    "AIPersonality",
    "AgentMemory",
    "AgentStatus",
    "DecisionAction",
    "GamePhase",
    "GameState",
    "LearningData",
    "OpponentPattern",
    "PersonalityType",
    "Role",
    "RoundEndCause",
    "RoundSummary",
    "StrategyRecord",
    "TagGameConfig",
    "TickResult",
    "DEFAULT_TAG_GAME_CONFIG",
    "DEFAULT_PERSONALITIES",
    "personality_preset",
    # Communication
    "CommunicationBus",
    "CommunicationConfig",
    "CommunicationHelper",
    "CommunicationMessage",
    "CommunicationType",
    "CommunicativeGame",
    "MessagePriority",
    "apply_advisory_decision",
    # Configuration and match files
    "Config",
    "MatchDefinition",
    "MatchLoader",
    "load_match",
]
