"""
Pydantic schemas for the tagverse game engine.

All data structures shared between agents, strategies, the coordinator and
the communication bus are defined here.

Design Philosophy:
- Personality, memory and learning are plain data; behaviour lives in
  ``agent.py`` and the ``strategy`` package
- Decisions are immutable once produced (frozen models)
- GameState is owned by the coordinator; everyone else sees deep copies
- Pydantic validation makes bad configuration fail at construction time
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tagverse.geometry import Vector3

# ============================================================================
# Identifiers and enums
# ============================================================================

AgentId = Literal["p1", "p2"]
ReceiverId = Literal["p1", "p2", "broadcast"]

AGENT_IDS: tuple = ("p1", "p2")


def other_agent(agent_id: str) -> str:
    """Return the opponent's id (``p1`` <-> ``p2``)."""

    if agent_id not in AGENT_IDS:
        raise ValueError(f"Unknown agent id '{agent_id}'")
    return "p2" if agent_id == "p1" else "p1"


class Role(str, Enum):
    """The two mutually exclusive roles of a round."""

    CHASER = "chaser"
    EVADER = "evader"


class PersonalityType(str, Enum):
    """Personality archetype; selects the decision branch."""

    AGGRESSIVE = "aggressive"
    DEFENSIVE = "defensive"
    STRATEGIC = "strategic"
    RANDOM = "random"


class GamePhase(str, Enum):
    """Coordinator state machine phases."""

    WAITING = "waiting"
    PLAYING = "playing"
    PAUSED = "paused"
    ROUND_COMPLETE = "round_complete"
    GAME_OVER = "game_over"


class AgentStatus(str, Enum):
    """Coarse activity status reported for each agent."""

    IDLE = "idle"
    ACTIVE = "active"
    LEARNING = "learning"
    ADAPTING = "adapting"
    ERROR = "error"


class DecisionAction(str, Enum):
    """Movement verbs produced by strategies and by message processing."""

    MOVE = "move"
    CHASE = "chase"
    EVADE = "evade"
    IDLE = "idle"
    PATROL = "patrol"
    ACCELERATE_TOWARDS = "accelerate_towards"
    PREDICT_MOVEMENT = "predict_movement"
    EVASIVE_MANEUVER = "evasive_maneuver"
    DEFENSIVE_POSITIONING = "defensive_positioning"
    FLANKING_MANEUVER = "flanking_maneuver"
    INCREASE_SPEED = "increase_speed"


class RoundEndCause(str, Enum):
    """Why a round ended."""

    TAG = "tag"
    TIMEOUT = "timeout"


Outcome = Literal["success", "failure"]


# ============================================================================
# Personality, memory and learning
# ============================================================================


class AIPersonality(BaseModel):
    """Behavioural weights of an agent, all normalized to [0, 1].

    The personality is fixed when an agent is created and handed unchanged
    (same object) to the agent of the next round. The advisory influence
    layer is the only code allowed to nudge ``aggression`` and
    ``confidence`` after creation.
    """

    type: PersonalityType = Field(..., description="Archetype selecting the decision branch")
    speed: float = Field(..., ge=0.0, le=1.0, description="Base movement speed")
    aggression: float = Field(..., ge=0.0, le=1.0, description="Pursuit boost and taunting")
    caution: float = Field(..., ge=0.0, le=1.0, description="Evasion boost")
    adaptability: float = Field(0.5, ge=0.0, le=1.0)
    memory_retention: float = Field(0.5, ge=0.0, le=1.0)
    confidence: float = Field(0.5, ge=0.0, le=1.0, description="Scales emotional confidence/stress")


class StrategyRecord(BaseModel):
    """Moving-average ledger entry for one named strategy."""

    strategy: str
    success_rate: float = Field(..., ge=0.0, le=1.0)
    times_used: int = Field(1, ge=0)
    last_used: float = Field(..., description="Clock time (ms) of the last update")
    context: str = ""


class OpponentPattern(BaseModel):
    """How often the opponent did something in a given situation."""

    situation: str = Field(..., description="Distance band: close, mid or far")
    opponent_action: str = Field(..., description="approaching, retreating or holding")
    frequency: int = Field(1, ge=1)
    last_seen: float


class AgentMemory(BaseModel):
    """Bounded short-term memory plus the strategy success/failure ledgers.

    ``recent_positions`` and ``recent_decisions`` are ring buffers of
    ``config.memory_size`` entries (oldest evicted first). The strategy
    ledgers hold at most one record per strategy name.
    """

    recent_positions: List[Vector3] = Field(default_factory=list)
    recent_decisions: List["AIDecision"] = Field(default_factory=list)
    opponent_patterns: List[OpponentPattern] = Field(default_factory=list)
    successful_strategies: List[StrategyRecord] = Field(default_factory=list)
    failed_strategies: List[StrategyRecord] = Field(default_factory=list)
    last_update_time: float = 0.0


class StrategyEvolution(BaseModel):
    """Snapshot of a strategy's success rate after a learning update."""

    timestamp: float
    strategy: str
    success_rate: float
    confidence: float


class LearningData(BaseModel):
    """Cumulative per-agent counters.

    ``learning_rate`` and ``adaptation_speed`` are static scalars exposed to
    observers; nothing in the engine updates them.
    """

    total_rounds: int = 0
    wins_as_chaser: int = 0
    wins_as_evader: int = 0
    average_game_duration: float = Field(0.0, description="Mean round duration in seconds")
    rounds_timed: int = 0
    learning_rate: float = 0.1
    adaptation_speed: float = 0.05
    strategy_evolution: List[StrategyEvolution] = Field(default_factory=list)

    def record_round_duration(self, seconds: float) -> None:
        """Fold one round duration into the running mean."""

        self.rounds_timed += 1
        self.average_game_duration += (seconds - self.average_game_duration) / self.rounds_timed


# ============================================================================
# Game state and decisions
# ============================================================================


class AIDecision(BaseModel):
    """A single movement decision. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    agent_id: AgentId
    action: DecisionAction
    target: Vector3
    timestamp: float
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: Optional[str] = None


AgentMemory.model_rebuild()


class GameState(BaseModel):
    """Authoritative snapshot of the match.

    The coordinator owns exactly one instance and mutates it in place;
    strategies, helpers and listeners always receive ``model_copy(deep=True)``
    snapshots.
    """

    p1_position: Vector3 = Field(default_factory=lambda: Vector3(x=-5.0, y=0.0, z=0.0))
    p2_position: Vector3 = Field(default_factory=lambda: Vector3(x=5.0, y=0.0, z=0.0))
    p1_velocity: Vector3 = Field(default_factory=Vector3.zero)
    p2_velocity: Vector3 = Field(default_factory=Vector3.zero)
    current_chaser: AgentId = "p1"
    game_phase: GamePhase = GamePhase.WAITING
    round_number: int = Field(0, ge=0)
    tag_distance: float = Field(..., gt=0)
    last_tag_time: float = 0.0
    game_start_time: float = 0.0

    def position_of(self, agent_id: str) -> Vector3:
        return self.p1_position if agent_id == "p1" else self.p2_position

    def velocity_of(self, agent_id: str) -> Vector3:
        return self.p1_velocity if agent_id == "p1" else self.p2_velocity

    def role_of(self, agent_id: str) -> Role:
        return Role.CHASER if self.current_chaser == agent_id else Role.EVADER


class RoundSummary(BaseModel):
    """Record of one finished round."""

    round_number: int
    chaser: AgentId
    cause: RoundEndCause
    duration_ms: float
    p1_outcome: Outcome
    p2_outcome: Outcome
    ended_at: float

    def outcome_for(self, agent_id: str) -> Outcome:
        return self.p1_outcome if agent_id == "p1" else self.p2_outcome


class TickResult(BaseModel):
    """What happened during one coordinator tick."""

    round_number: int
    decisions: List[AIDecision] = Field(default_factory=list)
    tagged: bool = False
    round_summary: Optional[RoundSummary] = None


# ============================================================================
# Configuration
# ============================================================================


class TagGameConfig(BaseModel):
    """Game configuration supplied at construction.

    ``game_duration`` is in seconds, ``ai_update_rate`` in ticks per second.
    Non-positive rounds or rates would produce a non-terminating or
    zero-rate loop, so they are rejected by validation.

    ``outcome_attribution`` controls round-end learning:
    - ``end_cause``: a tag is a chaser success, a timeout an evader success
    - ``chaser``: the current chaser is always credited with success
    """

    tag_distance: float = Field(2.0, gt=0)
    game_duration: float = Field(30.0, gt=0)
    max_rounds: int = Field(10, ge=1)
    learning_enabled: bool = True
    ai_update_rate: float = Field(10.0, gt=0)
    memory_size: int = Field(50, ge=1)
    adaptation_rate: float = Field(0.1, ge=0.0, le=1.0)
    debug: bool = False
    outcome_attribution: Literal["end_cause", "chaser"] = "end_cause"

    @property
    def tick_interval_ms(self) -> float:
        return 1000.0 / self.ai_update_rate

    @property
    def round_duration_ms(self) -> float:
        return self.game_duration * 1000.0


DEFAULT_TAG_GAME_CONFIG = TagGameConfig()

DEFAULT_PERSONALITIES: Dict[str, Dict[str, Any]] = {
    "strategic": {
        "type": "strategic",
        "speed": 0.8,
        "aggression": 0.6,
        "caution": 0.4,
        "adaptability": 0.7,
        "memory_retention": 0.8,
        "confidence": 0.8,
    },
    "aggressive": {
        "type": "aggressive",
        "speed": 0.9,
        "aggression": 0.8,
        "caution": 0.2,
        "adaptability": 0.6,
        "memory_retention": 0.7,
        "confidence": 0.7,
    },
    "defensive": {
        "type": "defensive",
        "speed": 0.7,
        "aggression": 0.3,
        "caution": 0.8,
        "adaptability": 0.5,
        "memory_retention": 0.9,
        "confidence": 0.5,
    },
    "random": {
        "type": "random",
        "speed": 0.6,
        "aggression": 0.5,
        "caution": 0.5,
        "adaptability": 0.3,
        "memory_retention": 0.4,
        "confidence": 0.5,
    },
}


def personality_preset(name: str) -> AIPersonality:
    """Build a fresh AIPersonality from one of the named presets."""

    if name not in DEFAULT_PERSONALITIES:
        raise ValueError(
            f"Unknown personality preset '{name}'. "
            f"Available: {sorted(DEFAULT_PERSONALITIES)}"
        )
    return AIPersonality(**DEFAULT_PERSONALITIES[name])
