"""
Agent state and the movement primitives shared by both roles.

An ``Agent`` carries identity, position, personality, memory and learning
counters. Role-specific bookkeeping is a tagged variant held in
``agent.role_state`` (``ChaserState`` or ``EvaderState``); the decision
logic for each role lives in the ``tagverse.strategy`` package and is
selected from a strategy table rather than through subclassing.

Agents are rebuilt at every round boundary with ``reassigned()``: the new
agent shares the personality object, learning data and strategy ledgers of
the old one, but starts with empty ring buffers and a fresh role state.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .clock import Clock, SystemClock
from .geometry import (
    Vector3,
    clamp,
    direction_to,
    distance,
    random_point_in_range,
)
from .schemas import (
    AgentMemory,
    AgentStatus,
    AIDecision,
    AIPersonality,
    GameState,
    LearningData,
    OpponentPattern,
    Outcome,
    PersonalityType,
    Role,
    StrategyEvolution,
    StrategyRecord,
    TagGameConfig,
    other_agent,
)


# Movement speed multipliers per situation
CHASE_AGGRESSION_BOOST = 0.5
EVADE_CAUTION_BOOST = 0.3
PATROL_FACTOR = 0.7

MIN_SPEED = 0.1
MAX_SPEED = 1.0

# Distance change (world units) below which the opponent counts as holding still
HOLDING_TOLERANCE = 0.05


@dataclass
class ChaserState:
    """Per-round bookkeeping of the chasing agent."""

    strategy: str = "direct"
    last_opponent_position: Optional[Vector3] = None
    prediction_accuracy: float = 0.5


@dataclass
class EvaderState:
    """Per-round bookkeeping of the evading agent."""

    strategy: str = "flee"
    last_chaser_position: Optional[Vector3] = None
    escape_routes: List[Vector3] = field(default_factory=list)
    survival_time: int = 0


RoleState = Union[ChaserState, EvaderState]


def new_role_state(role: Role) -> RoleState:
    return ChaserState() if role == Role.CHASER else EvaderState()


class Agent:
    """One of the two players.

    Args:
        agent_id: ``"p1"`` or ``"p2"``
        position: Starting position
        personality: Behavioural weights (kept by reference)
        config: Game configuration (memory size, tag distance)
        role: Initial role; ``set_role`` switches it later
        rng: Random source for randomized branches (seed it for replays)
        clock: Millisecond clock used for timestamps
        learning_data: Carried-over learning counters, if any
        successful_strategies / failed_strategies: Carried-over ledgers
    """

    def __init__(
        self,
        agent_id: str,
        position: Vector3,
        personality: AIPersonality,
        config: TagGameConfig,
        *,
        role: Role = Role.EVADER,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        learning_data: Optional[LearningData] = None,
        successful_strategies: Optional[List[StrategyRecord]] = None,
        failed_strategies: Optional[List[StrategyRecord]] = None,
    ):
        if agent_id not in ("p1", "p2"):
            raise ValueError(f"Unknown agent id '{agent_id}'")

        self.id = agent_id
        self.position = position
        self.velocity = Vector3.zero()
        self.target = position
        self.personality = personality
        self.config = config
        self.rng = rng or random.Random()
        self.clock: Clock = clock or SystemClock()
        self.status = AgentStatus.IDLE

        self.role = role
        self.role_state: RoleState = new_role_state(role)

        self.memory = AgentMemory(
            successful_strategies=successful_strategies if successful_strategies is not None else [],
            failed_strategies=failed_strategies if failed_strategies is not None else [],
            last_update_time=self.clock(),
        )
        self.learning_data = learning_data or LearningData()

        self._last_opponent_distance: Optional[float] = None

    def __repr__(self) -> str:
        return (
            f"Agent(id={self.id!r}, role={self.role.value}, "
            f"personality={self.personality.type.value}, position={self.position})"
        )

    # ------------------------------------------------------------------
    # Role handling
    # ------------------------------------------------------------------

    def set_role(self, role: Role) -> None:
        """Switch role, reset role bookkeeping and count the round."""

        self.role = role
        self.role_state = new_role_state(role)
        self.learning_data.total_rounds += 1

    def reassigned(self, role: Role, position: Vector3) -> "Agent":
        """Build the agent for the next round.

        Personality, learning data and strategy ledgers are shared with this
        agent; position history, decisions and role state start fresh.
        """

        successor = Agent(
            self.id,
            position,
            self.personality,
            self.config,
            role=role,
            rng=self.rng,
            clock=self.clock,
            learning_data=self.learning_data,
            successful_strategies=self.memory.successful_strategies,
            failed_strategies=self.memory.failed_strategies,
        )
        successor.memory.opponent_patterns = self.memory.opponent_patterns
        successor.set_role(role)
        return successor

    @property
    def strategy(self) -> str:
        """Name of the strategy used for the latest decision."""

        return self.role_state.strategy

    # ------------------------------------------------------------------
    # Position and memory
    # ------------------------------------------------------------------

    def update_position(self, new_position: Vector3) -> None:
        """Move to ``new_position`` and remember it (bounded FIFO)."""

        self.velocity = new_position.sub(self.position)
        self.position = new_position
        self.memory.recent_positions.append(new_position)
        self._trim(self.memory.recent_positions)
        self.memory.last_update_time = self.clock()

    def record_decision(self, decision: AIDecision) -> None:
        self.memory.recent_decisions.append(decision)
        self._trim(self.memory.recent_decisions)
        self.memory.last_update_time = self.clock()

    def _trim(self, buffer: list) -> None:
        overflow = len(buffer) - self.config.memory_size
        if overflow > 0:
            del buffer[:overflow]

    def set_target(self, target: Vector3) -> None:
        self.target = target

    # ------------------------------------------------------------------
    # Geometry helpers
    # ------------------------------------------------------------------

    def distance_to(self, position: Vector3) -> float:
        return distance(self.position, position)

    def distance_to_target(self) -> float:
        return distance(self.position, self.target)

    def direction_to(self, target: Vector3) -> Vector3:
        """Planar unit vector toward ``target`` (zero vector if coincident)."""

        return direction_to(self.position, target)

    def random_position_in_range(self, center: Vector3, radius: float) -> Vector3:
        return random_point_in_range(center, radius, self.rng)

    def opponent_position(self, game_state: GameState) -> Vector3:
        return game_state.position_of(other_agent(self.id))

    def is_opponent_in_range(self, game_state: GameState, range_: Optional[float] = None) -> bool:
        reach = self.config.tag_distance if range_ is None else range_
        return self.distance_to(self.opponent_position(game_state)) <= reach

    # ------------------------------------------------------------------
    # Personality-driven primitives
    # ------------------------------------------------------------------

    def calculate_movement_speed(self, situation: str) -> float:
        """Personality speed scaled for the situation, clamped to [0.1, 1.0].

        ``chase`` boosts by aggression, ``evade`` by caution and ``patrol``
        slows down to 70%. Unknown situations use the base speed.
        """

        speed = self.personality.speed
        if situation == "chase":
            speed *= 1 + self.personality.aggression * CHASE_AGGRESSION_BOOST
        elif situation == "evade":
            speed *= 1 + self.personality.caution * EVADE_CAUTION_BOOST
        elif situation == "patrol":
            speed *= PATROL_FACTOR
        return clamp(speed, MIN_SPEED, MAX_SPEED)

    def calculate_confidence(self, situation: str, has_memory: bool) -> float:
        """Confidence in a decision, clamped to [0.1, 1.0].

        Starts at 0.5; +0.2 when memory informs the decision, +0.1 for a
        strategic personality, -0.2 for a random one. ``situation`` is only
        a label and does not change the score.
        """

        confidence = 0.5
        if has_memory:
            confidence += 0.2
        if self.personality.type == PersonalityType.STRATEGIC:
            confidence += 0.1
        if self.personality.type == PersonalityType.RANDOM:
            confidence -= 0.2
        return clamp(confidence, 0.1, 1.0)

    def personality_influenced_random(self, base_value: float, variance: float = 0.2) -> float:
        random_factor = (self.rng.random() - 0.5) * variance
        return base_value + random_factor + self.personality.adaptability * 0.1

    # ------------------------------------------------------------------
    # Learning ledger
    # ------------------------------------------------------------------

    def record_strategy_outcome(
        self, strategy: str, outcome: Outcome, context: str, confidence: float = 1.0
    ) -> StrategyRecord:
        """Upsert ``strategy`` into the success or failure ledger.

        Existing records move halfway toward the outcome value (1 for
        success, 0 for failure); new records start at that value.
        """

        now = self.clock()
        success = outcome == "success"
        ledger = self.memory.successful_strategies if success else self.memory.failed_strategies
        value = 1.0 if success else 0.0

        record = next((entry for entry in ledger if entry.strategy == strategy), None)
        if record is not None:
            record.times_used += 1
            record.success_rate = (record.success_rate + value) / 2
            record.last_used = now
        else:
            record = StrategyRecord(
                strategy=strategy,
                success_rate=value,
                times_used=1,
                last_used=now,
                context=context,
            )
            ledger.append(record)

        evolution = self.learning_data.strategy_evolution
        evolution.append(
            StrategyEvolution(
                timestamp=now,
                strategy=strategy,
                success_rate=record.success_rate,
                confidence=confidence,
            )
        )
        self._trim(evolution)
        return record

    def observe_opponent(self, opponent_position: Vector3) -> Optional[OpponentPattern]:
        """Count what the opponent did relative to us since the last look."""

        current = self.distance_to(opponent_position)
        previous = self._last_opponent_distance
        self._last_opponent_distance = current
        if previous is None:
            return None

        tag_distance = self.config.tag_distance
        if current <= tag_distance * 1.5:
            situation = "close"
        elif current <= tag_distance * 4:
            situation = "mid"
        else:
            situation = "far"

        delta = current - previous
        if delta < -HOLDING_TOLERANCE:
            action = "approaching"
        elif delta > HOLDING_TOLERANCE:
            action = "retreating"
        else:
            action = "holding"

        now = self.clock()
        for pattern in self.memory.opponent_patterns:
            if pattern.situation == situation and pattern.opponent_action == action:
                pattern.frequency += 1
                pattern.last_seen = now
                return pattern

        pattern = OpponentPattern(
            situation=situation, opponent_action=action, frequency=1, last_seen=now
        )
        self.memory.opponent_patterns.append(pattern)
        return pattern

    def most_common_opponent_action(self, situation: str) -> Optional[str]:
        candidates = [p for p in self.memory.opponent_patterns if p.situation == situation]
        if not candidates:
            return None
        return max(candidates, key=lambda p: p.frequency).opponent_action

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_status(self) -> AgentStatus:
        return self.status

    def set_status(self, status: AgentStatus) -> None:
        self.status = status

    def get_personality(self) -> AIPersonality:
        return self.personality

    def get_learning_data(self) -> LearningData:
        return self.learning_data

    def get_memory(self) -> AgentMemory:
        return self.memory
