"""
Game coordinator for the two-agent tag match.

Owns the authoritative GameState and drives the round state machine:

    WAITING -> PLAYING <-> PAUSED -> (ROUND_COMPLETE) -> PLAYING | GAME_OVER

Each ``tick()``:
1. Checks the round timer (``game_duration`` seconds)
2. Asks both agents' strategies for a decision on the same snapshot
3. Applies the decisions (positions and velocities update)
4. Checks the tag distance and ends the round on a tag
5. Notifies tick listeners

Hosts either call ``tick()`` themselves (render loop, tests) or await
``run()``, which ticks at ``ai_update_rate`` Hz. Time comes from an
injectable millisecond clock so timeouts are testable without waiting.
"""

import asyncio
import random
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .agent import Agent
from .clock import Clock, SystemClock
from .geometry import Vector3, distance
from .logging_utils import (
    log_decision,
    log_error,
    log_info,
    log_lifecycle,
    log_success,
)
from .schemas import (
    AGENT_IDS,
    AgentStatus,
    AIDecision,
    AIPersonality,
    DecisionAction,
    GamePhase,
    GameState,
    Outcome,
    Role,
    RoundEndCause,
    RoundSummary,
    TagGameConfig,
    TickResult,
    other_agent,
    personality_preset,
)
from .strategy import decide, update_learning

SPAWN_POSITIONS: Dict[str, Vector3] = {
    "p1": Vector3(x=-5.0, y=0.0, z=0.0),
    "p2": Vector3(x=5.0, y=0.0, z=0.0),
}

TickListener = Callable[[TickResult, GameState, "GameCoordinator"], None]
RoundListener = Callable[[RoundSummary], None]


class GameCoordinator:
    """
    Runs a tag match between two agents.

    All collaborators are injected: no global engine, no hidden timers.
    """

    def __init__(
        self,
        config: Optional[TagGameConfig] = None,
        p1_personality: Optional[AIPersonality] = None,
        p2_personality: Optional[AIPersonality] = None,
        *,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        tick_listeners: Optional[List[TickListener]] = None,
        round_listeners: Optional[List[RoundListener]] = None,
    ):
        """Initialize the coordinator.

        Args:
            config: Validated game configuration (defaults to TagGameConfig())
            p1_personality: Personality for p1 (defaults to the strategic preset)
            p2_personality: Personality for p2 (defaults to the aggressive preset)
            clock: Millisecond clock (defaults to wall-clock time)
            rng: Random source shared by both agents (seed it for replays)
            tick_listeners: Callables invoked after every tick with
                (tick_result, game_state_snapshot, coordinator)
            round_listeners: Callables invoked with each RoundSummary
        """
        self.config = config or TagGameConfig()
        self.clock: Clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.tick_listeners: List[TickListener] = list(tick_listeners or [])
        self.round_listeners: List[RoundListener] = list(round_listeners or [])

        self.game_state = GameState(
            p1_position=SPAWN_POSITIONS["p1"],
            p2_position=SPAWN_POSITIONS["p2"],
            tag_distance=self.config.tag_distance,
        )

        self.is_running = False
        self.current_round = 0
        self.round_start_time = 0.0
        self.game_start_time = 0.0
        self.ticks_played = 0
        self.round_history: List[RoundSummary] = []

        self._initialize_agents(
            p1_personality or personality_preset("strategic"),
            p2_personality or personality_preset("aggressive"),
        )

    # ------------------------------------------------------------------
    # Agent setup
    # ------------------------------------------------------------------

    def _initialize_agents(
        self, p1_personality: AIPersonality, p2_personality: AIPersonality
    ) -> None:
        """Create fresh agents in the roles dictated by ``current_chaser``."""

        self.p1_agent = Agent(
            "p1",
            self.game_state.p1_position,
            p1_personality,
            self.config,
            role=self.game_state.role_of("p1"),
            rng=self.rng,
            clock=self.clock,
        )
        self.p2_agent = Agent(
            "p2",
            self.game_state.p2_position,
            p2_personality,
            self.config,
            role=self.game_state.role_of("p2"),
            rng=self.rng,
            clock=self.clock,
        )

    def _reassign_agents(self) -> None:
        """Rebuild both agents for a new round, keeping personality and learning."""

        self.p1_agent = self.p1_agent.reassigned(
            self.game_state.role_of("p1"), self.game_state.p1_position
        )
        self.p2_agent = self.p2_agent.reassigned(
            self.game_state.role_of("p2"), self.game_state.p2_position
        )
        for agent in self.agents:
            agent.set_status(AgentStatus.ACTIVE)

    @property
    def agents(self) -> List[Agent]:
        return [self.p1_agent, self.p2_agent]

    def get_agent(self, agent_id: str) -> Agent:
        if agent_id == "p1":
            return self.p1_agent
        if agent_id == "p2":
            return self.p2_agent
        raise ValueError(f"Unknown agent id '{agent_id}'")

    def _reset_positions(self) -> None:
        self.game_state.p1_position = SPAWN_POSITIONS["p1"]
        self.game_state.p2_position = SPAWN_POSITIONS["p2"]
        self.game_state.p1_velocity = Vector3.zero()
        self.game_state.p2_velocity = Vector3.zero()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_game(self) -> bool:
        """Start a fresh game. Returns False if a game is already running."""

        if self.is_running:
            return False

        now = self.clock()
        self.is_running = True
        self.game_start_time = now
        self.round_start_time = now
        self.current_round = 1
        self.ticks_played = 0
        self.round_history = []

        self.game_state.game_start_time = now
        self.game_state.round_number = 1
        self.game_state.game_phase = GamePhase.PLAYING
        self._reset_positions()
        self._reassign_agents()

        log_lifecycle(f"Starting tag game - Round {self.current_round}/{self.config.max_rounds}")
        for agent in self.agents:
            log_info(
                f"{agent.id.upper()}: {agent.personality.type.value} personality "
                f"({agent.role.value})"
            )
        return True

    def stop_game(self) -> None:
        """Halt the game without finishing it."""

        if not self.is_running:
            return
        self.is_running = False
        self.game_state.game_phase = GamePhase.PAUSED
        log_lifecycle("Tag game stopped")

    def pause_game(self) -> None:
        if not self.is_running:
            return
        self.game_state.game_phase = GamePhase.PAUSED
        log_lifecycle("Tag game paused")

    def resume_game(self) -> None:
        if not self.is_running:
            return
        self.game_state.game_phase = GamePhase.PLAYING
        log_lifecycle("Tag game resumed")

    def end_game(self) -> None:
        """Finish the game and print aggregate statistics."""

        self.is_running = False
        self.game_state.game_phase = GamePhase.GAME_OVER
        for agent in self.agents:
            agent.set_status(AgentStatus.IDLE)

        total_seconds = (self.clock() - self.game_start_time) / 1000.0
        log_success(
            f"Game completed after {self.current_round} rounds in {total_seconds:.2f} seconds"
        )
        self._log_game_statistics()

    def dispose(self) -> None:
        self.stop_game()
        self.tick_listeners.clear()
        self.round_listeners.clear()

    # ------------------------------------------------------------------
    # Tick loop
    # ------------------------------------------------------------------

    async def run(
        self,
        max_ticks: Optional[int] = None,
        *,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ) -> Dict[str, Any]:
        """Tick at ``ai_update_rate`` Hz until the game ends or ``max_ticks`` elapse.

        Paused ticks still consume a slot in the cadence but do no work.

        Args:
            max_ticks: Optional cap on loop iterations
            sleep: Coroutine used between ticks (defaults to asyncio.sleep)

        Returns:
            Dict with rounds played, round history and final state
        """
        sleeper = sleep or asyncio.sleep
        if not self.is_running:
            self.start_game()

        interval = 1.0 / self.config.ai_update_rate
        iterations = 0
        while self.is_running:
            if max_ticks is not None and iterations >= max_ticks:
                break
            self.tick()
            iterations += 1
            if not self.is_running:
                break
            await sleeper(interval)

        return {
            "rounds": self.current_round,
            "round_history": list(self.round_history),
            "final_state": self.get_game_state(),
        }

    def tick(self) -> Optional[TickResult]:
        """Advance the game by one step.

        Returns None when the game is not running or is paused. A tick ends
        at most one round; a tag wins over a timeout when both apply.
        """

        if not self.is_running or self.game_state.game_phase != GamePhase.PLAYING:
            return None

        self.ticks_played += 1
        round_number = self.current_round
        now = self.clock()

        if now - self.round_start_time >= self.config.round_duration_ms:
            if self.check_for_tag():
                summary = self._handle_tag(now)
            else:
                summary = self.end_round(RoundEndCause.TIMEOUT)
            result = TickResult(
                round_number=round_number,
                tagged=summary.cause == RoundEndCause.TAG,
                round_summary=summary,
            )
        else:
            snapshot = self.get_game_state()
            decisions = [decide(agent, snapshot) for agent in self.agents]
            for decision in decisions:
                self.execute_decision(decision)

            if self.config.debug:
                for decision in decisions:
                    log_decision(
                        f"{decision.agent_id.upper()} Decision: {decision.action.value} -> "
                        f"({decision.target.x:.2f}, {decision.target.z:.2f}) - "
                        f"Confidence: {decision.confidence:.2f}"
                    )

            summary = self._handle_tag(now) if self.check_for_tag() else None
            result = TickResult(
                round_number=round_number,
                decisions=decisions,
                tagged=summary is not None,
                round_summary=summary,
            )

        self._notify_tick_listeners(result)
        return result

    def execute_decision(self, decision: AIDecision) -> None:
        """Move the deciding agent to the decision's target."""

        agent = self.get_agent(decision.agent_id)
        agent.update_position(decision.target)
        velocity = agent.velocity.scale(self.config.ai_update_rate)

        if decision.agent_id == "p1":
            self.game_state.p1_position = decision.target
            self.game_state.p1_velocity = velocity
        else:
            self.game_state.p2_position = decision.target
            self.game_state.p2_velocity = velocity

    def check_for_tag(self) -> bool:
        separation = distance(self.game_state.p1_position, self.game_state.p2_position)
        return separation <= self.config.tag_distance

    def _handle_tag(self, now: float) -> RoundSummary:
        self.game_state.last_tag_time = now
        chaser = self.game_state.current_chaser
        separation = distance(self.game_state.p1_position, self.game_state.p2_position)
        log_success(
            f"Tag! {chaser.upper()} tagged {other_agent(chaser).upper()} "
            f"at distance {separation:.2f}"
        )
        return self.end_round(RoundEndCause.TAG)

    # ------------------------------------------------------------------
    # Rounds
    # ------------------------------------------------------------------

    def end_round(self, cause: RoundEndCause) -> RoundSummary:
        """Close the current round, update learning and move on.

        Starts the next round with swapped roles, or ends the game once
        ``max_rounds`` rounds have been played.
        """

        now = self.clock()
        duration = now - self.round_start_time
        self.game_state.game_phase = GamePhase.ROUND_COMPLETE
        log_success(
            f"Round {self.current_round} ended by {cause.value} after {duration / 1000.0:.2f} seconds"
        )

        outcomes = self._round_outcomes(cause)
        self._update_agent_learning(outcomes, duration)

        summary = RoundSummary(
            round_number=self.current_round,
            chaser=self.game_state.current_chaser,
            cause=cause,
            duration_ms=duration,
            p1_outcome=outcomes["p1"],
            p2_outcome=outcomes["p2"],
            ended_at=now,
        )
        self.round_history.append(summary)
        self._notify_round_listeners(summary)

        if self.current_round >= self.config.max_rounds:
            self.end_game()
        else:
            self.start_next_round()
        return summary

    def _round_outcomes(self, cause: RoundEndCause) -> Dict[str, Outcome]:
        """Map each agent to success/failure for the finished round."""

        chaser = self.game_state.current_chaser
        if self.config.outcome_attribution == "chaser":
            winner = chaser
        elif cause == RoundEndCause.TAG:
            winner = chaser
        else:
            winner = other_agent(chaser)
        return {
            agent_id: ("success" if agent_id == winner else "failure")
            for agent_id in AGENT_IDS
        }

    def _update_agent_learning(self, outcomes: Dict[str, Outcome], duration_ms: float) -> None:
        snapshot = self.get_game_state()
        for agent in self.agents:
            agent.learning_data.record_round_duration(duration_ms / 1000.0)
            if not self.config.learning_enabled:
                continue
            update_learning(agent, snapshot, self._last_decision(agent), outcomes[agent.id])

    def _last_decision(self, agent: Agent) -> AIDecision:
        if agent.memory.recent_decisions:
            return agent.memory.recent_decisions[-1]
        return AIDecision(
            agent_id=agent.id,
            action=DecisionAction.IDLE,
            target=agent.position,
            timestamp=self.clock(),
            confidence=1.0,
        )

    def start_next_round(self) -> None:
        """Swap roles, reset positions and rebuild the agents."""

        self.current_round += 1
        self.game_state.round_number = self.current_round
        self.round_start_time = self.clock()
        self.game_state.current_chaser = other_agent(self.game_state.current_chaser)
        self._reset_positions()
        self._reassign_agents()
        self.game_state.game_phase = GamePhase.PLAYING

        log_lifecycle(
            f"Starting Round {self.current_round} - "
            f"{self.game_state.current_chaser.upper()} is now the chaser"
        )

    # ------------------------------------------------------------------
    # External inputs
    # ------------------------------------------------------------------

    def sync_positions(
        self,
        p1_position: Optional[Vector3] = None,
        p2_position: Optional[Vector3] = None,
        *,
        p1_velocity: Optional[Vector3] = None,
        p2_velocity: Optional[Vector3] = None,
    ) -> None:
        """Accept positions/velocities measured by an external physics layer."""

        if p1_position is not None:
            self.p1_agent.update_position(p1_position)
            self.game_state.p1_position = p1_position
        if p2_position is not None:
            self.p2_agent.update_position(p2_position)
            self.game_state.p2_position = p2_position
        if p1_velocity is not None:
            self.game_state.p1_velocity = p1_velocity
        if p2_velocity is not None:
            self.game_state.p2_velocity = p2_velocity

    def update_config(self, **changes: Any) -> TagGameConfig:
        """Replace configuration values; the merged config is revalidated."""

        merged = {**self.config.model_dump(), **changes}
        self.config = TagGameConfig(**merged)
        self.game_state.tag_distance = self.config.tag_distance
        for agent in self.agents:
            agent.config = self.config
        return self.config

    def set_personalities(
        self, p1_personality: AIPersonality, p2_personality: AIPersonality
    ) -> None:
        """Swap both personalities wholesale (agents are rebuilt from scratch)."""

        self._initialize_agents(p1_personality, p2_personality)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_game_state(self) -> GameState:
        """Deep copy of the current state; mutating it has no effect."""

        return self.game_state.model_copy(deep=True)

    def is_game_running(self) -> bool:
        return self.is_running

    def get_current_round(self) -> int:
        return self.current_round

    def get_max_rounds(self) -> int:
        return self.config.max_rounds

    def get_role(self, agent_id: str) -> Role:
        return self.game_state.role_of(agent_id)

    # ------------------------------------------------------------------
    # Listeners and reporting
    # ------------------------------------------------------------------

    def _notify_tick_listeners(self, result: TickResult) -> None:
        if not self.tick_listeners:
            return
        snapshot = self.get_game_state()
        for listener in self.tick_listeners:
            try:
                listener(result, snapshot, self)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_error(f"[Listener] Tick listener failed: {exc}")

    def _notify_round_listeners(self, summary: RoundSummary) -> None:
        for listener in self.round_listeners:
            try:
                listener(summary)
            except Exception as exc:  # pragma: no cover - diagnostic hook
                log_error(f"[Listener] Round listener failed: {exc}")

    def _log_game_statistics(self) -> None:
        log_info("Game Statistics:")
        print(f"  Total Rounds: {self.current_round}")
        print(f"  Ticks Played: {self.ticks_played}")
        tags = sum(1 for summary in self.round_history if summary.cause == RoundEndCause.TAG)
        print(f"  Tags: {tags}, Timeouts: {len(self.round_history) - tags}")
        for agent in self.agents:
            data = agent.learning_data
            print(
                f"  {agent.id.upper()} Learning Data: rounds={data.total_rounds} "
                f"chaser_wins={data.wins_as_chaser} evader_wins={data.wins_as_evader} "
                f"avg_round={data.average_game_duration:.2f}s"
            )
