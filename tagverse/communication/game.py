"""
Tag game with inter-agent communication.

``CommunicativeGame`` hooks into a ``GameCoordinator`` as a tick listener.
After every tick each agent:
1. Generates contextual messages from the snapshot
2. Reads messages it has not acted on yet and turns them into advisory
   decisions
3. Applies those decisions (small personality nudges, see ``influence``)

Expired messages are pruned at the end of the tick. When a round ends both
agents share what they learned on the ``learning`` channel.
"""

from typing import Any, Dict, List, Optional, Set

from tagverse.coordinator import GameCoordinator
from tagverse.logging_utils import log_communication
from tagverse.schemas import AIDecision, GameState, RoundSummary, TickResult

from .bus import CommunicationBus
from .helper import CommunicationContext, CommunicationHelper
from .influence import apply_advisory_decision
from .messages import CommunicationConfig, CommunicationMessage


class CommunicativeGame:
    """Coordinator plus bus plus one helper per agent.

    Args:
        coordinator: The game to attach to (listeners are registered here)
        bus: Existing bus; built from ``config`` and the coordinator's clock
            when omitted
        config: Bus configuration used when ``bus`` is omitted
    """

    def __init__(
        self,
        coordinator: GameCoordinator,
        bus: Optional[CommunicationBus] = None,
        config: Optional[CommunicationConfig] = None,
    ):
        self.coordinator = coordinator
        self.bus = bus or CommunicationBus(config, clock=coordinator.clock)
        self.helpers: Dict[str, CommunicationHelper] = {
            agent_id: CommunicationHelper(agent_id, self.bus) for agent_id in ("p1", "p2")
        }
        self._acted_on: Dict[str, Set[str]] = {"p1": set(), "p2": set()}
        self.applied_decisions: Dict[str, List[AIDecision]] = {"p1": [], "p2": []}

        coordinator.tick_listeners.append(self.on_tick)
        coordinator.round_listeners.append(self.on_round_end)

    def _context(self, agent_id: str, game_state: GameState) -> CommunicationContext:
        opponent_id = self.helpers[agent_id].opponent_id
        return CommunicationContext(
            game_state=game_state,
            my_agent=self.coordinator.get_agent(agent_id),
            opponent_agent=self.coordinator.get_agent(opponent_id),
        )

    # ------------------------------------------------------------------
    # Coordinator hooks
    # ------------------------------------------------------------------

    def on_tick(
        self, result: TickResult, game_state: GameState, coordinator: GameCoordinator
    ) -> None:
        for agent_id, helper in self.helpers.items():
            helper.generate_contextual_communication(self._context(agent_id, game_state))

        for agent_id in self.helpers:
            for decision in self.process_new_messages(agent_id, game_state):
                agent = coordinator.get_agent(agent_id)
                if apply_advisory_decision(agent, decision):
                    self.applied_decisions[agent_id].append(decision)
                    if self.bus.config.debug_mode:
                        log_communication(
                            f"{agent_id} communication decision: {decision.action.value} - "
                            f"{decision.reasoning}"
                        )

        self.cleanup()

    def on_round_end(self, summary: RoundSummary) -> None:
        for agent_id, helper in self.helpers.items():
            agent = self.coordinator.get_agent(agent_id)
            helper.share_learning(
                summary.outcome_for(agent_id),
                {
                    "round": summary.round_number,
                    "cause": summary.cause.value,
                    "role": agent.role.value,
                    "strategy": agent.strategy,
                    "duration_ms": summary.duration_ms,
                },
                [f"{agent.strategy} ended in {summary.cause.value}"],
            )

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    def process_new_messages(self, agent_id: str, game_state: GameState) -> List[AIDecision]:
        """Advisory decisions from messages this agent has not acted on yet."""

        acted_on = self._acted_on[agent_id]
        decisions = []
        for message in self.bus.get_messages_for_agent(agent_id):
            if message.id in acted_on:
                continue
            acted_on.add(message.id)
            decision = self.bus.process_message(agent_id, message, game_state)
            if decision is not None:
                decisions.append(decision)
        return decisions

    def cleanup(self) -> int:
        removed = self.bus.cleanup_expired_messages()
        live_ids = {
            message.id
            for channel in self.bus.channels.values()
            for message in channel.message_history
        }
        for agent_id, acted_on in self._acted_on.items():
            self._acted_on[agent_id] = acted_on & live_ids
        return removed

    # ------------------------------------------------------------------
    # Manual messaging
    # ------------------------------------------------------------------

    def send_custom_message(self, sender_id: str, text: str) -> Optional[CommunicationMessage]:
        """Broadcast free text as a ``custom_message`` intention."""

        return self.helpers[sender_id].announce_intention("custom_message", 0.8, text)

    def send_challenge(
        self, challenger_id: str, challenge_type: str, intensity: float
    ) -> Optional[CommunicationMessage]:
        return self.helpers[challenger_id].send_challenge(challenge_type, intensity)

    # ------------------------------------------------------------------
    # Running and reporting
    # ------------------------------------------------------------------

    async def run(self, max_ticks: Optional[int] = None, **kwargs: Any) -> Dict[str, Any]:
        return await self.coordinator.run(max_ticks, **kwargs)

    def get_communication_stats(self) -> Dict[str, Any]:
        return {
            "system": self.bus.get_communication_stats(),
            "p1": self.helpers["p1"].get_agent_communication_stats(),
            "p2": self.helpers["p2"].get_agent_communication_stats(),
        }

    def dispose(self) -> None:
        if self.on_tick in self.coordinator.tick_listeners:
            self.coordinator.tick_listeners.remove(self.on_tick)
        if self.on_round_end in self.coordinator.round_listeners:
            self.coordinator.round_listeners.remove(self.on_round_end)
        self.coordinator.dispose()
        self.bus.dispose()
