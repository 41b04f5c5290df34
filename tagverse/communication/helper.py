"""
Per-agent communication helper.

Wraps the bus with typed send methods for one agent and generates
situation-dependent chatter (position updates, intentions, challenges,
threat assessments and an emotional state) from the current game state.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tagverse.agent import Agent
from tagverse.geometry import Vector3, clamp, distance
from tagverse.schemas import GameState, Outcome, Role, other_agent

from .bus import CommunicationBus
from .messages import (
    CommunicationMessage,
    CommunicationType,
    EmotionalState,
    MessagePriority,
)


@dataclass
class CommunicationContext:
    """What an agent knows when deciding what to say."""

    game_state: GameState
    my_agent: Agent
    opponent_agent: Agent


class CommunicationHelper:
    """Typed message sending and contextual chatter for one agent."""

    def __init__(self, agent_id: str, bus: CommunicationBus):
        self.agent_id = agent_id
        self.opponent_id = other_agent(agent_id)
        self.bus = bus

    # ------------------------------------------------------------------
    # Typed sends
    # ------------------------------------------------------------------

    def send_position_update(
        self, position: Vector3, velocity: Vector3, intention: str
    ) -> Optional[CommunicationMessage]:
        return self.bus.send_message(
            self.agent_id,
            self.opponent_id,
            CommunicationType.POSITION_UPDATE,
            {
                "position": position.model_dump(),
                "velocity": velocity.model_dump(),
                "intention": intention,
                "timestamp": self.bus.clock(),
            },
            MessagePriority.NORMAL,
        )

    def announce_intention(
        self,
        intention: str,
        confidence: float,
        strategy: str,
        channel_id: str = "broadcast",
    ) -> Optional[CommunicationMessage]:
        return self.bus.send_message(
            self.agent_id,
            "broadcast",
            CommunicationType.INTENTION_ANNOUNCEMENT,
            {
                "intention": intention,
                "confidence": confidence,
                "strategy": strategy,
                "timestamp": self.bus.clock(),
            },
            MessagePriority.HIGH,
            channel_id,
        )

    def share_threat_assessment(
        self, threat_level: float, threat_source: Vector3, recommended_action: str
    ) -> Optional[CommunicationMessage]:
        return self.bus.send_message(
            self.agent_id,
            self.opponent_id,
            CommunicationType.THREAT_ASSESSMENT,
            {
                "threat_level": threat_level,
                "threat_source": threat_source.model_dump(),
                "recommended_action": recommended_action,
                "timestamp": self.bus.clock(),
            },
            MessagePriority.HIGH,
        )

    def coordinate_strategy(
        self, proposed_strategy: str, coordination_type: str, details: Optional[Dict[str, Any]] = None
    ) -> Optional[CommunicationMessage]:
        if not self.bus.config.enable_strategy_sharing:
            return None
        return self.bus.send_message(
            self.agent_id,
            self.opponent_id,
            CommunicationType.STRATEGY_COORDINATION,
            {
                "proposed_strategy": proposed_strategy,
                "coordination_type": coordination_type,
                "details": details or {},
                "timestamp": self.bus.clock(),
            },
            MessagePriority.NORMAL,
        )

    def send_challenge(
        self, challenge_type: str, intensity: float, message: Optional[str] = None
    ) -> Optional[CommunicationMessage]:
        return self.bus.send_message(
            self.agent_id,
            self.opponent_id,
            CommunicationType.CHALLENGE,
            {
                "challenge_type": challenge_type,
                "intensity": intensity,
                "message": message or f"Challenge: {challenge_type}",
                "timestamp": self.bus.clock(),
            },
            MessagePriority.NORMAL,
        )

    def share_learning(
        self, outcome: Outcome, analysis: Dict[str, Any], insights: List[str]
    ) -> Optional[CommunicationMessage]:
        """Broadcast a round analysis on the learning channel."""

        if not self.bus.config.enable_learning:
            return None
        message_type = (
            CommunicationType.SUCCESS_SHARING
            if outcome == "success"
            else CommunicationType.FAILURE_ANALYSIS
        )
        return self.bus.send_message(
            self.agent_id,
            "broadcast",
            message_type,
            {
                "type": outcome,
                "analysis": analysis,
                "insights": list(insights),
                "timestamp": self.bus.clock(),
            },
            MessagePriority.LOW,
            "learning",
        )

    def share_emotional_state(self, state: EmotionalState) -> Optional[CommunicationMessage]:
        if not self.bus.config.enable_emotional_modeling:
            return None
        return self.bus.send_message(
            self.agent_id,
            "broadcast",
            CommunicationType.EMOTIONAL_STATE,
            state.model_dump(),
            MessagePriority.LOW,
        )

    # ------------------------------------------------------------------
    # Contextual chatter
    # ------------------------------------------------------------------

    def generate_contextual_communication(
        self, context: CommunicationContext
    ) -> List[CommunicationMessage]:
        """Send this tick's messages and return the ones the bus accepted.

        Always sends a position update and an emotional state. A chaser
        closer than 3 announces aggressive pursuit and issues a speed
        challenge; beyond 8 it announces strategic pursuit. An evader
        closer than 4 announces defensive evasion and shares a threat
        assessment; beyond 10 it announces relaxed evasion.
        """

        game_state = context.game_state
        my_position = game_state.position_of(self.agent_id)
        opponent_position = game_state.position_of(self.opponent_id)
        separation = distance(my_position, opponent_position)

        sent = [
            self.send_position_update(
                my_position,
                game_state.velocity_of(self.agent_id),
                self.current_intention(context),
            )
        ]

        if game_state.role_of(self.agent_id) == Role.CHASER:
            if separation < 3:
                sent.append(self.announce_intention("aggressive_pursuit", 0.9, "close_range_attack"))
                sent.append(self.send_challenge("speed_challenge", 0.8, "Catch me if you can!"))
            elif separation > 8:
                sent.append(self.announce_intention("strategic_pursuit", 0.7, "long_range_prediction"))
        else:
            if separation < 4:
                sent.append(self.announce_intention("defensive_evasion", 0.8, "close_range_escape"))
                sent.append(
                    self.share_threat_assessment(0.9, opponent_position, "evasive_maneuver")
                )
            elif separation > 10:
                sent.append(self.announce_intention("relaxed_evasion", 0.6, "maintain_distance"))

        sent.append(self.share_emotional_state(self.calculate_emotional_state(context)))
        return [message for message in sent if message is not None]

    def current_intention(self, context: CommunicationContext) -> str:
        aggressive = context.my_agent.personality.aggression > 0.7
        if context.game_state.role_of(self.agent_id) == Role.CHASER:
            return "aggressive_pursuit" if aggressive else "strategic_pursuit"
        return "aggressive_evasion" if aggressive else "defensive_evasion"

    def calculate_emotional_state(self, context: CommunicationContext) -> EmotionalState:
        """Distance-driven emotions scaled by personality.

        Confidence scales with ``personality.confidence``, excitement with
        ``personality.aggression`` and stress with ``1 - confidence``.
        """

        game_state = context.game_state
        personality = context.my_agent.personality
        separation = distance(
            game_state.position_of(self.agent_id),
            game_state.position_of(self.opponent_id),
        )

        if game_state.role_of(self.agent_id) == Role.CHASER:
            confidence = 0.8 if separation < 5 else 0.6
            excitement = 0.9 if separation < 3 else 0.7
            stress = 0.3 if separation > 10 else 0.5
        else:
            confidence = 0.7 if separation > 5 else 0.4
            excitement = 0.8 if separation < 3 else 0.6
            stress = 0.8 if separation < 3 else 0.4

        confidence *= personality.confidence
        excitement *= personality.aggression
        stress *= 1 - personality.confidence

        return EmotionalState(
            confidence=clamp(confidence, 0.0, 1.0),
            excitement=clamp(excitement, 0.0, 1.0),
            stress=clamp(stress, 0.0, 1.0),
            timestamp=self.bus.clock(),
        )

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get_communication_decisions(self, context: CommunicationContext):
        return self.bus.process_communication_for_agent(self.agent_id, context.game_state)

    def get_agent_communication_stats(self) -> Dict[str, Any]:
        """System stats plus this agent's visible message count and last five messages."""

        stats = self.bus.get_communication_stats().model_dump()
        visible = self.bus.get_messages_for_agent(self.agent_id)
        stats["my_message_count"] = len(visible)
        stats["recent_messages"] = visible[-5:]
        return stats
