"""
Communication bus between the two agents.

Messages travel on named channels. Each channel keeps a bounded history,
and every accepted message is also appended to a process-wide queue that
hosts can drain. Expiry is enforced whenever messages are read, so a
message is never visible at or after its ``expires_at`` time even if
``cleanup_expired_messages()`` has not run yet.

Reading is separate from interpreting: ``process_communication_for_agent``
turns visible messages into advisory ``AIDecision`` objects by message
type. Advisory decisions never move an agent on their own; see
``tagverse.communication.influence``.
"""

import uuid
from typing import Any, Callable, Dict, List, Optional

from tagverse.clock import Clock, SystemClock
from tagverse.geometry import Vector3, distance
from tagverse.logging_utils import log_communication, log_error, log_info
from tagverse.schemas import (
    AIDecision,
    DecisionAction,
    GameState,
    Role,
    other_agent,
)

from .messages import (
    ChannelStats,
    CommunicationChannel,
    CommunicationConfig,
    CommunicationMessage,
    CommunicationStats,
    CommunicationType,
    MessagePriority,
)

DEFAULT_CHANNEL = "p1-p2-direct"

# (id, name, bandwidth in messages per second)
DEFAULT_CHANNELS = (
    ("p1-p2-direct", "Direct P1-P2 Communication", 10),
    ("broadcast", "Broadcast Channel", 5),
    ("learning", "Learning & Adaptation", 2),
    ("debug", "Debug Information", 1),
)

BANDWIDTH_WINDOW_MS = 1000.0

MessageHandler = Callable[
    ["CommunicationBus", str, CommunicationMessage, GameState], Optional[AIDecision]
]


class CommunicationBus:
    """Channel-based message exchange for ``p1`` and ``p2``.

    Args:
        config: Bus configuration (defaults to CommunicationConfig())
        clock: Millisecond clock used for timestamps and expiry
    """

    def __init__(
        self,
        config: Optional[CommunicationConfig] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or CommunicationConfig()
        self.clock: Clock = clock or SystemClock()
        self.channels: Dict[str, CommunicationChannel] = {}
        self.message_queue: List[CommunicationMessage] = []
        self._initialize_channels()

    def _initialize_channels(self) -> None:
        for channel_id, name, bandwidth in DEFAULT_CHANNELS:
            self.create_channel(channel_id, name, ["p1", "p2"], bandwidth)

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def create_channel(
        self, channel_id: str, name: str, participants: List[str], bandwidth: int
    ) -> CommunicationChannel:
        """Create (or replace) a channel with an empty history."""

        channel = CommunicationChannel(
            id=channel_id,
            name=name,
            participants=list(participants),
            bandwidth=bandwidth,
        )
        self.channels[channel_id] = channel
        return channel

    def get_channel(self, channel_id: str) -> Optional[CommunicationChannel]:
        return self.channels.get(channel_id)

    def set_channel_active(self, channel_id: str, active: bool) -> bool:
        channel = self.channels.get(channel_id)
        if channel is None:
            return False
        channel.is_active = active
        return True

    # ------------------------------------------------------------------
    # Sending and reading
    # ------------------------------------------------------------------

    def send_message(
        self,
        sender_id: str,
        receiver_id: str,
        message_type: CommunicationType,
        content: Dict[str, Any],
        priority: MessagePriority = MessagePriority.NORMAL,
        channel_id: str = DEFAULT_CHANNEL,
    ) -> Optional[CommunicationMessage]:
        """Send a message on ``channel_id``.

        Returns the message, or None when the channel is missing or
        inactive, the sender is not a participant, or the channel's
        bandwidth is used up for the current second (only with
        ``enforce_bandwidth``). A rejected send has no side effects.
        """

        channel = self.channels.get(channel_id)
        if channel is None or not channel.is_active:
            self._debug_reject(sender_id, channel_id, "channel unavailable")
            return None
        if sender_id not in channel.participants:
            self._debug_reject(sender_id, channel_id, "sender not a participant")
            return None

        now = self.clock()
        if self.config.enforce_bandwidth and self._sent_within_window(channel, now) >= channel.bandwidth:
            self._debug_reject(sender_id, channel_id, "bandwidth exceeded")
            return None

        message = CommunicationMessage(
            id=self._generate_message_id(now),
            sender_id=sender_id,
            receiver_id=receiver_id,
            message_type=message_type,
            content=content,
            timestamp=now,
            priority=priority,
            expires_at=now + self.config.message_expiration_time,
        )

        channel.message_history.append(message)
        overflow = len(channel.message_history) - self.config.max_message_history
        if overflow > 0:
            channel.message_history = channel.message_history[overflow:]

        self.message_queue.append(message)

        if self.config.debug_mode:
            log_communication(
                f"{sender_id} -> {receiver_id}: {message_type.value} {message.content}"
            )
        return message

    def get_messages_for_agent(
        self, agent_id: str, channel_id: Optional[str] = None
    ) -> List[CommunicationMessage]:
        """Visible messages for ``agent_id``, most urgent first.

        Only active channels are read. Messages addressed to the agent or to
        ``broadcast`` count; expired ones never do. Equal priorities are
        ordered newest first.
        """

        now = self.clock()
        if channel_id is not None:
            channel = self.channels.get(channel_id)
            channels = [channel] if channel is not None else []
        else:
            channels = list(self.channels.values())

        visible = [
            message
            for channel in channels
            if channel.is_active
            for message in channel.message_history
            if message.is_for(agent_id) and not message.is_expired(now)
        ]
        visible.sort(key=lambda message: (message.priority, -message.timestamp))
        return visible

    # ------------------------------------------------------------------
    # Interpreting messages
    # ------------------------------------------------------------------

    def process_communication_for_agent(
        self, agent_id: str, game_state: GameState
    ) -> List[AIDecision]:
        """Turn every visible message into at most one advisory decision each."""

        decisions: List[AIDecision] = []
        for message in self.get_messages_for_agent(agent_id):
            decision = self.process_message(agent_id, message, game_state)
            if decision is not None:
                decisions.append(decision)
        return decisions

    def process_message(
        self, agent_id: str, message: CommunicationMessage, game_state: GameState
    ) -> Optional[AIDecision]:
        handler = MESSAGE_HANDLERS.get(message.message_type)
        if handler is None:
            return None
        return handler(self, agent_id, message, game_state)

    def _advise(
        self,
        agent_id: str,
        action: DecisionAction,
        target: Vector3,
        confidence: float,
        reasoning: str,
    ) -> AIDecision:
        return AIDecision(
            agent_id=agent_id,
            action=action,
            target=target,
            timestamp=self.clock(),
            confidence=confidence,
            reasoning=reasoning,
        )

    def _process_position_update(
        self, agent_id: str, message: CommunicationMessage, game_state: GameState
    ) -> Optional[AIDecision]:
        reported = _read_vector(message.content, "position")
        if reported is None:
            return None

        separation = distance(game_state.position_of(agent_id), reported)
        if game_state.role_of(agent_id) == Role.CHASER:
            if separation < 3:
                return self._advise(
                    agent_id,
                    DecisionAction.ACCELERATE_TOWARDS,
                    reported,
                    0.9,
                    f"Opponent is close ({separation:.1f}m), accelerating pursuit",
                )
            if separation > 8:
                return self._advise(
                    agent_id,
                    DecisionAction.PREDICT_MOVEMENT,
                    reported,
                    0.7,
                    f"Opponent is far ({separation:.1f}m), predicting movement pattern",
                )
        elif separation < 4:
            return self._advise(
                agent_id,
                DecisionAction.EVASIVE_MANEUVER,
                reported,
                0.8,
                f"Chaser is close ({separation:.1f}m), executing evasive maneuver",
            )
        return None

    def _process_intention_announcement(
        self, agent_id: str, message: CommunicationMessage, game_state: GameState
    ) -> Optional[AIDecision]:
        intention = message.content.get("intention")
        role = game_state.role_of(agent_id)

        if intention == "aggressive_pursuit" and role == Role.EVADER:
            return self._advise(
                agent_id,
                DecisionAction.DEFENSIVE_POSITIONING,
                game_state.position_of(agent_id),
                0.8,
                "Opponent announced aggressive pursuit, taking defensive position",
            )
        if intention == "defensive_evasion" and role == Role.CHASER:
            return self._advise(
                agent_id,
                DecisionAction.FLANKING_MANEUVER,
                game_state.position_of(other_agent(agent_id)),
                0.7,
                "Opponent is defensive, attempting flanking maneuver",
            )
        return None

    def _process_threat_assessment(
        self, agent_id: str, message: CommunicationMessage, game_state: GameState
    ) -> Optional[AIDecision]:
        threat_level = message.content.get("threat_level")
        if not isinstance(threat_level, (int, float)) or threat_level <= 0.7:
            return None

        try:
            action = DecisionAction(message.content.get("recommended_action"))
        except ValueError:
            action = DecisionAction.EVASIVE_MANEUVER

        return self._advise(
            agent_id,
            action,
            game_state.position_of(agent_id),
            0.9,
            f"High threat level ({threat_level}) detected, taking evasive action",
        )

    def _process_strategy_coordination(
        self, agent_id: str, message: CommunicationMessage, game_state: GameState
    ) -> Optional[AIDecision]:
        if self.config.debug_mode:
            log_info(
                f"{agent_id} acknowledging strategy: {message.content.get('proposed_strategy')}"
            )
        return None

    def _process_challenge(
        self, agent_id: str, message: CommunicationMessage, game_state: GameState
    ) -> Optional[AIDecision]:
        if message.content.get("challenge_type") != "speed_challenge":
            return None
        return self._advise(
            agent_id,
            DecisionAction.INCREASE_SPEED,
            game_state.position_of(agent_id),
            0.8,
            f"Responding to speed challenge with intensity {message.content.get('intensity')}",
        )

    # ------------------------------------------------------------------
    # Maintenance and stats
    # ------------------------------------------------------------------

    def cleanup_expired_messages(self) -> int:
        """Drop expired messages from every history and the queue.

        Returns the number of channel-history messages removed.
        """

        now = self.clock()
        removed = 0
        for channel in self.channels.values():
            kept = [message for message in channel.message_history if not message.is_expired(now)]
            removed += len(channel.message_history) - len(kept)
            channel.message_history = kept

        self.message_queue = [
            message for message in self.message_queue if not message.is_expired(now)
        ]
        return removed

    def pending_messages(self) -> List[CommunicationMessage]:
        return list(self.message_queue)

    def drain_queue(self) -> List[CommunicationMessage]:
        """Return and clear the processing queue."""

        drained = self.message_queue
        self.message_queue = []
        return drained

    def get_communication_stats(self) -> CommunicationStats:
        stats = CommunicationStats()
        for channel_id, channel in self.channels.items():
            stats.total_messages += len(channel.message_history)
            stats.channel_stats[channel_id] = ChannelStats(
                message_count=len(channel.message_history),
                is_active=channel.is_active,
                bandwidth=channel.bandwidth,
            )
            for message in channel.message_history:
                type_key = message.message_type.value
                priority_key = message.priority.name.lower()
                stats.messages_by_type[type_key] = stats.messages_by_type.get(type_key, 0) + 1
                stats.messages_by_priority[priority_key] = (
                    stats.messages_by_priority.get(priority_key, 0) + 1
                )
        return stats

    def dispose(self) -> None:
        self.channels.clear()
        self.message_queue = []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _sent_within_window(self, channel: CommunicationChannel, now: float) -> int:
        cutoff = now - BANDWIDTH_WINDOW_MS
        return sum(1 for message in channel.message_history if message.timestamp > cutoff)

    def _debug_reject(self, sender_id: str, channel_id: str, reason: str) -> None:
        if self.config.debug_mode:
            log_error(f"Rejected message from {sender_id} on '{channel_id}': {reason}")

    @staticmethod
    def _generate_message_id(now: float) -> str:
        return f"msg_{int(now)}_{uuid.uuid4().hex[:9]}"


def _read_vector(content: Dict[str, Any], key: str) -> Optional[Vector3]:
    """Parse ``content[key]`` as a Vector3; None when missing or malformed."""

    raw = content.get(key)
    if raw is None:
        return None
    try:
        return Vector3.model_validate(raw)
    except (ValueError, TypeError):
        return None


MESSAGE_HANDLERS: Dict[CommunicationType, MessageHandler] = {
    CommunicationType.POSITION_UPDATE: CommunicationBus._process_position_update,
    CommunicationType.INTENTION_ANNOUNCEMENT: CommunicationBus._process_intention_announcement,
    CommunicationType.THREAT_ASSESSMENT: CommunicationBus._process_threat_assessment,
    CommunicationType.STRATEGY_COORDINATION: CommunicationBus._process_strategy_coordination,
    CommunicationType.CHALLENGE: CommunicationBus._process_challenge,
}
