"""
Message, channel and configuration models for inter-agent communication.
"""

from enum import Enum, IntEnum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from tagverse.schemas import AgentId, ReceiverId


class CommunicationType(str, Enum):
    """What a message is about."""

    # Game state
    POSITION_UPDATE = "position_update"
    INTENTION_ANNOUNCEMENT = "intention_announcement"
    STRATEGY_COORDINATION = "strategy_coordination"

    # Behavioural
    THREAT_ASSESSMENT = "threat_assessment"
    CONFIDENCE_LEVEL = "confidence_level"
    EMOTIONAL_STATE = "emotional_state"

    # Learning
    SUCCESS_SHARING = "success_sharing"
    FAILURE_ANALYSIS = "failure_analysis"
    PATTERN_RECOGNITION = "pattern_recognition"

    # Social
    CHALLENGE = "challenge"
    COOPERATION_REQUEST = "cooperation_request"
    DOMINANCE_DISPLAY = "dominance_display"

    # Meta
    STATUS_CHECK = "status_check"
    ERROR_REPORT = "error_report"


class MessagePriority(IntEnum):
    """Lower value is more urgent; readers see urgent messages first."""

    CRITICAL = 0
    HIGH = 1
    NORMAL = 2
    LOW = 3
    DEBUG = 4


class CommunicationMessage(BaseModel):
    """A single message on the bus. Immutable once sent."""

    model_config = ConfigDict(frozen=True)

    id: str
    sender_id: AgentId
    receiver_id: ReceiverId
    message_type: CommunicationType
    content: Dict[str, Any] = Field(default_factory=dict)
    timestamp: float = Field(..., description="Send time in clock milliseconds")
    priority: MessagePriority = MessagePriority.NORMAL
    expires_at: float = Field(..., description="Messages are invisible from this time on")

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at

    def is_for(self, agent_id: str) -> bool:
        return self.receiver_id == agent_id or self.receiver_id == "broadcast"


class CommunicationChannel(BaseModel):
    """Named route with a participant list, history and bandwidth."""

    id: str
    name: str
    participants: List[AgentId] = Field(default_factory=lambda: ["p1", "p2"])
    message_history: List[CommunicationMessage] = Field(default_factory=list)
    is_active: bool = True
    bandwidth: int = Field(..., ge=1, description="Messages per second")


class CommunicationConfig(BaseModel):
    """Bus configuration.

    ``message_expiration_time`` is in milliseconds. Bandwidth limits are only
    enforced when ``enforce_bandwidth`` is set.
    """

    max_message_history: int = Field(100, ge=1)
    message_expiration_time: float = Field(5000.0, gt=0)
    enable_learning: bool = True
    enable_emotional_modeling: bool = True
    enable_strategy_sharing: bool = True
    enforce_bandwidth: bool = False
    debug_mode: bool = False


class EmotionalState(BaseModel):
    confidence: float = Field(..., ge=0.0, le=1.0)
    excitement: float = Field(..., ge=0.0, le=1.0)
    stress: float = Field(..., ge=0.0, le=1.0)
    timestamp: float


class ChannelStats(BaseModel):
    message_count: int
    is_active: bool
    bandwidth: int


class CommunicationStats(BaseModel):
    """Aggregate counts over every channel's current history."""

    total_messages: int = 0
    messages_by_type: Dict[str, int] = Field(default_factory=dict)
    messages_by_priority: Dict[str, int] = Field(default_factory=dict)
    channel_stats: Dict[str, ChannelStats] = Field(default_factory=dict)
