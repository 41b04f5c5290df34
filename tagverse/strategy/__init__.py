"""Role strategies for chasers and evaders.

Decision branches are plain functions collected in a strategy table keyed
by ``(role, personality_type)``; ``decide`` and ``update_learning`` are the
entry points used by the coordinator.
"""

from .common import Branch, Override, build_decision
from .dispatch import (
    LEARNING_UPDATES,
    ROLE_OVERRIDES,
    STRATEGY_TABLE,
    decide,
    update_learning,
)
from .chaser import predict_opponent_position, prediction_accuracy
from .evader import calculate_escape_direction, escape_routes, survival_time

__all__ = [
    "Branch",
    "Override",
    "build_decision",
    "STRATEGY_TABLE",
    "ROLE_OVERRIDES",
    "LEARNING_UPDATES",
    "decide",
    "update_learning",
    "predict_opponent_position",
    "prediction_accuracy",
    "calculate_escape_direction",
    "escape_routes",
    "survival_time",
]
