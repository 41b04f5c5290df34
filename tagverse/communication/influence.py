"""Advisory influence: how a communication-derived decision nudges an agent."""

from tagverse.agent import Agent
from tagverse.geometry import clamp
from tagverse.schemas import AIDecision, DecisionAction


def apply_advisory_decision(agent: Agent, decision: AIDecision) -> bool:
    """Apply ``decision`` to ``agent``; return True if anything changed.

    Only ``aggression``, ``confidence`` and (for ``accelerate_towards``) the
    current target are touched. Other actions are ignored.
    """

    personality = agent.personality
    action = decision.action

    if action == DecisionAction.ACCELERATE_TOWARDS:
        agent.set_target(decision.target)
        personality.aggression = clamp(personality.aggression + 0.1, 0.0, 1.0)
    elif action == DecisionAction.EVASIVE_MANEUVER:
        personality.aggression = clamp(personality.aggression - 0.1, 0.0, 1.0)
    elif action == DecisionAction.DEFENSIVE_POSITIONING:
        personality.confidence = clamp(personality.confidence - 0.05, 0.0, 1.0)
    elif action == DecisionAction.FLANKING_MANEUVER:
        personality.aggression = clamp(personality.aggression + 0.05, 0.0, 1.0)
    else:
        return False
    return True
