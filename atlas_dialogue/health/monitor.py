"""
Conversation Health Monitor — flags stuck or looping conversations.

Stuck Indicators:
- The same ambiguity type is asked about in consecutive clarification turns
  and is still unresolved afterwards
- The turn count passes the ceiling without ever reaching confirmation

Also summarizes a conversation into ConversationMetrics.
"""

import logging
from collections import Counter
from typing import List, Optional

from atlas_dialogue.context.merger import RESOLVED_QUESTION_TYPES
from atlas_dialogue.models.clarification import QuestionType
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.conversation import (
    ConversationContext,
    ConversationHealth,
    ConversationMetrics,
    ConversationState,
    Intervention,
    TurnSnapshot,
)
from atlas_dialogue.models.understanding import AmbiguityType
from atlas_dialogue.state.machine import STATE_RANK

logger = logging.getLogger(__name__)

INTERVENTION_TEXT = {
    Intervention.SINGLE_MULTIPLE_CHOICE: (
        "Ask a single direct multiple-choice question about {subject}."
    ),
    Intervention.HUMAN_HANDOFF: (
        "Offer to connect the customer with a human product specialist."
    ),
}


class ConversationHealthMonitor:
    """Observes the turn log and recommends an intervention when stuck."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def assess(self, context: ConversationContext) -> ConversationHealth:
        progress = self.progress_score(context)
        looping = self.looping_types(context.turn_log)
        over_ceiling = (
            context.turn_number > self.config.stuck_turn_ceiling
            and not self._reached_confirmation(context)
        )

        intervention = None
        recommended = None
        if over_ceiling:
            intervention = Intervention.HUMAN_HANDOFF
            recommended = INTERVENTION_TEXT[intervention]
        elif looping:
            intervention = Intervention.SINGLE_MULTIPLE_CHOICE
            subject = looping[0].value.replace("_", " ")
            recommended = INTERVENTION_TEXT[intervention].format(subject=subject)

        stuck = intervention is not None
        if stuck:
            logger.warning(
                "Conversation %s looks stuck at turn %d (%s)",
                context.conversation_id, context.turn_number, intervention.value,
            )

        return ConversationHealth(
            progress_score=progress,
            stuck_indicator=stuck,
            recommended_intervention=recommended,
            intervention=intervention,
            looping_types=looping,
        )

    def progress_score(self, context: ConversationContext) -> float:
        """
        Weighted turn-over-turn improvement, clamped to [0, 1].

        Zero on the first turn and whenever nothing improved; non-decreasing
        in both the confidence gain and the share of ambiguities removed.
        """
        previous = context.previous_understanding
        if previous is None:
            return 0.0
        current = context.current_understanding

        confidence_delta = current.confidence.overall - previous.confidence.overall

        before = len(previous.ambiguities)
        after = len(current.ambiguities)
        ambiguity_delta = (before - after) / max(before, after, 1)

        raw = (
            self.config.progress_confidence_weight * confidence_delta
            + self.config.progress_ambiguity_weight * ambiguity_delta
        )
        return max(0.0, min(1.0, raw))

    def looping_types(self, turn_log: List[TurnSnapshot]) -> List[AmbiguityType]:
        """Types asked in consecutive clarification turns without being resolved."""
        trailing: List[TurnSnapshot] = []
        for snapshot in reversed(turn_log):
            if snapshot.state != ConversationState.CLARIFICATION:
                break
            trailing.insert(0, snapshot)

        looping: List[AmbiguityType] = []
        for earlier, later in zip(trailing, trailing[1:]):
            for ambiguity_type in later.asked_types:
                if (
                    ambiguity_type in earlier.asked_types
                    and ambiguity_type in later.ambiguity_types
                    and ambiguity_type not in looping
                ):
                    looping.append(ambiguity_type)
        return looping

    def metrics(self, context: ConversationContext) -> ConversationMetrics:
        """Summarize the conversation so far from its turn log and clarification history."""
        log = context.turn_log
        present = Counter(t for snapshot in log for t in snapshot.ambiguity_types)
        asked = Counter(t for snapshot in log for t in snapshot.asked_types)

        resolutions = context.user_preferences.get(RESOLVED_QUESTION_TYPES) or {}
        preferred = sorted(
            (QuestionType(name) for name in resolutions),
            key=lambda question_type: -resolutions[question_type.value],
        )

        return ConversationMetrics(
            conversation_id=context.conversation_id,
            total_turns=context.turn_number,
            clarification_turns=sum(
                1 for s in log if s.state == ConversationState.CLARIFICATION
            ),
            targeted_questions=sum(asked.values()),
            resolved_clarifications=sum(
                1 for r in context.clarification_history if r.resolved_ambiguity_type
            ),
            successful_resolution=self._reached_confirmation(context),
            final_confidence_score=context.current_understanding.confidence.overall,
            pattern_frequency=dict(present),
            preferred_question_types=preferred,
            improvement_areas=[t for t, count in asked.items() if count > 1],
        )

    def _reached_confirmation(self, context: ConversationContext) -> bool:
        confirmation = STATE_RANK[ConversationState.CONFIRMATION]
        if STATE_RANK[context.state] >= confirmation:
            return True
        return any(STATE_RANK[s.state] >= confirmation for s in context.turn_log)
