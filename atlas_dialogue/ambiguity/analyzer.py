"""
Ambiguity Analyzer — scores and ranks the ambiguities of one turn.

Behavioral Contract:
- Priority per ambiguity = impact weight x urgency weight x confidence x 10 (0-90)
- Ranking is descending by priority; ties keep the extractor's emission order
- Overall score = sum(impact weight x confidence) / (count x 3), in [0, 1],
  exactly 0 for an empty list
- Impact or urgency values outside their closed enums are rejected, never defaulted
"""

import logging
from typing import List, Optional, Sequence

from atlas_dialogue.errors import ValidationFailure
from atlas_dialogue.models.analysis import AmbiguityAnalysis, PrioritizedAmbiguity
from atlas_dialogue.models.understanding import (
    Ambiguity,
    AmbiguityType,
    Impact,
    ResolutionUrgency,
    Understanding,
)

logger = logging.getLogger(__name__)

IMPACT_WEIGHTS = {
    Impact.HIGH: 3,
    Impact.MEDIUM: 2,
    Impact.LOW: 1,
}

URGENCY_WEIGHTS = {
    ResolutionUrgency.CRITICAL: 3,
    ResolutionUrgency.IMPORTANT: 2,
    ResolutionUrgency.HELPFUL: 1,
}

MAX_IMPACT_WEIGHT = 3


def _impact_weight(ambiguity: Ambiguity) -> int:
    try:
        return IMPACT_WEIGHTS[Impact(ambiguity.impact)]
    except ValueError:
        raise ValidationFailure(
            f"Ambiguity '{ambiguity.type}' has unknown impact {ambiguity.impact!r}"
        )


def _urgency_weight(ambiguity: Ambiguity) -> int:
    try:
        return URGENCY_WEIGHTS[ResolutionUrgency(ambiguity.resolution_urgency)]
    except ValueError:
        raise ValidationFailure(
            f"Ambiguity '{ambiguity.type}' has unknown resolution urgency "
            f"{ambiguity.resolution_urgency!r}"
        )


def _label(value) -> str:
    return getattr(value, "value", value)


def calculate_priority(ambiguity: Ambiguity) -> float:
    """Clarification priority in [0, 90]."""
    return _impact_weight(ambiguity) * _urgency_weight(ambiguity) * ambiguity.confidence * 10


def calculate_overall_score(ambiguities: Sequence[Ambiguity]) -> float:
    """Summarize how unresolved an understanding is, in [0, 1]."""
    if not ambiguities:
        return 0.0
    total_impact = sum(_impact_weight(a) * a.confidence for a in ambiguities)
    score = total_impact / (len(ambiguities) * MAX_IMPACT_WEIGHT)
    return max(0.0, min(1.0, score))


def new_ambiguity_types(
    previous: Optional[Understanding], current: Understanding
) -> List[AmbiguityType]:
    """Ambiguity types present this turn that the previous understanding lacked."""
    if previous is None:
        return []
    before = set(previous.ambiguity_types())
    return [t for t in current.ambiguity_types() if t not in before]


class AmbiguityAnalyzer:
    """Pure, deterministic scoring of a turn's ambiguities."""

    def analyze(self, ambiguities: Sequence[Ambiguity]) -> AmbiguityAnalysis:
        scored = []
        for ambiguity in ambiguities:
            priority = calculate_priority(ambiguity)
            scored.append(PrioritizedAmbiguity(
                ambiguity=ambiguity,
                priority=round(priority, 6),
                reasoning=self._build_reasoning(ambiguity),
            ))

        # sorted() is stable, so equal priorities keep emission order
        ranked = sorted(scored, key=lambda p: p.priority, reverse=True)
        overall = calculate_overall_score(ambiguities)

        logger.debug(
            "Analyzed %d ambiguities, overall score %.3f",
            len(ranked), overall,
        )
        return AmbiguityAnalysis(ranked=ranked, overall_ambiguity_score=overall)

    def _build_reasoning(self, ambiguity: Ambiguity) -> str:
        return (
            f"{_label(ambiguity.impact)} impact ambiguity with "
            f"{ambiguity.confidence:.2f} confidence. "
            f"{_label(ambiguity.resolution_urgency)} to resolve."
        )
