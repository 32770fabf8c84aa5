"""
Conversation State Machine.

States:
  DISCOVERY → CLARIFICATION ⇄ CONFIRMATION → SPECIFICATION
  (any state re-enters CLARIFICATION when a new ambiguity appears)

Evaluated once per turn, after ambiguity analysis and context merge, from the
overall ambiguity score S and confidence.overall C. A single evaluation may
walk more than one edge (e.g. DISCOVERY → CONFIRMATION → SPECIFICATION when
the first message is already complete); every hop is checked against the
allowed edge set.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from atlas_dialogue.errors import StateInvariantViolation
from atlas_dialogue.models.analysis import StateTransition
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.conversation import ConversationState
from atlas_dialogue.models.understanding import AmbiguityType, Understanding

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[ConversationState, Set[ConversationState]] = {
    ConversationState.DISCOVERY: {
        ConversationState.CLARIFICATION,
        ConversationState.CONFIRMATION,
    },
    ConversationState.CLARIFICATION: {
        ConversationState.CONFIRMATION,
    },
    ConversationState.CONFIRMATION: {
        ConversationState.CLARIFICATION,
        ConversationState.SPECIFICATION,
    },
    ConversationState.SPECIFICATION: {
        ConversationState.CLARIFICATION,
    },
}

# Order used to decide whether a conversation has "reached" a state
STATE_RANK = {
    ConversationState.DISCOVERY: 0,
    ConversationState.CLARIFICATION: 1,
    ConversationState.CONFIRMATION: 2,
    ConversationState.SPECIFICATION: 3,
}


def assert_edge(from_state: ConversationState, to_state: ConversationState) -> None:
    """Raise StateInvariantViolation unless from_state → to_state is an allowed edge."""
    if to_state not in ALLOWED_TRANSITIONS.get(from_state, set()):
        raise StateInvariantViolation(
            f"Transition {from_state.value} → {to_state.value} is not allowed"
        )


def ready_for_recommendations(
    understanding: Understanding, config: Optional[EngineConfig] = None
) -> bool:
    """The authoritative "done" signal: C > ready threshold and no ambiguities."""
    config = config or EngineConfig()
    return (
        understanding.confidence.overall > config.ready_confidence
        and len(understanding.ambiguities) == 0
    )


class ConversationStateMachine:
    """Deterministic transition function over ConversationState."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def needs_clarification(self, ambiguity_score: float, confidence: float) -> bool:
        return (
            ambiguity_score > self.config.ambiguity_threshold
            or confidence < self.config.clarification_confidence
        )

    def evaluate(
        self,
        current: ConversationState,
        understanding: Understanding,
        ambiguity_score: float,
        new_ambiguities: Sequence[AmbiguityType] = (),
    ) -> StateTransition:
        """Compute the next state for this turn."""
        confidence = understanding.confidence.overall
        ready = ready_for_recommendations(understanding, self.config)
        path: List[ConversationState] = []
        state = current

        def step(target: ConversationState) -> None:
            nonlocal state
            assert_edge(state, target)
            path.append(target)
            state = target

        if new_ambiguities:
            if current != ConversationState.CLARIFICATION:
                step(ConversationState.CLARIFICATION)
            reason = (
                "new ambiguity detected: "
                + ", ".join(t.value for t in new_ambiguities)
            )

        elif self.needs_clarification(ambiguity_score, confidence):
            if current in (ConversationState.DISCOVERY, ConversationState.CONFIRMATION):
                step(ConversationState.CLARIFICATION)
            reason = (
                f"ambiguity score {ambiguity_score:.2f} / confidence "
                f"{confidence:.2f} outside confirmation bounds"
            )

        else:
            if current in (ConversationState.DISCOVERY, ConversationState.CLARIFICATION):
                step(ConversationState.CONFIRMATION)
            if state == ConversationState.CONFIRMATION and ready:
                step(ConversationState.SPECIFICATION)
            if ready:
                reason = "understanding complete, ready for recommendations"
            else:
                reason = "understanding clear, awaiting explicit confirmation"

        if not path:
            reason = f"remaining in {current.value}: {reason}"

        logger.debug(
            "State %s → %s via %s (%s)",
            current.value, state.value, [s.value for s in path], reason,
        )
        return StateTransition(
            from_state=current,
            to_state=state,
            path=path,
            reason=reason,
        )
