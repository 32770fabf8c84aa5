"""
Context Merger — folds one turn's understanding into the conversation context.

Behavioral Contract:
- Turn-local replacement: the new understanding replaces the current one and
  the old one becomes `previous_understanding`. No field-level carry-over;
  the extractor consumes the prior understanding itself.
- turn_number strictly increases by exactly one per merged turn
- clarification_history is append-only
- conversation_id is immutable once assigned
- Never mutates the previous context; always returns a new value
- user_preferences counts how often each ambiguity type shows up
  (`clarification_patterns`) and which question types got answers that
  resolved something (`resolved_question_types`)
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

from atlas_dialogue.errors import StateInvariantViolation
from atlas_dialogue.models.clarification import (
    ClarificationQuestion,
    ClarificationRecord,
)
from atlas_dialogue.models.conversation import (
    ConversationContext,
    ConversationState,
    TurnSnapshot,
)
from atlas_dialogue.models.understanding import Understanding

logger = logging.getLogger(__name__)

CLARIFICATION_PATTERNS = "clarification_patterns"
RESOLVED_QUESTION_TYPES = "resolved_question_types"


def new_conversation_id() -> str:
    return f"conv_{uuid4().hex[:12]}"


def _bump(preferences: Dict[str, Any], key: str, names: List[str]) -> Dict[str, Any]:
    """Copy of `preferences` with the counters under `key` incremented."""
    counts = dict(preferences.get(key) or {})
    for name in names:
        counts[name] = counts.get(name, 0) + 1
    updated = dict(preferences)
    updated[key] = counts
    return updated


class ContextMerger:
    """Builds the next ConversationContext for a turn."""

    def merge(
        self,
        previous: Optional[ConversationContext],
        understanding: Understanding,
        clarification: Optional[ClarificationRecord] = None,
        conversation_id: Optional[str] = None,
        turn_number: Optional[int] = None,
    ) -> ConversationContext:
        """
        Merge a new candidate understanding into the previous context.

        `conversation_id` and `turn_number`, when supplied by the caller, must
        agree with the sequence implied by `previous`.
        """
        if previous is None:
            expected_turn = 1
            if turn_number is not None and turn_number != expected_turn:
                raise StateInvariantViolation(
                    f"First turn must be turn 1, caller supplied {turn_number}"
                )
            history = [clarification] if clarification else []
            context = ConversationContext(
                conversation_id=conversation_id or new_conversation_id(),
                turn_number=expected_turn,
                previous_understanding=None,
                current_understanding=understanding,
                clarification_history=history,
                state=ConversationState.DISCOVERY,
            )
            logger.debug("Started conversation %s", context.conversation_id)
            return context

        self.check_integrity(previous)

        if conversation_id is not None and conversation_id != previous.conversation_id:
            raise StateInvariantViolation(
                f"Conversation id is immutable: context has "
                f"{previous.conversation_id}, caller supplied {conversation_id}"
            )

        expected_turn = previous.turn_number + 1
        if turn_number is not None and turn_number != expected_turn:
            raise StateInvariantViolation(
                f"Conversation {previous.conversation_id}: expected turn "
                f"{expected_turn}, caller supplied {turn_number}"
            )

        history = list(previous.clarification_history)
        preferences = dict(previous.user_preferences)
        if clarification is not None:
            history.append(clarification)
            answered = self._answered_question(previous, clarification)
            if answered is not None:
                preferences = _bump(
                    preferences, RESOLVED_QUESTION_TYPES, [answered.type.value]
                )

        return ConversationContext(
            conversation_id=previous.conversation_id,
            turn_number=expected_turn,
            previous_understanding=previous.current_understanding,
            current_understanding=understanding,
            clarification_history=history,
            user_preferences=preferences,
            state=previous.state,
            pending_questions=list(previous.pending_questions),
            turn_log=list(previous.turn_log),
        )

    def check_integrity(self, context: ConversationContext) -> None:
        """Reject a context whose turn log disagrees with its turn number."""
        if not context.turn_log:
            return
        last = context.turn_log[-1]
        if last.turn_number != context.turn_number:
            raise StateInvariantViolation(
                f"Conversation {context.conversation_id} is at turn "
                f"{context.turn_number} but its log ends at turn {last.turn_number}"
            )
        numbers = [s.turn_number for s in context.turn_log]
        if any(b != a + 1 for a, b in zip(numbers, numbers[1:])):
            raise StateInvariantViolation(
                f"Conversation {context.conversation_id} has a gap in its turn log"
            )

    def record_turn(
        self,
        context: ConversationContext,
        state: ConversationState,
        questions: List[ClarificationQuestion],
    ) -> ConversationContext:
        """Set the turn's final state and log what was asked."""
        understanding = context.current_understanding
        snapshot = TurnSnapshot(
            turn_number=context.turn_number,
            state=state,
            ambiguity_types=understanding.ambiguity_types(),
            asked_types=[q.ambiguity_type for q in questions if q.ambiguity_type],
            confidence=understanding.confidence.overall,
            ambiguity_count=len(understanding.ambiguities),
        )
        preferences = _bump(
            context.user_preferences,
            CLARIFICATION_PATTERNS,
            [t.value for t in snapshot.ambiguity_types],
        )
        return context.model_copy(update={
            "state": state,
            "pending_questions": list(questions),
            "turn_log": list(context.turn_log) + [snapshot],
            "user_preferences": preferences,
        })

    def _answered_question(
        self, previous: ConversationContext, clarification: ClarificationRecord
    ) -> Optional[ClarificationQuestion]:
        """The pending question whose subject the answer resolved, if any."""
        if clarification.resolved_ambiguity_type is None:
            return None
        for question in previous.pending_questions:
            if question.ambiguity_type == clarification.resolved_ambiguity_type:
                return question
        return None
