"""
Clarification Selector — turns ranked ambiguities into a bounded question list.

Question types follow a fixed lookup per ambiguity type:
  - budget / quality / customization → multiple choice over the interpretations
  - quantity / timeline → range
  - product category / recipients → open ended
A question with a single candidate interpretation verifies that assumption
with a yes/no question instead. A forced multiple-choice question without
enough interpretations offers the generic options for its type.
"""

import logging
from typing import Dict, List, Optional, Sequence

from atlas_dialogue.models.analysis import PrioritizedAmbiguity
from atlas_dialogue.models.clarification import (
    ClarificationQuestion,
    QuestionPriority,
    QuestionType,
)
from atlas_dialogue.models.understanding import Ambiguity, AmbiguityType

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTIONS = 3
HIGH_PRIORITY_THRESHOLD = 60.0
MEDIUM_PRIORITY_THRESHOLD = 30.0

QUESTION_TYPES: Dict[AmbiguityType, QuestionType] = {
    AmbiguityType.PRODUCT_CATEGORY: QuestionType.OPEN_ENDED,
    AmbiguityType.QUANTITY_SCOPE: QuestionType.RANGE,
    AmbiguityType.BUDGET_INTERPRETATION: QuestionType.MULTIPLE_CHOICE,
    AmbiguityType.TIMELINE_URGENCY: QuestionType.RANGE,
    AmbiguityType.QUALITY_EXPECTATION: QuestionType.MULTIPLE_CHOICE,
    AmbiguityType.CUSTOMIZATION_EXTENT: QuestionType.MULTIPLE_CHOICE,
    AmbiguityType.RECIPIENT_SPECIFICATION: QuestionType.OPEN_ENDED,
    AmbiguityType.NONE: QuestionType.OPEN_ENDED,
}

QUESTION_TEMPLATES: Dict[AmbiguityType, Dict[QuestionType, str]] = {
    AmbiguityType.PRODUCT_CATEGORY: {
        QuestionType.OPEN_ENDED: (
            "What kind of products do you have in mind? For example apparel, "
            "bags, drinkware or tech accessories."
        ),
        QuestionType.MULTIPLE_CHOICE: "Which type of product are you looking for?",
    },
    AmbiguityType.QUANTITY_SCOPE: {
        QuestionType.RANGE: (
            "Roughly how many items do you need? A range is fine, and it helps "
            "us find bulk pricing."
        ),
        QuestionType.MULTIPLE_CHOICE: "Which quantity range fits best?",
    },
    AmbiguityType.BUDGET_INTERPRETATION: {
        QuestionType.MULTIPLE_CHOICE: "How should we read your budget?",
        QuestionType.OPEN_ENDED: (
            "Could you share your budget, and whether it is per item or for the "
            "whole order?"
        ),
    },
    AmbiguityType.TIMELINE_URGENCY: {
        QuestionType.RANGE: (
            "When do you need the items in hand, and how firm is that date?"
        ),
        QuestionType.MULTIPLE_CHOICE: "Which timeline describes your deadline?",
    },
    AmbiguityType.QUALITY_EXPECTATION: {
        QuestionType.MULTIPLE_CHOICE: "What quality level are you picturing?",
        QuestionType.OPEN_ENDED: (
            "What does good quality mean for this order, for example materials, "
            "finish or price per item?"
        ),
    },
    AmbiguityType.CUSTOMIZATION_EXTENT: {
        QuestionType.MULTIPLE_CHOICE: "How much customization do you need?",
        QuestionType.OPEN_ENDED: (
            "What customization do you need, for example logo placement, "
            "decoration technique or color matching?"
        ),
    },
    AmbiguityType.RECIPIENT_SPECIFICATION: {
        QuestionType.OPEN_ENDED: (
            "Who will be receiving these items, and roughly how many people is "
            "that?"
        ),
        QuestionType.MULTIPLE_CHOICE: "Who are the items for?",
    },
}

# Offered when a forced multiple-choice question has fewer than two interpretations
GENERIC_OPTIONS: Dict[AmbiguityType, List[str]] = {
    AmbiguityType.PRODUCT_CATEGORY: [
        "Apparel", "Bags", "Drinkware", "Tech accessories", "Something else",
    ],
    AmbiguityType.QUANTITY_SCOPE: ["Under 50", "50-250", "250-1,000", "1,000+"],
    AmbiguityType.BUDGET_INTERPRETATION: ["Per item", "Total for the order"],
    AmbiguityType.TIMELINE_URGENCY: [
        "Within two weeks", "Within a month", "No fixed deadline",
    ],
    AmbiguityType.QUALITY_EXPECTATION: ["Premium", "Professional", "Budget friendly"],
    AmbiguityType.CUSTOMIZATION_EXTENT: [
        "Logo imprint only", "Full custom design", "Individual personalization",
    ],
    AmbiguityType.RECIPIENT_SPECIFICATION: [
        "Employees", "Clients", "Event attendees", "Prospects", "Someone else",
    ],
}

FALLBACK_QUESTION = (
    "Could you tell me a bit more about what you're looking for, such as the "
    "product, how many you need and when you need them?"
)


def priority_label(score: float) -> QuestionPriority:
    if score >= HIGH_PRIORITY_THRESHOLD:
        return QuestionPriority.HIGH
    if score >= MEDIUM_PRIORITY_THRESHOLD:
        return QuestionPriority.MEDIUM
    return QuestionPriority.LOW


def _interpretations(ambiguity: Ambiguity) -> List[str]:
    """Distinct non-empty interpretations, in emission order."""
    seen = []
    for option in ambiguity.possible_interpretations:
        option = option.strip()
        if option and option not in seen:
            seen.append(option)
    return seen


class ClarificationSelector:
    """Selects and phrases up to `max_questions` clarification questions."""

    def select(
        self,
        ranked: Sequence[PrioritizedAmbiguity],
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        force_multiple_choice: bool = False,
    ) -> List[ClarificationQuestion]:
        if max_questions < 0:
            raise ValueError("max_questions must be non-negative")
        questions = [
            self.build_question(entry, force_multiple_choice)
            for entry in list(ranked)[:max_questions]
        ]
        logger.debug(
            "Selected %d of %d ranked ambiguities for clarification",
            len(questions), len(ranked),
        )
        return questions

    def question_type_for(
        self, ambiguity: Ambiguity, force_multiple_choice: bool = False
    ) -> QuestionType:
        options = _interpretations(ambiguity)
        preferred = QUESTION_TYPES.get(ambiguity.type, QuestionType.OPEN_ENDED)
        if force_multiple_choice and len(self.choices_for(ambiguity)) >= 2:
            return QuestionType.MULTIPLE_CHOICE
        if preferred == QuestionType.RANGE:
            return preferred
        if len(options) == 1:
            return QuestionType.YES_NO
        if preferred == QuestionType.MULTIPLE_CHOICE and len(options) < 2:
            return QuestionType.OPEN_ENDED
        return preferred

    def choices_for(self, ambiguity: Ambiguity) -> List[str]:
        """The interpretations, topped up with generic options when there are fewer than two."""
        options = _interpretations(ambiguity)
        if len(options) >= 2:
            return options
        for option in GENERIC_OPTIONS.get(ambiguity.type, []):
            if option not in options:
                options.append(option)
        return options

    def build_question(
        self, entry: PrioritizedAmbiguity, force_multiple_choice: bool = False
    ) -> ClarificationQuestion:
        ambiguity = entry.ambiguity
        question_type = self.question_type_for(ambiguity, force_multiple_choice)
        options = _interpretations(ambiguity)
        if question_type == QuestionType.MULTIPLE_CHOICE:
            options = self.choices_for(ambiguity)

        if question_type == QuestionType.YES_NO:
            text = f"Just to confirm, did you mean {options[0]}?"
        else:
            templates = QUESTION_TEMPLATES.get(ambiguity.type, {})
            text = templates.get(question_type) or ambiguity.description

        return ClarificationQuestion(
            question=text,
            type=question_type,
            options=options if question_type == QuestionType.MULTIPLE_CHOICE else None,
            priority=priority_label(entry.priority),
            reasoning=self._build_reasoning(entry),
            ambiguity_type=ambiguity.type,
        )

    def fallback_question(self, reason: Optional[str] = None) -> ClarificationQuestion:
        """Generic question used when no structured understanding is available."""
        return ClarificationQuestion(
            question=FALLBACK_QUESTION,
            type=QuestionType.OPEN_ENDED,
            priority=QuestionPriority.HIGH,
            reasoning=reason or "Request could not be interpreted; asking for the essentials.",
        )

    def _build_reasoning(self, entry: PrioritizedAmbiguity) -> str:
        ambiguity = entry.ambiguity
        reasoning = (
            f"{ambiguity.impact.value.capitalize()} impact, "
            f"{ambiguity.resolution_urgency.value} to resolve"
        )
        if ambiguity.description:
            reasoning += f": {ambiguity.description}"
        return reasoning
