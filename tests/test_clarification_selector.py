"""Tests for the Clarification Selector."""

import pytest

from atlas_dialogue.ambiguity.analyzer import AmbiguityAnalyzer
from atlas_dialogue.clarification.selector import (
    FALLBACK_QUESTION,
    ClarificationSelector,
    priority_label,
)
from atlas_dialogue.models import (
    Ambiguity,
    AmbiguityType,
    Impact,
    QuestionPriority,
    QuestionType,
    ResolutionUrgency,
)


def _make_ambiguity(
    type: AmbiguityType,
    interpretations=None,
    impact: Impact = Impact.MEDIUM,
    urgency: ResolutionUrgency = ResolutionUrgency.IMPORTANT,
    confidence: float = 0.7,
) -> Ambiguity:
    return Ambiguity(
        type=type,
        description=f"{type.value.replace('_', ' ')} is unclear",
        possible_interpretations=interpretations or [],
        confidence=confidence,
        impact=impact,
        resolution_urgency=urgency,
    )


def _make_ranked(*ambiguities: Ambiguity):
    return AmbiguityAnalyzer().analyze(list(ambiguities)).ranked


def _make_five_ranked():
    return _make_ranked(
        _make_ambiguity(AmbiguityType.RECIPIENT_SPECIFICATION, impact=Impact.LOW,
                        urgency=ResolutionUrgency.HELPFUL, confidence=0.5),
        _make_ambiguity(AmbiguityType.BUDGET_INTERPRETATION, ["$10 per item", "$10 total"],
                        impact=Impact.HIGH, urgency=ResolutionUrgency.CRITICAL, confidence=0.9),
        _make_ambiguity(AmbiguityType.QUANTITY_SCOPE, ["Under 50", "50-250"]),
        _make_ambiguity(AmbiguityType.QUALITY_EXPECTATION, ["Executive", "Professional"],
                        urgency=ResolutionUrgency.HELPFUL),
        _make_ambiguity(AmbiguityType.PRODUCT_CATEGORY, impact=Impact.HIGH,
                        urgency=ResolutionUrgency.CRITICAL, confidence=0.8),
    )


class TestSelect:
    def test_budget_of_three_from_five(self):
        ranked = _make_five_ranked()
        questions = ClarificationSelector().select(ranked, max_questions=3)

        assert len(questions) == 3
        assert [q.ambiguity_type for q in questions] == [
            AmbiguityType.BUDGET_INTERPRETATION,
            AmbiguityType.PRODUCT_CATEGORY,
            AmbiguityType.QUANTITY_SCOPE,
        ]
        assert all(q.reasoning for q in questions)

    @pytest.mark.parametrize("budget", [0, 1, 2, 5, 10])
    def test_never_exceeds_budget(self, budget):
        questions = ClarificationSelector().select(_make_five_ranked(), max_questions=budget)
        assert len(questions) == min(budget, 5)

    def test_negative_budget_rejected(self):
        with pytest.raises(ValueError):
            ClarificationSelector().select(_make_five_ranked(), max_questions=-1)

    def test_empty_ranking(self):
        assert ClarificationSelector().select([]) == []


class TestQuestionTypes:
    def test_budget_is_multiple_choice_with_options(self):
        ranked = _make_ranked(_make_ambiguity(
            AmbiguityType.BUDGET_INTERPRETATION, ["$10 per item", "$10 total"]
        ))
        question = ClarificationSelector().select(ranked)[0]
        assert question.type == QuestionType.MULTIPLE_CHOICE
        assert question.options == ["$10 per item", "$10 total"]

    def test_quantity_is_range(self):
        ranked = _make_ranked(_make_ambiguity(AmbiguityType.QUANTITY_SCOPE, ["Under 50", "50-250"]))
        question = ClarificationSelector().select(ranked)[0]
        assert question.type == QuestionType.RANGE
        assert question.options is None

    def test_product_category_is_open_ended(self):
        ranked = _make_ranked(_make_ambiguity(AmbiguityType.PRODUCT_CATEGORY))
        question = ClarificationSelector().select(ranked)[0]
        assert question.type == QuestionType.OPEN_ENDED

    def test_single_interpretation_becomes_yes_no(self):
        ranked = _make_ranked(_make_ambiguity(
            AmbiguityType.CUSTOMIZATION_EXTENT, ["Logo imprint only"]
        ))
        question = ClarificationSelector().select(ranked)[0]
        assert question.type == QuestionType.YES_NO
        assert "Logo imprint only" in question.question

    def test_multiple_choice_without_options_falls_back_to_open(self):
        ranked = _make_ranked(_make_ambiguity(AmbiguityType.QUALITY_EXPECTATION))
        question = ClarificationSelector().select(ranked)[0]
        assert question.type == QuestionType.OPEN_ENDED
        assert question.options is None

    def test_duplicate_interpretations_collapsed(self):
        ranked = _make_ranked(_make_ambiguity(
            AmbiguityType.QUALITY_EXPECTATION, ["Premium", " Premium ", "Standard"]
        ))
        question = ClarificationSelector().select(ranked)[0]
        assert question.options == ["Premium", "Standard"]

    def test_forced_multiple_choice(self):
        ranked = _make_ranked(_make_ambiguity(AmbiguityType.QUANTITY_SCOPE, ["Under 50", "50-250"]))
        question = ClarificationSelector().select(
            ranked, max_questions=1, force_multiple_choice=True
        )[0]
        assert question.type == QuestionType.MULTIPLE_CHOICE
        assert question.options == ["Under 50", "50-250"]

    def test_forced_multiple_choice_without_interpretations_uses_generic_options(self):
        ranked = _make_ranked(_make_ambiguity(AmbiguityType.PRODUCT_CATEGORY))
        question = ClarificationSelector().select(
            ranked, max_questions=1, force_multiple_choice=True
        )[0]
        assert question.type == QuestionType.MULTIPLE_CHOICE
        assert question.question == "Which type of product are you looking for?"
        assert question.options[0] == "Apparel"
        assert len(question.options) >= 2

    def test_forced_multiple_choice_keeps_single_interpretation_first(self):
        ranked = _make_ranked(_make_ambiguity(
            AmbiguityType.CUSTOMIZATION_EXTENT, ["Full custom design"]
        ))
        question = ClarificationSelector().select(
            ranked, max_questions=1, force_multiple_choice=True
        )[0]
        assert question.type == QuestionType.MULTIPLE_CHOICE
        assert question.options == [
            "Full custom design", "Logo imprint only", "Individual personalization",
        ]


class TestPriorityLabels:
    @pytest.mark.parametrize("score,label", [
        (81.0, QuestionPriority.HIGH),
        (60.0, QuestionPriority.HIGH),
        (32.0, QuestionPriority.MEDIUM),
        (4.0, QuestionPriority.LOW),
    ])
    def test_labels(self, score, label):
        assert priority_label(score) == label


class TestFallback:
    def test_fallback_question(self):
        question = ClarificationSelector().fallback_question()
        assert question.question == FALLBACK_QUESTION
        assert question.type == QuestionType.OPEN_ENDED
        assert question.priority == QuestionPriority.HIGH
        assert question.reasoning
