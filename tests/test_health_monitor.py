"""Tests for the Conversation Health Monitor."""

import pytest

from atlas_dialogue.health.monitor import ConversationHealthMonitor
from atlas_dialogue.models import (
    Ambiguity,
    AmbiguityType,
    ClarificationRecord,
    ConfidenceScores,
    ConversationContext,
    ConversationState,
    EngineConfig,
    Impact,
    IntentType,
    Intervention,
    QuestionType,
    ResolutionUrgency,
    TurnSnapshot,
    Understanding,
)

BUDGET = AmbiguityType.BUDGET_INTERPRETATION
QUANTITY = AmbiguityType.QUANTITY_SCOPE


def _make_understanding(overall: float, *types: AmbiguityType) -> Understanding:
    return Understanding(
        primary_intent=IntentType.PRODUCT_SEARCH,
        ambiguities=[
            Ambiguity(
                type=t,
                description=f"{t.value} is unclear",
                confidence=0.8,
                impact=Impact.HIGH,
                resolution_urgency=ResolutionUrgency.CRITICAL,
            )
            for t in types
        ],
        confidence=ConfidenceScores(
            overall=overall, intent=0.8, context=0.5, specifications=0.5
        ),
    )


def _make_snapshot(turn, state=ConversationState.CLARIFICATION, asked=(), present=()):
    return TurnSnapshot(
        turn_number=turn,
        state=state,
        ambiguity_types=list(present),
        asked_types=list(asked),
        confidence=0.5,
        ambiguity_count=len(present),
    )


def _make_context(turn_log, previous=None, current=None, state=None) -> ConversationContext:
    last = turn_log[-1] if turn_log else None
    return ConversationContext(
        conversation_id="conv_health",
        turn_number=last.turn_number if last else 1,
        previous_understanding=previous,
        current_understanding=current or _make_understanding(0.5, BUDGET),
        state=state or (last.state if last else ConversationState.DISCOVERY),
        turn_log=turn_log,
    )


class TestLooping:
    def test_budget_repeated_across_three_turns(self):
        turn_log = [
            _make_snapshot(1, asked=[BUDGET], present=[BUDGET]),
            _make_snapshot(2, asked=[BUDGET], present=[BUDGET]),
            _make_snapshot(3, asked=[BUDGET], present=[BUDGET]),
        ]
        health = ConversationHealthMonitor().assess(_make_context(turn_log))

        assert health.stuck_indicator is True
        assert health.intervention == Intervention.SINGLE_MULTIPLE_CHOICE
        assert health.recommended_intervention
        assert "budget interpretation" in health.recommended_intervention
        assert health.looping_types == [BUDGET]

    def test_resolved_between_turns_is_not_looping(self):
        turn_log = [
            _make_snapshot(1, asked=[BUDGET], present=[BUDGET, QUANTITY]),
            _make_snapshot(2, asked=[QUANTITY], present=[QUANTITY]),
        ]
        health = ConversationHealthMonitor().assess(_make_context(turn_log))
        assert health.stuck_indicator is False
        assert health.recommended_intervention is None

    def test_different_subjects_are_not_looping(self):
        turn_log = [
            _make_snapshot(1, asked=[BUDGET], present=[BUDGET, QUANTITY]),
            _make_snapshot(2, asked=[QUANTITY], present=[BUDGET, QUANTITY]),
        ]
        health = ConversationHealthMonitor().assess(_make_context(turn_log))
        assert health.stuck_indicator is False

    def test_confirmation_breaks_the_run(self):
        turn_log = [
            _make_snapshot(1, asked=[BUDGET], present=[BUDGET]),
            _make_snapshot(2, state=ConversationState.CONFIRMATION, present=[]),
            _make_snapshot(3, asked=[BUDGET], present=[BUDGET]),
        ]
        health = ConversationHealthMonitor().assess(_make_context(turn_log))
        assert health.stuck_indicator is False


class TestTurnCeiling:
    def test_long_conversation_without_confirmation(self):
        subjects = [BUDGET, QUANTITY]
        turn_log = [
            _make_snapshot(n, asked=[subjects[n % 2]], present=subjects)
            for n in range(1, 8)
        ]
        health = ConversationHealthMonitor().assess(_make_context(turn_log))
        assert health.stuck_indicator is True
        assert health.intervention == Intervention.HUMAN_HANDOFF
        assert "specialist" in health.recommended_intervention

    def test_ceiling_ignored_once_confirmation_reached(self):
        turn_log = [_make_snapshot(1, state=ConversationState.CONFIRMATION)] + [
            _make_snapshot(n, state=ConversationState.CLARIFICATION, asked=[], present=[BUDGET])
            for n in range(2, 8)
        ]
        health = ConversationHealthMonitor().assess(_make_context(turn_log))
        assert health.stuck_indicator is False

    def test_ceiling_is_configurable(self):
        turn_log = [_make_snapshot(n, present=[BUDGET]) for n in range(1, 4)]
        monitor = ConversationHealthMonitor(EngineConfig(stuck_turn_ceiling=2))
        health = monitor.assess(_make_context(turn_log))
        assert health.intervention == Intervention.HUMAN_HANDOFF


class TestProgressScore:
    def test_zero_at_start(self):
        health = ConversationHealthMonitor().assess(_make_context([]))
        assert health.progress_score == 0.0

    def test_improvement(self):
        context = _make_context(
            [_make_snapshot(1), _make_snapshot(2)],
            previous=_make_understanding(0.6, BUDGET, QUANTITY),
            current=_make_understanding(0.82),
        )
        score = ConversationHealthMonitor().progress_score(context)
        assert score == pytest.approx(0.5 * 0.22 + 0.5 * 1.0)

    def test_regression_clamps_to_zero(self):
        context = _make_context(
            [_make_snapshot(1), _make_snapshot(2)],
            previous=_make_understanding(0.8),
            current=_make_understanding(0.5, BUDGET, QUANTITY),
        )
        assert ConversationHealthMonitor().progress_score(context) == 0.0

    def test_monotonic_in_confidence(self):
        monitor = ConversationHealthMonitor()
        previous = _make_understanding(0.5, BUDGET)
        scores = [
            monitor.progress_score(_make_context(
                [_make_snapshot(1), _make_snapshot(2)],
                previous=previous,
                current=_make_understanding(overall, BUDGET),
            ))
            for overall in (0.5, 0.6, 0.7, 0.9)
        ]
        assert scores == sorted(scores)
        assert scores[-1] > 0.0


class TestMetrics:
    def test_summary_from_turn_log(self):
        log = [
            _make_snapshot(1, asked=[BUDGET, QUANTITY], present=[BUDGET, QUANTITY]),
            _make_snapshot(2, asked=[BUDGET], present=[BUDGET]),
            _make_snapshot(3, state=ConversationState.CONFIRMATION),
        ]
        context = _make_context(log, current=_make_understanding(0.75)).model_copy(update={
            "clarification_history": [
                ClarificationRecord(question="q1", answer="a1", resolved_ambiguity_type=QUANTITY),
                ClarificationRecord(question="q2", answer="a2"),
            ],
            "user_preferences": {"resolved_question_types": {"range": 1, "multiple_choice": 2}},
        })

        metrics = ConversationHealthMonitor().metrics(context)

        assert metrics.conversation_id == "conv_health"
        assert metrics.total_turns == 3
        assert metrics.clarification_turns == 2
        assert metrics.targeted_questions == 3
        assert metrics.resolved_clarifications == 1
        assert metrics.successful_resolution is True
        assert metrics.final_confidence_score == 0.75
        assert metrics.pattern_frequency == {BUDGET: 2, QUANTITY: 1}
        assert metrics.preferred_question_types == [
            QuestionType.MULTIPLE_CHOICE, QuestionType.RANGE,
        ]
        assert metrics.improvement_areas == [BUDGET]

    def test_unresolved_conversation(self):
        context = _make_context([_make_snapshot(1, asked=[BUDGET], present=[BUDGET])])
        metrics = ConversationHealthMonitor().metrics(context)
        assert metrics.successful_resolution is False
        assert metrics.resolved_clarifications == 0
        assert metrics.preferred_question_types == []
