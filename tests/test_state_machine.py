"""Tests for the Conversation State Machine."""

import pytest

from atlas_dialogue.errors import StateInvariantViolation
from atlas_dialogue.models import (
    Ambiguity,
    AmbiguityType,
    ConfidenceScores,
    ConversationState,
    EngineConfig,
    Impact,
    IntentType,
    ResolutionUrgency,
    Understanding,
)
from atlas_dialogue.state.machine import (
    ALLOWED_TRANSITIONS,
    ConversationStateMachine,
    assert_edge,
    ready_for_recommendations,
)

D = ConversationState.DISCOVERY
CL = ConversationState.CLARIFICATION
CO = ConversationState.CONFIRMATION
SP = ConversationState.SPECIFICATION


def _make_understanding(overall: float, ambiguity_count: int = 0) -> Understanding:
    types = [
        AmbiguityType.BUDGET_INTERPRETATION,
        AmbiguityType.QUANTITY_SCOPE,
        AmbiguityType.TIMELINE_URGENCY,
    ]
    ambiguities = [
        Ambiguity(
            type=t,
            description=f"{t.value} is unclear",
            confidence=0.6,
            impact=Impact.MEDIUM,
            resolution_urgency=ResolutionUrgency.IMPORTANT,
        )
        for t in types[:ambiguity_count]
    ]
    return Understanding(
        primary_intent=IntentType.PRODUCT_SEARCH,
        ambiguities=ambiguities,
        confidence=ConfidenceScores(
            overall=overall, intent=0.8, context=0.5, specifications=0.5
        ),
    )


class TestEdges:
    def test_allowed_edges(self):
        for source, targets in ALLOWED_TRANSITIONS.items():
            for target in targets:
                assert_edge(source, target)

    @pytest.mark.parametrize("source,target", [
        (D, SP),
        (CL, SP),
        (SP, CO),
        (SP, D),
        (CL, D),
        (CO, D),
        (D, D),
    ])
    def test_disallowed_edges(self, source, target):
        with pytest.raises(StateInvariantViolation):
            assert_edge(source, target)


class TestReadiness:
    @pytest.mark.parametrize("overall,count,expected", [
        (0.85, 0, True),
        (0.85, 1, False),
        (0.80, 0, False),
        (0.60, 0, False),
        (0.95, 2, False),
        (1.0, 0, True),
    ])
    def test_biconditional(self, overall, count, expected):
        understanding = _make_understanding(overall, count)
        assert ready_for_recommendations(understanding) is expected

    def test_threshold_is_configurable(self):
        config = EngineConfig(ready_confidence=0.5)
        assert ready_for_recommendations(_make_understanding(0.6), config) is True


class TestEvaluate:
    def test_complete_first_message_reaches_specification(self):
        """Empty ambiguity list with confidence 0.85."""
        machine = ConversationStateMachine()
        transition = machine.evaluate(D, _make_understanding(0.85), 0.0)
        assert transition.to_state == SP
        assert transition.path == [CO, SP]

    def test_vague_first_message_needs_clarification(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(D, _make_understanding(0.4, 2), 0.5)
        assert transition.to_state == CL
        assert transition.path == [CL]

    def test_low_confidence_alone_needs_clarification(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(D, _make_understanding(0.5), 0.0)
        assert transition.to_state == CL

    def test_clarification_stays_while_unclear(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(CL, _make_understanding(0.6, 2), 0.4)
        assert transition.to_state == CL
        assert transition.path == []
        assert transition.reason.startswith("remaining in clarification")

    def test_answer_resolves_everything(self):
        """2 → 0 ambiguities, confidence 0.6 → 0.82, across two turns."""
        machine = ConversationStateMachine()
        first = machine.evaluate(D, _make_understanding(0.6, 2), 0.4)
        second = machine.evaluate(first.to_state, _make_understanding(0.82, 0), 0.0)

        assert first.to_state == CL
        assert second.from_state == CL
        assert second.path == [CO, SP]
        assert second.to_state == SP
        for source, target in zip([CL, CO], second.path):
            assert_edge(source, target)

    def test_clear_but_not_ready_waits_in_confirmation(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(CL, _make_understanding(0.75, 0), 0.0)
        assert transition.to_state == CO

    def test_confirmation_advances_when_ready(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(CO, _make_understanding(0.9, 0), 0.0)
        assert transition.path == [SP]

    def test_new_ambiguity_reenters_clarification(self):
        machine = ConversationStateMachine()
        understanding = _make_understanding(0.9, 1)
        transition = machine.evaluate(
            SP, understanding, 0.1, [AmbiguityType.BUDGET_INTERPRETATION]
        )
        assert transition.to_state == CL
        assert "budget_interpretation" in transition.reason

    def test_new_ambiguity_keeps_clarification(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(
            CL, _make_understanding(0.9, 1), 0.1, [AmbiguityType.BUDGET_INTERPRETATION]
        )
        assert transition.to_state == CL
        assert transition.path == []

    def test_specification_stays_when_still_ready(self):
        machine = ConversationStateMachine()
        transition = machine.evaluate(SP, _make_understanding(0.9), 0.0)
        assert transition.to_state == SP
        assert transition.path == []
