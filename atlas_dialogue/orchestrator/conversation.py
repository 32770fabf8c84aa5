"""
Conversation Orchestrator — runs one turn end to end.

Turn pipeline:
1. Fan out extraction, context analysis and insight generation (joined)
2. Analyze ambiguities
3. Merge into a new ConversationContext
4. Evaluate the state machine
5. Select clarification questions (clarification state only)
6. Record the turn and assess conversation health
7. Apply the health intervention, if any, and choose the next action

Behavioral Contract:
- One turn per conversation id at a time; a concurrent turn is rejected
- The input context is never modified. Errors, timeouts and cancellation
  leave the caller holding the context it passed in.
- Extraction exhaustion degrades the turn instead of failing it
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Set, TypeVar

from atlas_dialogue.ambiguity.analyzer import AmbiguityAnalyzer, new_ambiguity_types
from atlas_dialogue.clarification.selector import ClarificationSelector
from atlas_dialogue.context.merger import ContextMerger
from atlas_dialogue.errors import (
    ConversationBusy,
    ExtractionFailure,
    StateInvariantViolation,
    TurnTimeout,
)
from atlas_dialogue.extraction.services import AnalysisServices
from atlas_dialogue.health.monitor import ConversationHealthMonitor
from atlas_dialogue.models.analysis import AmbiguityAnalysis, PrioritizedAmbiguity
from atlas_dialogue.models.clarification import ClarificationQuestion, ClarificationRecord
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.conversation import (
    ConversationContext,
    ConversationHealth,
    ConversationState,
    Intervention,
    NextAction,
)
from atlas_dialogue.models.results import ClarificationResult, TurnConfidence, TurnResult
from atlas_dialogue.models.understanding import (
    AmbiguityType,
    ConfidenceScores,
    IntentType,
    Understanding,
)
from atlas_dialogue.orchestrator.responses import compose_response
from atlas_dialogue.state.machine import ConversationStateMachine, ready_for_recommendations

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT")


def match_pending_question(
    question_asked: str, pending: List[ClarificationQuestion]
) -> Optional[ClarificationQuestion]:
    """Find the pending question the caller is answering."""
    for question in pending:
        if question.question == question_asked:
            return question
    normalized = question_asked.strip().casefold()
    for question in pending:
        if question.question.strip().casefold() == normalized:
            return question
    return None


class ConversationOrchestrator:
    """
    Drives a conversation turn by turn.

    Components are injectable for testing; by default each is built from
    the shared EngineConfig. Contexts are never stored here: the caller owns
    persistence and hands the latest context back on the next turn.
    """

    def __init__(
        self,
        services: AnalysisServices,
        config: Optional[EngineConfig] = None,
        analyzer: Optional[AmbiguityAnalyzer] = None,
        merger: Optional[ContextMerger] = None,
        state_machine: Optional[ConversationStateMachine] = None,
        selector: Optional[ClarificationSelector] = None,
        health_monitor: Optional[ConversationHealthMonitor] = None,
    ):
        self.services = services
        self.config = config or services.config
        self.analyzer = analyzer or AmbiguityAnalyzer()
        self.merger = merger or ContextMerger()
        self.state_machine = state_machine or ConversationStateMachine(self.config)
        self.selector = selector or ClarificationSelector()
        self.health_monitor = health_monitor or ConversationHealthMonitor(self.config)
        self._in_flight: Set[str] = set()

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    def reconfigure(self, config: EngineConfig) -> None:
        """Swap the configuration used by every component for later turns."""
        self.config = config
        self.services.config = config
        self.state_machine.config = config
        self.health_monitor.config = config

    async def process_turn(
        self,
        message: str,
        context: Optional[ConversationContext] = None,
        turn_number: Optional[int] = None,
    ) -> TurnResult:
        """Process a free-form customer message."""
        conversation_id = context.conversation_id if context else None
        return await self._exclusive(
            conversation_id,
            lambda: self._process(message, context, turn_number),
        )

    async def process_clarification_answer(
        self,
        answer: str,
        question_asked: str,
        context: ConversationContext,
    ) -> ClarificationResult:
        """Process the customer's answer to one of the pending questions."""
        if context is None:
            raise StateInvariantViolation("A clarification answer needs an existing context")
        result = await self._exclusive(
            context.conversation_id,
            lambda: self._process(answer, context, None, question_asked=question_asked),
        )
        return ClarificationResult(
            response=result.response,
            updated_understanding=result.understanding,
            needs_more_clarification=result.needs_clarification,
            next_questions=result.clarification_questions,
            context=result.context,
            ready_for_recommendations=result.confidence.ready_to_recommend,
            resolved_ambiguity_type=result.context.clarification_history[-1].resolved_ambiguity_type,
            ambiguity_analysis=result.ambiguity_analysis,
            transition=result.transition,
            health=result.health,
            next_action=result.next_action,
            degraded=result.degraded,
        )

    async def _exclusive(
        self,
        conversation_id: Optional[str],
        run: Callable[[], Awaitable[ResultT]],
    ) -> ResultT:
        if conversation_id is not None:
            if conversation_id in self._in_flight:
                raise ConversationBusy(
                    f"Conversation {conversation_id} already has a turn in flight"
                )
            self._in_flight.add(conversation_id)
        try:
            return await asyncio.wait_for(run(), timeout=self.config.turn_timeout_seconds)
        except asyncio.TimeoutError:
            raise TurnTimeout(
                f"Turn for conversation {conversation_id or '<new>'} exceeded "
                f"{self.config.turn_timeout_seconds}s"
            )
        finally:
            if conversation_id is not None:
                self._in_flight.discard(conversation_id)

    async def _process(
        self,
        message: str,
        context: Optional[ConversationContext],
        turn_number: Optional[int],
        question_asked: Optional[str] = None,
    ) -> TurnResult:
        prior = context.current_understanding if context else None
        history = list(context.clarification_history) if context else []
        if question_asked is not None:
            history.append(ClarificationRecord(question=question_asked, answer=message))

        understanding, context_analysis, insights, degraded = await self._gather(
            message, prior, history
        )

        analysis = self.analyzer.analyze(understanding.ambiguities)

        clarification = None
        if question_asked is not None:
            resolved = None
            if not degraded:
                resolved = self._resolved_type(question_asked, context, understanding)
            clarification = ClarificationRecord(
                question=question_asked,
                answer=message,
                resolved_ambiguity_type=resolved,
            )

        merged = self.merger.merge(
            context, understanding, clarification=clarification, turn_number=turn_number
        )

        transition = self.state_machine.evaluate(
            merged.state,
            understanding,
            analysis.overall_ambiguity_score,
            new_ambiguity_types(merged.previous_understanding, understanding),
        )
        state = transition.to_state
        ready = ready_for_recommendations(understanding, self.config)

        questions = self._select(analysis, state, degraded)
        recorded = self.merger.record_turn(merged, state, questions)
        health = self.health_monitor.assess(recorded)

        if health.intervention == Intervention.HUMAN_HANDOFF:
            questions = []
            recorded = self.merger.record_turn(merged, state, questions)
        elif health.intervention == Intervention.SINGLE_MULTIPLE_CHOICE and not degraded:
            questions = self._single_question(analysis.ranked, health)
            recorded = self.merger.record_turn(merged, state, questions)

        next_action = self._next_action(health, questions, ready)
        response = compose_response(
            understanding, questions, state, ready,
            degraded=degraded, intervention=health.intervention,
        )

        logger.info(
            "Conversation %s turn %d: %s → %s, %d questions, next action %s%s",
            recorded.conversation_id, recorded.turn_number,
            transition.from_state.value, state.value, len(questions),
            next_action.value, " (degraded)" if degraded else "",
        )

        return TurnResult(
            response=response,
            understanding=understanding,
            needs_clarification=bool(questions),
            clarification_questions=questions,
            context=recorded,
            confidence=TurnConfidence(
                overall=understanding.confidence.overall,
                ready_to_recommend=ready,
            ),
            ambiguity_analysis=analysis,
            transition=transition,
            health=health,
            next_action=next_action,
            context_analysis=context_analysis,
            business_insights=insights,
            degraded=degraded,
        )

    async def _gather(
        self,
        message: str,
        prior: Optional[Understanding],
        history: List[ClarificationRecord],
    ):
        """Run the three analyses concurrently and join them."""
        extracted, context_analysis, insights = await asyncio.gather(
            self.services.extract_understanding(message, prior, history),
            self.services.analyze_context(message, prior),
            self.services.generate_insights(message, prior),
            return_exceptions=True,
        )

        for name, outcome in (("context analysis", context_analysis), ("insights", insights)):
            if isinstance(outcome, Exception):
                logger.warning("Dropping %s after unexpected error: %s", name, outcome)
        if isinstance(context_analysis, BaseException):
            context_analysis = None
        if isinstance(insights, BaseException):
            insights = None

        if isinstance(extracted, ExtractionFailure):
            logger.warning("Extraction exhausted its retries, degrading turn: %s", extracted)
            return self._fallback_understanding(prior), context_analysis, insights, True
        if isinstance(extracted, BaseException):
            raise extracted
        return extracted, context_analysis, insights, False

    def _fallback_understanding(self, prior: Optional[Understanding]) -> Understanding:
        floor = self.config.fallback_confidence
        if prior is not None:
            return prior.model_copy(update={
                "confidence": prior.confidence.model_copy(update={"overall": floor}),
            })
        return Understanding(
            primary_intent=IntentType.GENERAL_QUESTION,
            confidence=ConfidenceScores(
                overall=floor, intent=floor, context=floor, specifications=floor,
            ),
        )

    def _select(
        self,
        analysis: AmbiguityAnalysis,
        state: ConversationState,
        degraded: bool,
    ) -> List[ClarificationQuestion]:
        if degraded:
            return [self.selector.fallback_question(
                "Request could not be processed; asking the customer to restate it."
            )]
        if state != ConversationState.CLARIFICATION:
            return []
        if not analysis.ranked:
            # Low confidence without a specific ambiguity to ask about
            return [self.selector.fallback_question()]
        return self.selector.select(analysis.ranked, max_questions=self.config.max_questions)

    def _single_question(
        self, ranked: List[PrioritizedAmbiguity], health: ConversationHealth
    ) -> List[ClarificationQuestion]:
        """One forced multiple-choice question, about the looping subject when possible."""
        looping = health.looping_types[0] if health.looping_types else None
        focus = [entry for entry in ranked if entry.ambiguity.type == looping]
        return self.selector.select(
            focus or ranked, max_questions=1, force_multiple_choice=True
        )

    def _next_action(
        self,
        health: ConversationHealth,
        questions: List[ClarificationQuestion],
        ready: bool,
    ) -> NextAction:
        if health.intervention == Intervention.HUMAN_HANDOFF:
            return NextAction.ESCALATE
        if questions:
            return NextAction.ASK_CLARIFICATION
        if ready:
            return NextAction.PROVIDE_RECOMMENDATIONS
        return NextAction.WAIT_FOR_INPUT

    def _resolved_type(
        self,
        question_asked: str,
        context: ConversationContext,
        understanding: Understanding,
    ) -> Optional[AmbiguityType]:
        """
        Which ambiguity the answer resolved.

        The subject of the matched pending question if it is gone; otherwise
        the highest-priority previous ambiguity that disappeared.
        """
        remaining = set(understanding.ambiguity_types())
        question = match_pending_question(question_asked, context.pending_questions)
        if question is not None and question.ambiguity_type is not None:
            if question.ambiguity_type not in remaining:
                return question.ambiguity_type

        previous = self.analyzer.analyze(context.current_understanding.ambiguities)
        for entry in previous.ranked:
            if entry.ambiguity.type not in remaining:
                return entry.ambiguity.type
        return None
