"""Turn results returned to callers of the orchestrator."""

from typing import List, Optional

from pydantic import BaseModel, Field

from atlas_dialogue.models.analysis import (
    AmbiguityAnalysis,
    BusinessInsights,
    ContextAnalysis,
    StateTransition,
)
from atlas_dialogue.models.clarification import ClarificationQuestion
from atlas_dialogue.models.conversation import (
    ConversationContext,
    ConversationHealth,
    NextAction,
)
from atlas_dialogue.models.understanding import AmbiguityType, Understanding


class TurnConfidence(BaseModel):
    overall: float = Field(ge=0.0, le=1.0)
    ready_to_recommend: bool


class TurnResult(BaseModel):
    """Output of `process_turn`."""

    response: str
    understanding: Understanding
    needs_clarification: bool
    clarification_questions: List[ClarificationQuestion] = []
    context: ConversationContext
    confidence: TurnConfidence
    ambiguity_analysis: AmbiguityAnalysis
    transition: StateTransition
    health: ConversationHealth
    next_action: NextAction
    context_analysis: Optional[ContextAnalysis] = None
    business_insights: Optional[BusinessInsights] = None
    degraded: bool = False          # Extraction exhausted its retries


class ClarificationResult(BaseModel):
    """Output of `process_clarification_answer`."""

    response: str
    updated_understanding: Understanding
    needs_more_clarification: bool
    next_questions: List[ClarificationQuestion] = []
    context: ConversationContext
    ready_for_recommendations: bool
    resolved_ambiguity_type: Optional[AmbiguityType] = None
    ambiguity_analysis: AmbiguityAnalysis
    transition: StateTransition
    health: ConversationHealth
    next_action: NextAction
    degraded: bool = False
