"""Intermediate analysis records produced during a turn."""

from typing import List

from pydantic import BaseModel, Field

from atlas_dialogue.models.conversation import ConversationState
from atlas_dialogue.models.patterns import (
    EventPattern,
    IndustryPattern,
    RecipientPattern,
)
from atlas_dialogue.models.understanding import (
    Ambiguity,
    EventType,
    IndustryContext,
    RecipientType,
)


class PrioritizedAmbiguity(BaseModel):
    """An ambiguity with its clarification priority score (0-90)."""

    ambiguity: Ambiguity
    priority: float = Field(ge=0.0, le=90.0)
    reasoning: str


class AmbiguityAnalysis(BaseModel):
    ranked: List[PrioritizedAmbiguity] = []
    overall_ambiguity_score: float = Field(ge=0.0, le=1.0, default=0.0)


class StateTransition(BaseModel):
    """Result of one state machine evaluation. `path` lists every state entered."""

    from_state: ConversationState
    to_state: ConversationState
    path: List[ConversationState] = []
    reason: str


class IndustrySignal(BaseModel):
    detected: IndustryContext
    confidence: float = Field(ge=0.0, le=1.0)
    indicators: List[str] = []
    implications: IndustryPattern


class EventSignal(BaseModel):
    detected: EventType
    confidence: float = Field(ge=0.0, le=1.0)
    indicators: List[str] = []
    implications: EventPattern


class RecipientSignal(BaseModel):
    detected: RecipientType
    confidence: float = Field(ge=0.0, le=1.0)
    indicators: List[str] = []
    implications: RecipientPattern


class ContextAnalysis(BaseModel):
    """Industry, event and recipient context detected for a query."""

    industry: IndustrySignal
    event: EventSignal
    recipient: RecipientSignal


class StrategicRecommendation(BaseModel):
    category: str
    recommendation: str
    reasoning: str


class BusinessInsights(BaseModel):
    recommendations: List[StrategicRecommendation] = []
    concerns: List[str] = []
    best_practices: List[str] = []
