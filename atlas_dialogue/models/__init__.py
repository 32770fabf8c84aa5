"""Atlas dialogue engine data models."""

from atlas_dialogue.models.analysis import (
    AmbiguityAnalysis,
    BusinessInsights,
    ContextAnalysis,
    EventSignal,
    IndustrySignal,
    PrioritizedAmbiguity,
    RecipientSignal,
    StateTransition,
    StrategicRecommendation,
)
from atlas_dialogue.models.clarification import (
    ClarificationQuestion,
    ClarificationRecord,
    QuestionPriority,
    QuestionType,
)
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.conversation import (
    ConversationContext,
    ConversationHealth,
    ConversationMetrics,
    ConversationState,
    Intervention,
    NextAction,
    TurnSnapshot,
)
from atlas_dialogue.models.results import (
    ClarificationResult,
    TurnConfidence,
    TurnResult,
)
from atlas_dialogue.models.understanding import (
    Ambiguity,
    AmbiguityType,
    Budget,
    ConfidenceScores,
    EventType,
    Impact,
    IndustryContext,
    IntentType,
    RecipientType,
    ResolutionUrgency,
    Timeline,
    TimelineUrgency,
    Understanding,
)

__all__ = [
    "Ambiguity",
    "AmbiguityAnalysis",
    "AmbiguityType",
    "Budget",
    "BusinessInsights",
    "ClarificationQuestion",
    "ClarificationRecord",
    "ClarificationResult",
    "ConfidenceScores",
    "ContextAnalysis",
    "ConversationContext",
    "ConversationHealth",
    "ConversationMetrics",
    "ConversationState",
    "EngineConfig",
    "EventSignal",
    "EventType",
    "Impact",
    "IndustryContext",
    "IndustrySignal",
    "IntentType",
    "Intervention",
    "NextAction",
    "PrioritizedAmbiguity",
    "QuestionPriority",
    "QuestionType",
    "RecipientSignal",
    "RecipientType",
    "ResolutionUrgency",
    "StateTransition",
    "StrategicRecommendation",
    "Timeline",
    "TimelineUrgency",
    "TurnConfidence",
    "TurnResult",
    "TurnSnapshot",
    "Understanding",
]
