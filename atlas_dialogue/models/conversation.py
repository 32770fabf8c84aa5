"""Conversation Context — the value handed to and returned from every turn."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from atlas_dialogue.models.clarification import (
    ClarificationQuestion,
    ClarificationRecord,
    QuestionType,
)
from atlas_dialogue.models.understanding import AmbiguityType, Understanding


class ConversationState(str, Enum):
    DISCOVERY = "discovery"
    CLARIFICATION = "clarification"
    CONFIRMATION = "confirmation"
    SPECIFICATION = "specification"


class NextAction(str, Enum):
    WAIT_FOR_INPUT = "wait_for_input"
    ASK_CLARIFICATION = "ask_clarification"
    PROVIDE_RECOMMENDATIONS = "provide_recommendations"
    ESCALATE = "escalate"           # Terminal outcome outside the state set


class Intervention(str, Enum):
    SINGLE_MULTIPLE_CHOICE = "single_multiple_choice"
    HUMAN_HANDOFF = "human_handoff"


class TurnSnapshot(BaseModel):
    """What one processed turn looked like, kept for health monitoring."""

    turn_number: int = Field(ge=1)
    state: ConversationState
    ambiguity_types: List[AmbiguityType] = []
    asked_types: List[AmbiguityType] = []       # Subjects of questions asked this turn
    confidence: float = Field(ge=0.0, le=1.0)
    ambiguity_count: int = Field(ge=0)


class ConversationContext(BaseModel):
    """
    Turn-numbered conversation state.

    Frozen: each turn produces a new context. Storage is the caller's job;
    the engine never keeps contexts between calls.
    """

    model_config = ConfigDict(frozen=True)

    conversation_id: str = Field(min_length=1)
    turn_number: int = Field(ge=1)
    previous_understanding: Optional[Understanding] = None
    current_understanding: Understanding
    clarification_history: List[ClarificationRecord] = []
    user_preferences: Dict[str, Any] = {}
    state: ConversationState = ConversationState.DISCOVERY
    pending_questions: List[ClarificationQuestion] = []
    turn_log: List[TurnSnapshot] = []


class ConversationHealth(BaseModel):
    """Health Monitor verdict for the latest turn."""

    progress_score: float = Field(ge=0.0, le=1.0)
    stuck_indicator: bool = False
    recommended_intervention: Optional[str] = None
    intervention: Optional[Intervention] = None
    looping_types: List[AmbiguityType] = []


class ConversationMetrics(BaseModel):
    """Outcome summary of a conversation, derived from its turn log and history."""

    conversation_id: str
    total_turns: int = Field(ge=1)
    clarification_turns: int = Field(ge=0)
    targeted_questions: int = Field(ge=0)       # Questions about a specific ambiguity
    resolved_clarifications: int = Field(ge=0)
    successful_resolution: bool = False         # Reached confirmation at some point
    final_confidence_score: float = Field(ge=0.0, le=1.0)
    pattern_frequency: Dict[AmbiguityType, int] = {}    # Turns each type was present in
    preferred_question_types: List[QuestionType] = []   # Most resolutions first
    improvement_areas: List[AmbiguityType] = []         # Asked about in more than one turn
