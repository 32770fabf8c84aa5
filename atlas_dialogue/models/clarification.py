"""Clarification questions and the question/answer history."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from atlas_dialogue.models.understanding import AmbiguityType


class QuestionType(str, Enum):
    OPEN_ENDED = "open_ended"
    MULTIPLE_CHOICE = "multiple_choice"
    YES_NO = "yes_no"
    RANGE = "range"


class QuestionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ClarificationQuestion(BaseModel):
    """A question put to the customer to resolve one ambiguity."""

    question: str = Field(min_length=1)
    type: QuestionType
    options: Optional[List[str]] = None         # Only for multiple_choice
    priority: QuestionPriority
    reasoning: str = Field(min_length=1)
    ambiguity_type: Optional[AmbiguityType] = None

    @model_validator(mode="after")
    def _options_only_for_multiple_choice(self) -> "ClarificationQuestion":
        if self.options is not None and self.type != QuestionType.MULTIPLE_CHOICE:
            raise ValueError(
                f"options are only allowed on multiple_choice questions, "
                f"not {self.type.value}"
            )
        return self


class ClarificationRecord(BaseModel):
    """One answered question. History entries are append-only."""

    question: str
    answer: str
    resolved_ambiguity_type: Optional[AmbiguityType] = None
