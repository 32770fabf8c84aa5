"""Engine configuration."""

from pydantic import BaseModel, Field, model_validator


class EngineConfig(BaseModel):
    """Thresholds and budgets for the decision layer."""

    ambiguity_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    clarification_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    ready_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    max_questions: int = Field(default=3, ge=0)
    stuck_turn_ceiling: int = Field(default=6, ge=1)

    # Progress score weights (confidence delta, ambiguity-count delta)
    progress_confidence_weight: float = Field(default=0.5, ge=0.0)
    progress_ambiguity_weight: float = Field(default=0.5, ge=0.0)

    # External extraction calls
    extraction_max_attempts: int = Field(default=3, ge=1)
    validation_retries: int = Field(default=1, ge=0)
    extraction_timeout_seconds: float = Field(default=5.0, gt=0.0)
    backoff_initial_seconds: float = Field(default=0.5, ge=0.0)
    backoff_max_seconds: float = Field(default=4.0, ge=0.0)
    turn_timeout_seconds: float = Field(default=60.0, gt=0.0)

    # Degraded turns
    fallback_confidence: float = Field(default=0.2, ge=0.0, le=1.0)

    def extraction_budget_seconds(self) -> float:
        """Worst-case time for extraction to give up, every retry and backoff included."""
        per_pass = (
            self.extraction_max_attempts * self.extraction_timeout_seconds
            + (self.extraction_max_attempts - 1) * self.backoff_max_seconds
        )
        return (self.validation_retries + 1) * per_pass

    @model_validator(mode="after")
    def _turn_outlasts_extraction(self) -> "EngineConfig":
        # A turn that times out first can never reach the degraded path
        budget = self.extraction_budget_seconds()
        if self.turn_timeout_seconds <= budget:
            raise ValueError(
                f"turn_timeout_seconds ({self.turn_timeout_seconds}) must exceed the "
                f"extraction budget of {budget}s"
            )
        return self
