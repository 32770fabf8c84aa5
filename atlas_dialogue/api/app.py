"""
Atlas Dialogue API — FastAPI endpoints.

Stateless HTTP adapter over the orchestrator. The conversation context
travels in the request and response bodies; the service keeps none.
- Conversation turns and clarification answers
- Health assessment and metrics of a stored context
- Engine configuration
"""

from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from atlas_dialogue.clarification.selector import FALLBACK_QUESTION
from atlas_dialogue.errors import (
    ConversationBusy,
    DialogueError,
    StateInvariantViolation,
    TurnTimeout,
    ValidationFailure,
)
from atlas_dialogue.extraction.rules import rule_based_services
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.conversation import ConversationContext
from atlas_dialogue.orchestrator.conversation import ConversationOrchestrator


# --- Request Models ---

class TurnRequest(BaseModel):
    message: str = Field(min_length=1)
    context: Optional[ConversationContext] = None
    turn_number: Optional[int] = None


class ClarificationAnswerRequest(BaseModel):
    answer: str = Field(min_length=1)
    question_asked: str = Field(min_length=1)
    context: ConversationContext


class StoredContextRequest(BaseModel):
    context: ConversationContext


def _to_http(error: DialogueError) -> HTTPException:
    """Map an engine error onto an HTTP status."""
    detail = {
        "error": type(error).__name__,
        "message": str(error),
        "recoverable": error.recoverable,
    }
    if isinstance(error, ValidationFailure):
        detail["prompt"] = FALLBACK_QUESTION
        return HTTPException(422, detail)
    if isinstance(error, (StateInvariantViolation, ConversationBusy)):
        return HTTPException(409, detail)
    if isinstance(error, TurnTimeout):
        return HTTPException(504, detail)
    return HTTPException(502, detail)


# --- Application Factory ---

def create_app(
    orchestrator: Optional[ConversationOrchestrator] = None,
    config: Optional[EngineConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Atlas Dialogue API",
        description="Multi-turn clarification engine for promotional product requests",
        version="0.1.0",
    )

    if orchestrator is None:
        engine_config = config or EngineConfig()
        orchestrator = ConversationOrchestrator(
            rule_based_services(engine_config), config=engine_config
        )
    elif config is not None:
        orchestrator.reconfigure(config)

    app.state.orchestrator = orchestrator

    # === CONVERSATIONS ===

    @app.post("/conversations/turns")
    async def process_turn(req: TurnRequest):
        """Process a customer message, starting a conversation when no context is sent."""
        try:
            result = await orchestrator.process_turn(
                req.message, context=req.context, turn_number=req.turn_number
            )
        except DialogueError as e:
            raise _to_http(e)
        return result.model_dump(mode="json")

    @app.post("/conversations/clarifications")
    async def process_clarification(req: ClarificationAnswerRequest):
        """Process the answer to a pending clarification question."""
        try:
            result = await orchestrator.process_clarification_answer(
                req.answer, req.question_asked, req.context
            )
        except DialogueError as e:
            raise _to_http(e)
        return result.model_dump(mode="json")

    @app.post("/conversations/health")
    def assess_health(req: StoredContextRequest):
        """Health verdict for a stored context."""
        health = orchestrator.health_monitor.assess(req.context)
        return health.model_dump(mode="json")

    @app.post("/conversations/metrics")
    def conversation_metrics(req: StoredContextRequest):
        """Outcome metrics for a stored context."""
        metrics = orchestrator.health_monitor.metrics(req.context)
        return metrics.model_dump(mode="json")

    # === CONFIGURATION ===

    @app.get("/config")
    def get_config():
        return orchestrator.config.model_dump()

    @app.put("/config")
    def update_config(new_config: EngineConfig):
        """Replace the engine configuration for subsequent turns."""
        orchestrator.reconfigure(new_config)
        return new_config.model_dump()

    # === SYSTEM ===

    @app.get("/health")
    def health_check():
        return {"status": "ok", "in_flight": orchestrator.in_flight_count}

    return app


# Default application instance
app = create_app()
