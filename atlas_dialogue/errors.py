"""
Error taxonomy for the dialogue engine.

Callers distinguish "ask the user something" (recoverable errors, degraded
turns) from "this conversation's state is corrupted" (StateInvariantViolation).
"""

from typing import Optional


class DialogueError(Exception):
    """Base class for all engine errors."""

    recoverable = False


class ExtractionFailure(DialogueError):
    """The extraction service failed, timed out, or returned a non-record."""

    recoverable = True


class ValidationFailure(DialogueError):
    """Extractor output violates the Understanding/Ambiguity schema."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class StateInvariantViolation(DialogueError):
    """Turn numbering, conversation id or state edge invariant broken."""


class TurnTimeout(DialogueError):
    """The turn did not finish in time. The input context is untouched."""

    recoverable = True


class ConversationBusy(DialogueError):
    """A turn for this conversation is already in flight."""

    recoverable = True
