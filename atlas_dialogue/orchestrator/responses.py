"""Customer-facing reply text for a processed turn."""

from typing import List, Optional

from atlas_dialogue.models.clarification import ClarificationQuestion, QuestionType
from atlas_dialogue.models.conversation import ConversationState, Intervention
from atlas_dialogue.models.understanding import IndustryContext, Understanding

HANDOFF_REPLY = (
    "I want to make sure you get exactly the right products. Would you like me "
    "to connect you with one of our product specialists?"
)
DEGRADED_REPLY = (
    "Sorry, I couldn't fully process that just now."
)


def summarize(understanding: Understanding) -> str:
    """One-sentence restatement of what has been understood so far."""
    parts = []
    if understanding.quantity is not None:
        parts.append(f"{understanding.quantity:,}")
    parts.append(understanding.product_type or "promotional products")
    if understanding.industry_context != IndustryContext.UNKNOWN:
        parts.append(f"for a {understanding.industry_context.value.replace('_', ' ')} organization")

    budget = understanding.budget
    if budget is not None and budget.amount is not None:
        scope = "per item" if budget.per_item else "total"
        prefix = "about " if budget.approximate else ""
        parts.append(f"with a budget of {prefix}{budget.amount:g} {budget.currency} {scope}")

    timeline = understanding.timeline
    if timeline is not None and timeline.deadline:
        parts.append(f"by {timeline.deadline}")

    return " ".join(parts)


def _format_question(question: ClarificationQuestion) -> str:
    if question.type == QuestionType.MULTIPLE_CHOICE and question.options:
        options = "; ".join(question.options)
        return f"{question.question} ({options})"
    return question.question


def compose_response(
    understanding: Understanding,
    questions: List[ClarificationQuestion],
    state: ConversationState,
    ready: bool,
    degraded: bool = False,
    intervention: Optional[Intervention] = None,
) -> str:
    if intervention == Intervention.HUMAN_HANDOFF:
        return HANDOFF_REPLY

    lines: List[str] = []
    if degraded:
        lines.append(DEGRADED_REPLY)
    elif ready:
        return (
            f"Great, I have what I need: {summarize(understanding)}. "
            "Here are my recommendations."
        )
    elif state == ConversationState.CONFIRMATION:
        lines.append(
            f"Just to confirm, you're looking for {summarize(understanding)}. "
            "Is that right?"
        )
    else:
        lines.append(f"Thanks! So far I understand you need {summarize(understanding)}.")

    if len(questions) == 1:
        lines.append(_format_question(questions[0]))
    elif questions:
        lines.append("A few quick questions:")
        lines.extend(
            f"{i}. {_format_question(q)}" for i, q in enumerate(questions, start=1)
        )
    return "\n".join(lines)
