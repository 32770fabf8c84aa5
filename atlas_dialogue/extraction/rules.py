"""
Rule-based extraction backends for the prototype.

Deterministic keyword and regex rules stand in for a language-model
extractor so the engine runs end to end without a model. They implement the
same protocols as a production backend and consult the static pattern tables.

The extractor owns carry-over: fields the new message does not mention are
taken from the prior understanding, and prior ambiguities stay open until the
new message resolves them.
"""

import re
from typing import Dict, List, Optional, Tuple

from atlas_dialogue.extraction.services import AnalysisServices
from atlas_dialogue.models.analysis import (
    BusinessInsights,
    ContextAnalysis,
    EventSignal,
    IndustrySignal,
    RecipientSignal,
    StrategicRecommendation,
)
from atlas_dialogue.models.clarification import ClarificationRecord
from atlas_dialogue.models.config import EngineConfig
from atlas_dialogue.models.patterns import (
    EVENT_PATTERNS,
    INDUSTRY_PATTERNS,
    RECIPIENT_PATTERNS,
    event_pattern,
    industry_pattern,
    recipient_pattern,
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

# Product keyword → broader category. Longer phrases first so they win.
PRODUCT_CATEGORIES: List[Tuple[str, str]] = [
    ("polo shirts", "apparel"),
    ("t-shirts", "apparel"),
    ("tote bags", "bags"),
    ("water bottles", "drinkware"),
    ("power banks", "tech accessories"),
    ("usb drives", "tech accessories"),
    ("gift sets", "gifts"),
    ("welcome kits", "kits"),
    ("shirts", "apparel"),
    ("hoodies", "apparel"),
    ("jackets", "apparel"),
    ("hats", "apparel"),
    ("caps", "apparel"),
    ("apparel", "apparel"),
    ("bags", "bags"),
    ("backpacks", "bags"),
    ("mugs", "drinkware"),
    ("tumblers", "drinkware"),
    ("drinkware", "drinkware"),
    ("pens", "writing instruments"),
    ("notebooks", "office supplies"),
    ("stickers", "print"),
    ("lanyards", "event accessories"),
    ("blankets", "home"),
    ("umbrellas", "outdoor"),
    ("keychains", "accessories"),
    ("giveaways", "giveaways"),
    ("gifts", "gifts"),
]

AMBIGUITY_TRIGGERS: Dict[AmbiguityType, List[str]] = {
    AmbiguityType.PRODUCT_CATEGORY: [
        "something", "items", "products", "things", "stuff", "merchandise", "swag",
    ],
    AmbiguityType.QUANTITY_SCOPE: ["some", "a few", "several", "bunch", "a lot", "lots"],
    AmbiguityType.BUDGET_INTERPRETATION: [
        "affordable", "cheap", "inexpensive", "budget-friendly", "cost-effective",
    ],
    AmbiguityType.TIMELINE_URGENCY: [
        "soon", "quickly", "asap", "rush", "urgent", "next week", "next month",
    ],
    AmbiguityType.QUALITY_EXPECTATION: [
        "nice", "good", "quality", "professional", "high-end", "decent", "premium",
    ],
    AmbiguityType.CUSTOMIZATION_EXTENT: [
        "custom", "customized", "branded", "logo", "personalized",
    ],
    AmbiguityType.RECIPIENT_SPECIFICATION: ["team", "people", "everyone", "group", "folks"],
}

QUALITY_TIERS = [
    "Executive gift level ($50+ per item)",
    "Professional quality ($15-30 per item)",
    "Good promotional quality ($5-15 per item)",
]
CUSTOMIZATION_OPTIONS = [
    "Logo imprint only",
    "Full custom design",
    "Individual personalization",
]
QUANTITY_RANGES = ["Under 50", "50-250", "250-1,000", "1,000+"]
TIMELINE_OPTIONS = ["Firm deadline", "Flexible target date"]
RELATIVE_BUDGET_OPTIONS = [
    "Under $5 per item",
    "$5-15 per item",
    "$15-30 per item",
    "$30+ per item",
]

DECORATIONS = [
    "embroidery", "embroidered", "screen print", "screen printed", "laser engraved",
    "engraved", "engraving", "debossed", "embossed", "full color", "heat transfer",
    "logo only", "one color", "single color", "pms", "full custom",
]
COLORS = [
    "navy blue", "navy", "black", "white", "red", "blue", "green", "grey", "gray",
    "yellow", "orange", "purple", "pink", "brown",
]
MATERIALS = [
    "organic cotton", "cotton", "polyester", "leather", "bamboo", "recycled",
    "eco-friendly", "stainless steel", "canvas",
]
TIER_WORDS = {"executive": QUALITY_TIERS[0], "professional": QUALITY_TIERS[1],
              "promotional": QUALITY_TIERS[2]}

CURRENCIES = {"$": "USD", "€": "EUR", "£": "GBP"}

_MONTH = (
    r"jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?"
)
DEADLINE_RE = re.compile(
    rf"\b(?:(?:{_MONTH})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?|\d{{4}}-\d{{2}}-\d{{2}}"
    rf"|\d{{1,2}}/\d{{1,2}}(?:/\d{{2,4}})?)\b",
    re.IGNORECASE,
)
BUDGET_RE = re.compile(
    r"([$€£])\s?(\d+(?:\.\d{1,2})?)|(\d+(?:\.\d{1,2})?)\s?(dollars|usd|euros?|eur)\b",
    re.IGNORECASE,
)
QUANTITY_RE = re.compile(
    r"(?<![$€£\d.,])\b(\d{1,3}(?:,\d{3})+|\d{1,6})\b"
    r"(?!\s*(?:%|days?|weeks?|months?|years?|hours?|am\b|pm\b|dollars|usd|euros?))"
)
PER_ITEM_RE = re.compile(
    r"\b(?:per|each|apiece|a piece)\b|/\s?(?:item|unit|piece|person|gift)", re.IGNORECASE
)
TOTAL_RE = re.compile(
    r"\b(?:total|overall|altogether|whole order|for everything)\b", re.IGNORECASE
)
APPROXIMATE_RE = re.compile(
    r"\b(?:under|around|about|roughly|up to|max(?:imum)?|approximately|less than)\b",
    re.IGNORECASE,
)
RUSH_WORDS = ["asap", "rush", "urgent", "urgently", "immediately", "quickly"]
FLEXIBLE_WORDS = ["no rush", "flexible", "whenever", "no deadline", "anytime"]
FIRM_WORDS = ["firm", "hard deadline", "must have", "at the latest", "no later than"]


def _has(text: str, phrase: str) -> bool:
    return re.search(rf"(?<![\w-]){re.escape(phrase)}(?![\w-])", text) is not None


def _matches(text: str, phrases: List[str]) -> List[str]:
    return [p for p in phrases if _has(text, p)]


def _best_match(text: str, table: dict, unknown):
    """Table key with the most keyword hits; ties keep table order."""
    best, best_hits = unknown, []
    for key, pattern in table.items():
        hits = _matches(text, pattern.keywords)
        if len(hits) > len(best_hits):
            best, best_hits = key, hits
    return best, best_hits


def _signal_confidence(hits: List[str]) -> float:
    return min(1.0, 0.5 + 0.2 * len(hits)) if hits else 0.2


class _Signals:
    """Everything the rules can read from one message."""

    def __init__(self, query: str):
        self.text = query.lower()
        self.industry, self.industry_hits = _best_match(
            self.text, INDUSTRY_PATTERNS, IndustryContext.UNKNOWN
        )
        self.event, self.event_hits = _best_match(
            self.text, EVENT_PATTERNS, EventType.UNKNOWN
        )
        self.recipient, self.recipient_hits = _best_match(
            self.text, RECIPIENT_PATTERNS, RecipientType.UNKNOWN
        )

        self.products = [(k, c) for k, c in PRODUCT_CATEGORIES if _has(self.text, k)]

        deadline = DEADLINE_RE.search(query)
        self.deadline = deadline.group(0) if deadline else None
        remainder = DEADLINE_RE.sub(" ", query)

        budget = BUDGET_RE.search(remainder)
        self.budget_amount = None
        self.currency = "USD"
        if budget:
            if budget.group(1):
                self.currency = CURRENCIES[budget.group(1)]
                self.budget_amount = float(budget.group(2))
            else:
                unit = budget.group(4).lower()
                self.currency = "EUR" if unit.startswith("eur") else "USD"
                self.budget_amount = float(budget.group(3))
            remainder = remainder[:budget.start()] + " " + remainder[budget.end():]

        quantity = QUANTITY_RE.search(remainder)
        self.quantity = int(quantity.group(1).replace(",", "")) if quantity else None

        self.budget_scope = None
        if PER_ITEM_RE.search(self.text):
            self.budget_scope = "per_item"
        elif TOTAL_RE.search(self.text):
            self.budget_scope = "total"

        self.flexible = bool(_matches(self.text, FLEXIBLE_WORDS))
        self.rush = bool(_matches(self.text, RUSH_WORDS)) and not _has(self.text, "no rush")
        self.firm = bool(_matches(self.text, FIRM_WORDS))

        self.colors = _matches(self.text, COLORS)
        self.materials = _matches(self.text, MATERIALS)
        self.decorations = _matches(self.text, DECORATIONS)
        self.tiers = [tier for word, tier in TIER_WORDS.items() if _has(self.text, word)]

    def triggers(self, ambiguity_type: AmbiguityType) -> List[str]:
        return _matches(self.text, AMBIGUITY_TRIGGERS.get(ambiguity_type, []))


class RuleBasedExtractor:
    """
    Deterministic UnderstandingExtractor.

    Produces a complete Understanding (including ambiguities with impact,
    urgency and evidence) from keyword and regex rules.
    """

    async def extract(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
        history: Optional[List[ClarificationRecord]] = None,
    ) -> Understanding:
        return self.extract_sync(query, prior_understanding)

    def extract_sync(
        self, query: str, prior: Optional[Understanding] = None
    ) -> Understanding:
        signals = _Signals(query)

        product_type = signals.products[0][0] if signals.products else None
        categories = sorted({c for _, c in signals.products})
        if prior is not None:
            product_type = product_type or prior.product_type
            categories = categories or list(prior.product_categories)

        industry = signals.industry
        event = signals.event
        recipient = signals.recipient
        if prior is not None:
            if industry == IndustryContext.UNKNOWN:
                industry = prior.industry_context
            if event == EventType.UNKNOWN:
                event = prior.event_type
            if recipient == RecipientType.UNKNOWN:
                recipient = prior.recipient_type
        if not categories and industry != IndustryContext.UNKNOWN:
            categories = list(industry_pattern(industry).preferred_products[:3])

        attributes = dict(prior.attributes) if prior is not None else {}
        if signals.colors:
            attributes["color"] = signals.colors[0]
        if signals.materials:
            attributes["material"] = signals.materials[0]
        if signals.decorations:
            attributes["decoration"] = signals.decorations[0]
        if signals.tiers:
            attributes["quality_tier"] = signals.tiers[0]
        if signals.budget_scope:
            attributes["budget_scope"] = signals.budget_scope
        if signals.firm or signals.flexible:
            attributes["timeline_firmness"] = "firm" if signals.firm else "flexible"

        quantity = signals.quantity
        if quantity is None and prior is not None:
            quantity = prior.quantity

        budget = self._budget(signals, prior)
        timeline = self._timeline(signals, prior)

        self._apply_chosen_interpretations(signals, prior, attributes)

        draft = dict(
            product_type=product_type,
            industry=industry,
            recipient=recipient,
            quantity=quantity,
            budget=budget,
            timeline=timeline,
            attributes=attributes,
        )
        ambiguities = self._ambiguities(signals, prior, draft)

        return Understanding(
            primary_intent=self._intent(signals, prior, product_type),
            product_type=product_type,
            product_categories=categories,
            industry_context=industry,
            event_type=event,
            recipient_type=recipient,
            attributes=attributes,
            quantity=quantity,
            budget=budget,
            timeline=timeline,
            ambiguities=ambiguities,
            confidence=self._confidence(
                product_type, industry, event, recipient, quantity,
                budget, timeline, ambiguities,
            ),
        )

    def _budget(self, signals: _Signals, prior: Optional[Understanding]) -> Optional[Budget]:
        if signals.budget_amount is None:
            if prior is not None and prior.budget is not None and signals.budget_scope:
                return prior.budget.model_copy(
                    update={"per_item": signals.budget_scope == "per_item"}
                )
            return prior.budget if prior is not None else None
        return Budget(
            amount=signals.budget_amount,
            per_item=signals.budget_scope == "per_item",
            currency=signals.currency,
            approximate=bool(APPROXIMATE_RE.search(signals.text)),
        )

    def _timeline(self, signals: _Signals, prior: Optional[Understanding]) -> Optional[Timeline]:
        previous = prior.timeline if prior is not None else None
        if not (signals.deadline or signals.rush or signals.flexible or signals.firm):
            return previous
        if signals.rush:
            urgency = TimelineUrgency.RUSH
        elif signals.flexible:
            urgency = TimelineUrgency.FLEXIBLE
        else:
            urgency = previous.urgency if previous else TimelineUrgency.STANDARD
        return Timeline(
            deadline=signals.deadline or (previous.deadline if previous else None),
            urgency=urgency,
            flexible=not (signals.firm or signals.rush),
        )

    def _apply_chosen_interpretations(
        self, signals: _Signals, prior: Optional[Understanding], attributes: dict
    ) -> None:
        """Record an answer that names one of a prior ambiguity's interpretations."""
        if prior is None:
            return
        for ambiguity in prior.ambiguities:
            for option in ambiguity.possible_interpretations:
                key_phrase = option.split(" (")[0].lower()
                if key_phrase and key_phrase in signals.text:
                    attributes[ambiguity.type.value] = option
                    break

    def _resolved(self, ambiguity_type: AmbiguityType, draft: dict) -> bool:
        attributes = draft["attributes"]
        if ambiguity_type.value in attributes:
            return True
        if ambiguity_type == AmbiguityType.PRODUCT_CATEGORY:
            return draft["product_type"] is not None
        if ambiguity_type == AmbiguityType.QUANTITY_SCOPE:
            return draft["quantity"] is not None
        if ambiguity_type == AmbiguityType.BUDGET_INTERPRETATION:
            budget = draft["budget"]
            return (
                budget is not None
                and budget.amount is not None
                and "budget_scope" in attributes
            )
        if ambiguity_type == AmbiguityType.TIMELINE_URGENCY:
            timeline = draft["timeline"]
            return timeline is not None and (
                timeline.deadline is not None or "timeline_firmness" in attributes
            )
        if ambiguity_type == AmbiguityType.QUALITY_EXPECTATION:
            return "quality_tier" in attributes
        if ambiguity_type == AmbiguityType.CUSTOMIZATION_EXTENT:
            return "decoration" in attributes
        if ambiguity_type == AmbiguityType.RECIPIENT_SPECIFICATION:
            return draft["recipient"] != RecipientType.UNKNOWN and draft["quantity"] is not None
        return False

    def _ambiguities(
        self, signals: _Signals, prior: Optional[Understanding], draft: dict
    ) -> List[Ambiguity]:
        detected: List[Ambiguity] = []
        carried = {a.type: a for a in prior.ambiguities} if prior is not None else {}

        for ambiguity_type in AMBIGUITY_TRIGGERS:
            if self._resolved(ambiguity_type, draft):
                continue
            fresh = self._detect(ambiguity_type, signals, draft)
            ambiguity = fresh or carried.get(ambiguity_type)
            if ambiguity is not None:
                detected.append(ambiguity)
        return detected

    def _detect(
        self, ambiguity_type: AmbiguityType, signals: _Signals, draft: dict
    ) -> Optional[Ambiguity]:
        evidence = signals.triggers(ambiguity_type)

        if ambiguity_type == AmbiguityType.BUDGET_INTERPRETATION:
            if signals.budget_amount is not None and not signals.budget_scope:
                amount = f"{signals.budget_amount:g}"
                symbol = {"USD": "$", "EUR": "€", "GBP": "£"}.get(signals.currency, "")
                return Ambiguity(
                    type=ambiguity_type,
                    description=f"Unclear whether {symbol}{amount} is per item or the total budget",
                    possible_interpretations=[
                        f"{symbol}{amount} per item",
                        f"{symbol}{amount} total budget",
                    ],
                    confidence=0.85,
                    impact=Impact.HIGH,
                    resolution_urgency=ResolutionUrgency.CRITICAL,
                    evidence=[f"{symbol}{amount}"],
                )
            if evidence and signals.budget_amount is None:
                return Ambiguity(
                    type=ambiguity_type,
                    description="Relative budget term without an amount",
                    possible_interpretations=list(RELATIVE_BUDGET_OPTIONS),
                    confidence=0.7,
                    impact=Impact.MEDIUM,
                    resolution_urgency=ResolutionUrgency.IMPORTANT,
                    evidence=evidence,
                )
            return None

        if ambiguity_type == AmbiguityType.PRODUCT_CATEGORY:
            if draft["product_type"] is None and evidence:
                suggestions = []
                if draft["industry"] != IndustryContext.UNKNOWN:
                    suggestions = industry_pattern(draft["industry"]).preferred_products
                return Ambiguity(
                    type=ambiguity_type,
                    description="The type of product is not specified",
                    possible_interpretations=list(suggestions[:4]),
                    confidence=0.8,
                    impact=Impact.HIGH,
                    resolution_urgency=ResolutionUrgency.CRITICAL,
                    evidence=evidence,
                )
            return None

        if ambiguity_type == AmbiguityType.QUANTITY_SCOPE:
            if evidence:
                return Ambiguity(
                    type=ambiguity_type,
                    description="Vague quantity with no number given",
                    possible_interpretations=list(QUANTITY_RANGES),
                    confidence=0.8,
                    impact=Impact.MEDIUM,
                    resolution_urgency=ResolutionUrgency.IMPORTANT,
                    evidence=evidence,
                )
            return None

        if ambiguity_type == AmbiguityType.TIMELINE_URGENCY:
            if evidence and not signals.deadline:
                return Ambiguity(
                    type=ambiguity_type,
                    description="Timing is vague and its flexibility unknown",
                    possible_interpretations=list(TIMELINE_OPTIONS),
                    confidence=0.7,
                    impact=Impact.MEDIUM,
                    resolution_urgency=ResolutionUrgency.IMPORTANT,
                    evidence=evidence,
                )
            return None

        if ambiguity_type == AmbiguityType.QUALITY_EXPECTATION:
            if evidence:
                return Ambiguity(
                    type=ambiguity_type,
                    description="Subjective quality expectation",
                    possible_interpretations=list(QUALITY_TIERS),
                    confidence=0.6,
                    impact=Impact.MEDIUM,
                    resolution_urgency=ResolutionUrgency.HELPFUL,
                    evidence=evidence,
                )
            return None

        if ambiguity_type == AmbiguityType.CUSTOMIZATION_EXTENT:
            if evidence:
                return Ambiguity(
                    type=ambiguity_type,
                    description="Extent of customization is unclear",
                    possible_interpretations=list(CUSTOMIZATION_OPTIONS),
                    confidence=0.6,
                    impact=Impact.MEDIUM,
                    resolution_urgency=ResolutionUrgency.HELPFUL,
                    evidence=evidence,
                )
            return None

        if ambiguity_type == AmbiguityType.RECIPIENT_SPECIFICATION:
            if evidence:
                return Ambiguity(
                    type=ambiguity_type,
                    description="Recipient group size and roles are unclear",
                    possible_interpretations=[],
                    confidence=0.6,
                    impact=Impact.LOW,
                    resolution_urgency=ResolutionUrgency.HELPFUL,
                    evidence=evidence,
                )
            return None

        return None

    def _intent(
        self, signals: _Signals, prior: Optional[Understanding], product_type: Optional[str]
    ) -> IntentType:
        text = signals.text
        if _matches(text, ["compare", "versus", "vs", "difference between"]):
            return IntentType.COMPARISON_REQUEST
        if _matches(text, ["place an order", "checkout", "reorder", "order status"]):
            return IntentType.ORDER_PROCESS
        if signals.products or signals.triggers(AmbiguityType.PRODUCT_CATEGORY):
            return IntentType.PRODUCT_SEARCH
        if prior is not None:
            return prior.primary_intent
        if signals.decorations:
            return IntentType.CUSTOMIZATION_DETAILS
        if signals.budget_amount is not None or _matches(text, ["budget", "price", "cost"]):
            return IntentType.BUDGET_DISCUSSION
        if signals.deadline or signals.rush:
            return IntentType.TIMELINE_PLANNING
        if product_type:
            return IntentType.PRODUCT_SEARCH
        return IntentType.GENERAL_QUESTION

    def _confidence(
        self, product_type, industry, event, recipient, quantity, budget, timeline,
        ambiguities: List[Ambiguity],
    ) -> ConfidenceScores:
        intent = 0.9 if product_type else 0.6
        known = [
            industry != IndustryContext.UNKNOWN,
            event != EventType.UNKNOWN,
            recipient != RecipientType.UNKNOWN,
        ]
        context = 0.4 + 0.2 * sum(known)
        slots = [product_type is not None, quantity is not None,
                 budget is not None, timeline is not None]
        specifications = 0.2 + 0.8 * (sum(slots) / len(slots))
        overall = (intent + context + specifications) / 3 - 0.05 * len(ambiguities)
        return ConfidenceScores(
            overall=round(max(0.0, min(1.0, overall)), 2),
            intent=round(intent, 2),
            context=round(min(1.0, context), 2),
            specifications=round(specifications, 2),
        )


class RuleBasedContextAnalyzer:
    """ContextAnalyzer over the static pattern tables."""

    async def analyze_context(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
    ) -> ContextAnalysis:
        signals = _Signals(query)
        industry, event, recipient = signals.industry, signals.event, signals.recipient
        industry_hits, event_hits, recipient_hits = (
            signals.industry_hits, signals.event_hits, signals.recipient_hits
        )
        if prior_understanding is not None:
            if industry == IndustryContext.UNKNOWN:
                industry = prior_understanding.industry_context
            if event == EventType.UNKNOWN:
                event = prior_understanding.event_type
            if recipient == RecipientType.UNKNOWN:
                recipient = prior_understanding.recipient_type

        return ContextAnalysis(
            industry=IndustrySignal(
                detected=industry,
                confidence=self._confidence(industry, industry_hits, IndustryContext.UNKNOWN),
                indicators=industry_hits,
                implications=industry_pattern(industry),
            ),
            event=EventSignal(
                detected=event,
                confidence=self._confidence(event, event_hits, EventType.UNKNOWN),
                indicators=event_hits,
                implications=event_pattern(event),
            ),
            recipient=RecipientSignal(
                detected=recipient,
                confidence=self._confidence(recipient, recipient_hits, RecipientType.UNKNOWN),
                indicators=recipient_hits,
                implications=recipient_pattern(recipient),
            ),
        )

    def _confidence(self, detected, hits: List[str], unknown) -> float:
        if detected == unknown:
            return 0.2
        # Carried over from the prior turn without fresh evidence
        return _signal_confidence(hits) if hits else 0.6


class RuleBasedInsightGenerator:
    """InsightGenerator built from pattern-table implications."""

    async def generate_insights(
        self,
        query: str,
        prior_understanding: Optional[Understanding] = None,
    ) -> BusinessInsights:
        signals = _Signals(query)
        industry = signals.industry
        event = signals.event
        if prior_understanding is not None:
            if industry == IndustryContext.UNKNOWN:
                industry = prior_understanding.industry_context
            if event == EventType.UNKNOWN:
                event = prior_understanding.event_type

        industry_info = industry_pattern(industry)
        event_info = event_pattern(event)

        recommendations = [
            StrategicRecommendation(
                category="product_selection",
                recommendation=f"Lead with {', '.join(industry_info.preferred_products[:2])}",
                reasoning=f"Fits {industry.value.replace('_', ' ')} expectations: "
                          f"{industry_info.quality_expectations}",
            ),
        ]
        if event != EventType.UNKNOWN:
            recommendations.append(StrategicRecommendation(
                category="event_fit",
                recommendation=f"Prioritize {', '.join(event_info.considerations)}",
                reasoning=f"{event.value.replace('_', ' ')} orders are usually "
                          f"{event_info.quantity_pattern}",
            ))

        concerns = []
        if event_info.urgent_need and not signals.deadline:
            concerns.append("Event has a fixed date but no deadline was given")
        if signals.rush:
            concerns.append("Rush production limits decoration options")

        return BusinessInsights(
            recommendations=recommendations,
            concerns=concerns,
            best_practices=[f"Typical uses: {', '.join(industry_info.common_uses)}"],
        )


def rule_based_services(config: Optional[EngineConfig] = None) -> AnalysisServices:
    """AnalysisServices wired to the deterministic rule-based backends."""
    return AnalysisServices(
        extractor=RuleBasedExtractor(),
        context_analyzer=RuleBasedContextAnalyzer(),
        insight_generator=RuleBasedInsightGenerator(),
        config=config,
    )
