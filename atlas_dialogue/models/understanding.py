"""Understanding — the structured interpretation of a customer request."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StrictModel(BaseModel):
    """Base for records crossing the extraction boundary. Unknown keys are errors."""

    model_config = ConfigDict(extra="forbid")


class IntentType(str, Enum):
    PRODUCT_SEARCH = "product_search"
    SPECIFICATION_INQUIRY = "specification_inquiry"
    BUDGET_DISCUSSION = "budget_discussion"
    TIMELINE_PLANNING = "timeline_planning"
    COMPARISON_REQUEST = "comparison_request"
    CUSTOMIZATION_DETAILS = "customization_details"
    ORDER_PROCESS = "order_process"
    GENERAL_QUESTION = "general_question"


class IndustryContext(str, Enum):
    TECHNOLOGY = "technology"
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    EDUCATION = "education"
    NON_PROFIT = "non_profit"
    RETAIL = "retail"
    MANUFACTURING = "manufacturing"
    HOSPITALITY = "hospitality"
    LEGAL = "legal"
    CREATIVE_AGENCY = "creative_agency"
    CONSTRUCTION = "construction"
    AUTOMOTIVE = "automotive"
    REAL_ESTATE = "real_estate"
    UNKNOWN = "unknown"


class EventType(str, Enum):
    TRADE_SHOW = "trade_show"
    CONFERENCE = "conference"
    EMPLOYEE_ONBOARDING = "employee_onboarding"
    CLIENT_APPRECIATION = "client_appreciation"
    PRODUCT_LAUNCH = "product_launch"
    COMPANY_ANNIVERSARY = "company_anniversary"
    HOLIDAY_GIFTS = "holiday_gifts"
    FUNDRAISING = "fundraising"
    RECRUITMENT = "recruitment"
    BRAND_AWARENESS = "brand_awareness"
    UNKNOWN = "unknown"


class RecipientType(str, Enum):
    EMPLOYEES = "employees"
    CLIENTS = "clients"
    PROSPECTS = "prospects"
    EVENT_ATTENDEES = "event_attendees"
    GENERAL_PUBLIC = "general_public"
    PARTNERS = "partners"
    VENDORS = "vendors"
    UNKNOWN = "unknown"


class AmbiguityType(str, Enum):
    PRODUCT_CATEGORY = "product_category"
    QUANTITY_SCOPE = "quantity_scope"
    BUDGET_INTERPRETATION = "budget_interpretation"
    TIMELINE_URGENCY = "timeline_urgency"
    QUALITY_EXPECTATION = "quality_expectation"
    CUSTOMIZATION_EXTENT = "customization_extent"
    RECIPIENT_SPECIFICATION = "recipient_specification"
    NONE = "none"


class Impact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ResolutionUrgency(str, Enum):
    CRITICAL = "critical"     # Recommendations would likely be wrong without it
    IMPORTANT = "important"
    HELPFUL = "helpful"


class TimelineUrgency(str, Enum):
    RUSH = "rush"
    STANDARD = "standard"
    FLEXIBLE = "flexible"


class Ambiguity(StrictModel):
    """A detected unclear aspect of the request."""

    type: AmbiguityType
    description: str
    possible_interpretations: List[str] = []
    confidence: float = Field(ge=0.0, le=1.0)   # Confidence that this really is ambiguous
    impact: Impact
    resolution_urgency: ResolutionUrgency
    evidence: List[str] = []                    # Words/phrases from the query


class Budget(StrictModel):
    amount: Optional[float] = Field(default=None, ge=0.0)
    per_item: bool = False
    currency: str = "USD"
    approximate: bool = True


class Timeline(StrictModel):
    deadline: Optional[str] = None              # Free text or ISO date as extracted
    urgency: TimelineUrgency = TimelineUrgency.STANDARD
    flexible: bool = True


class ConfidenceScores(StrictModel):
    overall: float = Field(ge=0.0, le=1.0)
    intent: float = Field(ge=0.0, le=1.0)
    context: float = Field(ge=0.0, le=1.0)
    specifications: float = Field(ge=0.0, le=1.0)


class Understanding(StrictModel):
    """Structured interpretation of the request at one point in the conversation."""

    primary_intent: IntentType
    product_type: Optional[str] = None
    product_categories: List[str] = []
    industry_context: IndustryContext = IndustryContext.UNKNOWN
    event_type: EventType = EventType.UNKNOWN
    recipient_type: RecipientType = RecipientType.UNKNOWN
    attributes: Dict[str, str] = {}
    quantity: Optional[int] = Field(default=None, ge=0)
    budget: Optional[Budget] = None
    timeline: Optional[Timeline] = None
    ambiguities: List[Ambiguity] = []
    confidence: ConfidenceScores

    @field_validator("ambiguities")
    @classmethod
    def _one_per_type(cls, ambiguities: List[Ambiguity]) -> List[Ambiguity]:
        """Keep the first emission of each type; `none` entries have no subject."""
        seen = set()
        kept = []
        for ambiguity in ambiguities:
            if ambiguity.type == AmbiguityType.NONE:
                continue
            if ambiguity.type in seen:
                continue
            seen.add(ambiguity.type)
            kept.append(ambiguity)
        return kept

    def ambiguity_types(self) -> List[AmbiguityType]:
        return [a.type for a in self.ambiguities]
