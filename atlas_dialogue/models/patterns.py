"""
Static industry / event / recipient pattern tables.

Read-only reference data consulted by extraction. Every table is keyed by the
full enum, including its `unknown` member, so a lookup can never miss.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict

from atlas_dialogue.models.understanding import (
    EventType,
    IndustryContext,
    RecipientType,
)


class IndustryPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: List[str]
    quality_expectations: str
    budget_range: str
    preferred_products: List[str]
    common_uses: List[str]


class EventPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: List[str]
    urgent_need: bool
    quantity_pattern: str
    product_types: List[str]
    timeline: str
    considerations: List[str]


class RecipientPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    keywords: List[str]
    appropriate_products: List[str]
    quality_level: str
    personalization: str


INDUSTRY_PATTERNS: Dict[IndustryContext, IndustryPattern] = {
    IndustryContext.TECHNOLOGY: IndustryPattern(
        keywords=["tech", "startup", "software", "saas", "engineering", "developer"],
        quality_expectations="high-tech, modern, sleek designs",
        budget_range="medium to high",
        preferred_products=["tech accessories", "branded apparel", "desk items", "power banks"],
        common_uses=["employee onboarding", "conference swag", "client gifts"],
    ),
    IndustryContext.HEALTHCARE: IndustryPattern(
        keywords=["medical", "hospital", "clinic", "healthcare", "pharma", "wellness"],
        quality_expectations="professional, clean, safety-focused",
        budget_range="medium",
        preferred_products=["sanitizers", "wellness items", "professional apparel", "safety items"],
        common_uses=["patient education", "staff recognition", "health awareness campaigns"],
    ),
    IndustryContext.FINANCE: IndustryPattern(
        keywords=["bank", "finance", "investment", "insurance", "accounting"],
        quality_expectations="premium, professional, sophisticated",
        budget_range="medium to high",
        preferred_products=["executive gifts", "professional accessories", "desk items", "portfolios"],
        common_uses=["client appreciation", "executive gifts", "conference materials"],
    ),
    IndustryContext.EDUCATION: IndustryPattern(
        keywords=["school", "university", "college", "academy", "student"],
        quality_expectations="durable, practical, cost-effective",
        budget_range="low to medium",
        preferred_products=["school supplies", "bags", "apparel", "educational materials"],
        common_uses=["student recruitment", "alumni events", "fundraising"],
    ),
    IndustryContext.NON_PROFIT: IndustryPattern(
        keywords=["nonprofit", "non-profit", "charity", "foundation", "volunteer"],
        quality_expectations="cost-effective, meaningful, sustainable",
        budget_range="low",
        preferred_products=["awareness items", "apparel", "reusable items", "eco-friendly products"],
        common_uses=["awareness campaigns", "fundraising events", "volunteer appreciation"],
    ),
    IndustryContext.RETAIL: IndustryPattern(
        keywords=["retail", "store", "shop", "boutique", "ecommerce"],
        quality_expectations="on-brand, customer-facing, good value",
        budget_range="low to medium",
        preferred_products=["tote bags", "packaging", "loyalty gifts", "apparel"],
        common_uses=["customer loyalty", "store openings", "seasonal promotions"],
    ),
    IndustryContext.MANUFACTURING: IndustryPattern(
        keywords=["manufacturing", "factory", "plant", "industrial"],
        quality_expectations="durable, functional, safety-conscious",
        budget_range="low to medium",
        preferred_products=["workwear", "safety items", "drinkware", "tools"],
        common_uses=["safety milestones", "staff recognition", "trade shows"],
    ),
    IndustryContext.HOSPITALITY: IndustryPattern(
        keywords=["hotel", "restaurant", "hospitality", "resort", "catering"],
        quality_expectations="polished, guest-facing, comfortable",
        budget_range="medium",
        preferred_products=["amenities", "uniforms", "drinkware", "welcome kits"],
        common_uses=["guest amenities", "staff uniforms", "loyalty programs"],
    ),
    IndustryContext.LEGAL: IndustryPattern(
        keywords=["law firm", "legal", "attorney", "lawyer", "counsel"],
        quality_expectations="premium, discreet, sophisticated",
        budget_range="high",
        preferred_products=["executive gifts", "leather portfolios", "fine pens", "desk accessories"],
        common_uses=["client appreciation", "partner gifts", "recruitment"],
    ),
    IndustryContext.CREATIVE_AGENCY: IndustryPattern(
        keywords=["agency", "creative", "design studio", "marketing firm"],
        quality_expectations="distinctive, design-led, trend-aware",
        budget_range="medium to high",
        preferred_products=["designer apparel", "notebooks", "unique gifts", "art prints"],
        common_uses=["client gifts", "pitch leave-behinds", "team culture"],
    ),
    IndustryContext.CONSTRUCTION: IndustryPattern(
        keywords=["construction", "contractor", "builder", "site crew"],
        quality_expectations="rugged, high-visibility, practical",
        budget_range="low to medium",
        preferred_products=["hi-vis apparel", "hard hat stickers", "coolers", "tools"],
        common_uses=["safety programs", "crew recognition", "job site branding"],
    ),
    IndustryContext.AUTOMOTIVE: IndustryPattern(
        keywords=["automotive", "dealership", "car", "auto shop"],
        quality_expectations="practical, brand-forward, durable",
        budget_range="low to medium",
        preferred_products=["keychains", "car accessories", "apparel", "drinkware"],
        common_uses=["customer purchase gifts", "service reminders", "events"],
    ),
    IndustryContext.REAL_ESTATE: IndustryPattern(
        keywords=["real estate", "realtor", "brokerage", "property"],
        quality_expectations="welcoming, personal, memorable",
        budget_range="medium",
        preferred_products=["closing gifts", "home items", "notepads", "calendars"],
        common_uses=["closing gifts", "open houses", "referral thank-yous"],
    ),
    IndustryContext.UNKNOWN: IndustryPattern(
        keywords=[],
        quality_expectations="standard professional quality",
        budget_range="medium",
        preferred_products=["general promotional items"],
        common_uses=["general business promotion"],
    ),
}

EVENT_PATTERNS: Dict[EventType, EventPattern] = {
    EventType.TRADE_SHOW: EventPattern(
        keywords=["trade show", "tradeshow", "expo", "convention", "booth", "exhibition"],
        urgent_need=True,
        quantity_pattern="high volume",
        product_types=["giveaways", "bags", "apparel", "tech accessories"],
        timeline="specific deadline",
        considerations=["portability", "eye-catching", "brand visibility"],
    ),
    EventType.CONFERENCE: EventPattern(
        keywords=["conference", "summit", "seminar", "workshop"],
        urgent_need=True,
        quantity_pattern="medium to high volume",
        product_types=["bags", "notebooks", "pens", "tech items"],
        timeline="specific deadline",
        considerations=["professional appearance", "utility", "networking value"],
    ),
    EventType.EMPLOYEE_ONBOARDING: EventPattern(
        keywords=["onboarding", "new hire", "welcome kit", "orientation"],
        urgent_need=False,
        quantity_pattern="ongoing small batches",
        product_types=["welcome kits", "apparel", "desk items", "tech accessories"],
        timeline="ongoing need",
        considerations=["quality impression", "company culture", "practicality"],
    ),
    EventType.CLIENT_APPRECIATION: EventPattern(
        keywords=["client appreciation", "thank you", "thank-you", "appreciation"],
        urgent_need=False,
        quantity_pattern="small to medium volume",
        product_types=["executive gifts", "gift sets", "premium drinkware"],
        timeline="flexible, often seasonal",
        considerations=["perceived value", "personalization", "presentation"],
    ),
    EventType.PRODUCT_LAUNCH: EventPattern(
        keywords=["launch", "release", "unveil"],
        urgent_need=True,
        quantity_pattern="medium volume",
        product_types=["launch kits", "apparel", "novelty items"],
        timeline="specific deadline",
        considerations=["message alignment", "press appeal", "novelty"],
    ),
    EventType.COMPANY_ANNIVERSARY: EventPattern(
        keywords=["anniversary", "milestone", "years in business"],
        urgent_need=False,
        quantity_pattern="company-wide",
        product_types=["commemorative items", "apparel", "awards"],
        timeline="specific date",
        considerations=["keepsake value", "inclusiveness", "storytelling"],
    ),
    EventType.HOLIDAY_GIFTS: EventPattern(
        keywords=["holiday", "christmas", "year-end", "seasonal gift"],
        urgent_need=True,
        quantity_pattern="medium to high volume",
        product_types=["gift sets", "drinkware", "blankets", "gourmet items"],
        timeline="seasonal deadline",
        considerations=["shipping cutoffs", "inclusiveness", "presentation"],
    ),
    EventType.FUNDRAISING: EventPattern(
        keywords=["fundraiser", "fundraising", "gala", "charity run", "donor"],
        urgent_need=True,
        quantity_pattern="medium volume",
        product_types=["apparel", "awareness items", "donor gifts"],
        timeline="specific deadline",
        considerations=["cost per unit", "cause messaging", "resale value"],
    ),
    EventType.RECRUITMENT: EventPattern(
        keywords=["recruiting", "recruitment", "career fair", "job fair", "hiring"],
        urgent_need=True,
        quantity_pattern="medium volume",
        product_types=["giveaways", "apparel", "tech accessories"],
        timeline="specific deadline",
        considerations=["employer brand", "appeal to candidates", "portability"],
    ),
    EventType.BRAND_AWARENESS: EventPattern(
        keywords=["brand awareness", "marketing campaign", "promotion", "giveaway"],
        urgent_need=False,
        quantity_pattern="high volume",
        product_types=["giveaways", "pens", "bags", "stickers"],
        timeline="flexible",
        considerations=["reach", "cost per impression", "daily use"],
    ),
    EventType.UNKNOWN: EventPattern(
        keywords=[],
        urgent_need=False,
        quantity_pattern="standard quantities",
        product_types=["general promotional items"],
        timeline="flexible",
        considerations=["standard promotional considerations"],
    ),
}

RECIPIENT_PATTERNS: Dict[RecipientType, RecipientPattern] = {
    RecipientType.EMPLOYEES: RecipientPattern(
        keywords=["employees", "employee", "staff", "team", "coworkers", "new hires"],
        appropriate_products=["apparel", "desk items", "tech accessories", "recognition items"],
        quality_level="good to premium",
        personalization="company branding with possible individual names",
    ),
    RecipientType.CLIENTS: RecipientPattern(
        keywords=["clients", "client", "customers", "customer"],
        appropriate_products=["executive gifts", "premium items", "useful accessories"],
        quality_level="premium",
        personalization="subtle company branding, focus on quality",
    ),
    RecipientType.PROSPECTS: RecipientPattern(
        keywords=["prospects", "leads", "potential customers"],
        appropriate_products=["branded giveaways", "useful items", "memorable pieces"],
        quality_level="good",
        personalization="clear company branding and contact info",
    ),
    RecipientType.EVENT_ATTENDEES: RecipientPattern(
        keywords=["attendees", "visitors", "guests", "participants"],
        appropriate_products=["bags", "giveaways", "practical items", "tech accessories"],
        quality_level="standard to good",
        personalization="event and company branding",
    ),
    RecipientType.GENERAL_PUBLIC: RecipientPattern(
        keywords=["public", "community", "everyone", "passersby"],
        appropriate_products=["pens", "stickers", "tote bags", "water bottles"],
        quality_level="standard",
        personalization="bold company branding",
    ),
    RecipientType.PARTNERS: RecipientPattern(
        keywords=["partners", "partner", "resellers", "affiliates"],
        appropriate_products=["co-branded gifts", "premium items", "gift sets"],
        quality_level="premium",
        personalization="co-branding",
    ),
    RecipientType.VENDORS: RecipientPattern(
        keywords=["vendors", "suppliers", "contractors"],
        appropriate_products=["desk items", "drinkware", "calendars"],
        quality_level="good",
        personalization="company branding",
    ),
    RecipientType.UNKNOWN: RecipientPattern(
        keywords=[],
        appropriate_products=["general promotional items"],
        quality_level="standard",
        personalization="company branding",
    ),
}


def industry_pattern(industry: IndustryContext) -> IndustryPattern:
    return INDUSTRY_PATTERNS[IndustryContext(industry)]


def event_pattern(event: EventType) -> EventPattern:
    return EVENT_PATTERNS[EventType(event)]


def recipient_pattern(recipient: RecipientType) -> RecipientPattern:
    return RECIPIENT_PATTERNS[RecipientType(recipient)]
