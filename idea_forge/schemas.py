"""Pydantic models and enums for the Idea Forge API."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ApiModel(BaseModel):
    """Request/response base: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StrictRecord(BaseModel):
    """Immutable record decoded from model output; unknown keys are rejected."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


class Expertise(str, Enum):
    """Self-reported entrepreneurial experience."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERIENCED = "experienced"
    SERIAL = "serial"


class BudgetRange(str, Enum):
    """Launch budget bands offered by the profile form."""

    UP_TO_100 = "$0-$100"
    UP_TO_500 = "$100-$500"
    UP_TO_1000 = "$500-$1000"
    UP_TO_2000 = "$1000-$2000"


class Profile(ApiModel):
    """The user's background, used verbatim in every prompt."""

    model_config = ConfigDict(frozen=True)

    expertise: Expertise
    interests: NonBlankStr
    budget: BudgetRange
    skills: str = ""


# ---------------------------------------------------------------------------
# Ideas
# ---------------------------------------------------------------------------


class UrgencyLevel(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"


class Idea(StrictRecord):
    """One candidate business concept.

    ``id`` is positional within the batch it was delivered in and is reused
    by the next batch, so it must not be used as a cross-request key.
    """

    id: str
    name: str
    description: str
    problem: str
    viability_score: int = Field(ge=0, le=100)
    profit_potential: str
    time_to_launch: str
    startup_cost: str
    experience_needed: str
    urgency_level: UrgencyLevel
    tags: List[str]


class GenerateIdeasRequest(ApiModel):
    """Payload for the idea generation endpoint.

    ``mode`` stays a plain string here; the service resolves it so that an
    unsupported value is reported as a programming error, not a 422.
    """

    profile: Profile
    mode: str = "generate"
    user_idea: str = ""


class GenerateIdeasResponse(ApiModel):
    ideas: List[Idea]
    batch_id: str


# ---------------------------------------------------------------------------
# Builder results
# ---------------------------------------------------------------------------


class BrandIdentity(StrictRecord):
    tone: str
    colors: List[str]
    fonts: List[str]
    personality: str


class LaunchWeek(StrictRecord):
    week: str
    title: str
    tasks: List[str]


class MarketingStrategy(StrictRecord):
    channels: List[str]
    content_ideas: List[str]
    launch_tactics: List[str]
    budget_allocation: str


class FinancialProjection(StrictRecord):
    month1: str
    month3: str
    month6: str
    month12: str
    break_even_timeline: str
    key_expenses: List[str]


class BusinessPlan(StrictRecord):
    """Complete launch plan produced by the ``full_plan`` action."""

    business_name: str
    tagline: str
    elevator_pitch: str
    target_audience: str
    revenue_model: str
    competitive_advantage: str
    brand_identity: BrandIdentity
    launch_timeline: List[LaunchWeek]
    marketing_strategy: MarketingStrategy
    financial_projection: FinancialProjection
    risks: List[str]
    next_steps: List[str]


class ThreatLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Competitor(StrictRecord):
    name: str
    strengths: str
    weaknesses: str
    pricing: str
    market_share: str


class CompetitorAnalysis(StrictRecord):
    """Competitive landscape produced by the ``competitor_analysis`` action."""

    market_overview: str
    direct_competitors: List[Competitor]
    market_gaps: List[str]
    positioning_strategy: str
    differentiators: List[str]
    threat_level: ThreatLevel

    @field_validator("threat_level", mode="before")
    @classmethod
    def _normalise_threat_level(cls, value: object) -> object:
        # Models answer "high", "HIGH" or " High " interchangeably.
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


class EmailMessage(StrictRecord):
    subject: str
    preview: str
    body: str


class LandingPageCopy(StrictRecord):
    hero_headline: str
    hero_subheadline: str
    features: List[str]
    cta: str
    testimonial_templates: List[str]


class MarketingCopy(StrictRecord):
    """Copywriting bundle produced by the ``marketing_copy`` action."""

    headlines: List[str]
    email_sequence: List[EmailMessage]
    social_posts: List[str]
    landing_page_copy: LandingPageCopy
    ad_copy: List[str]


BuilderResult = Union[BusinessPlan, CompetitorAnalysis, MarketingCopy]


class BuildBusinessRequest(ApiModel):
    """Payload for a builder action against one selected idea."""

    idea: Idea
    profile: Profile
    action: str
    session_id: Optional[str] = Field(
        default=None,
        description="Optional flow session id from POST /sessions; successful results are cached under it.",
    )


class BuildBusinessResponse(ApiModel):
    result: BuilderResult
    action: str


class BuilderSessionResponse(ApiModel):
    """Cached builder results for the idea currently selected in a session."""

    session_id: str
    idea: Idea
    results: Dict[str, BuilderResult]


# ---------------------------------------------------------------------------
# Catalogues
# ---------------------------------------------------------------------------


class OptionDefinition(ApiModel):
    value: str
    label: str
    description: str


class ProfileOptions(ApiModel):
    expertise: List[OptionDefinition]
    budget: List[OptionDefinition]


class ActionDefinition(ApiModel):
    id: str
    label: str
    description: str


# ---------------------------------------------------------------------------
# Application flow
# ---------------------------------------------------------------------------


class FlowEventRequest(ApiModel):
    """A user-driven event for the application state machine."""

    type: str
    profile: Optional[Profile] = None
    user_idea: Optional[str] = None


class ScreenView(ApiModel):
    """Serializable rendition of the current screen."""

    screen: str
    mode: Optional[str] = None
    profile: Optional[Profile] = None
    user_idea: Optional[str] = None
    ideas: List[Idea] = Field(default_factory=list)
    batch_id: Optional[str] = None


class FlowSessionResponse(ApiModel):
    session_id: str
    state: ScreenView


class ErrorResponse(BaseModel):
    error: str
