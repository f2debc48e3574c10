"""Business builder actions for a selected idea."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from textwrap import dedent
from typing import Any, Callable, Dict, List, Type

from pydantic import ValidationError

from .errors import MalformedResponse, UnknownAction
from .llm import PromptSpec, StructuredOutputClient, ToolDefinition
from .schemas import (
    ActionDefinition,
    BuilderResult,
    BusinessPlan,
    CompetitorAnalysis,
    Idea,
    MarketingCopy,
    Profile,
    ThreatLevel,
)

logger = logging.getLogger(__name__)


class BuilderAction(str, Enum):
    FULL_PLAN = "full_plan"
    COMPETITOR_ANALYSIS = "competitor_analysis"
    MARKETING_COPY = "marketing_copy"


def resolve_action(raw: str) -> BuilderAction:
    try:
        return BuilderAction(raw)
    except ValueError as exc:
        raise UnknownAction(f"Unknown action: {raw}") from exc


# ---------------------------------------------------------------------------
# JSON schema helpers
# ---------------------------------------------------------------------------


def _string(description: str | None = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "string"}
    if description:
        schema["description"] = description
    return schema


def _string_list(description: str | None = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {"type": "array", "items": {"type": "string"}}
    if description:
        schema["description"] = description
    return schema


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    """Closed object schema where every listed property is required."""

    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


# ---------------------------------------------------------------------------
# Tool definitions
# ---------------------------------------------------------------------------


BUSINESS_PLAN_TOOL = ToolDefinition(
    name="return_business_plan",
    description="Return a comprehensive business plan",
    parameters=_object(
        {
            "businessName": _string("Recommended business name"),
            "tagline": _string("Catchy tagline/slogan"),
            "elevatorPitch": _string("30-second elevator pitch"),
            "targetAudience": _string("Detailed target audience description"),
            "revenueModel": _string("How the business makes money"),
            "competitiveAdvantage": _string("What makes this business unique"),
            "brandIdentity": _object(
                {
                    "tone": _string(),
                    "colors": _string_list(),
                    "fonts": _string_list(),
                    "personality": _string(),
                }
            ),
            "launchTimeline": {
                "type": "array",
                "items": _object({"week": _string(), "title": _string(), "tasks": _string_list()}),
            },
            "marketingStrategy": _object(
                {
                    "channels": _string_list(),
                    "contentIdeas": _string_list(),
                    "launchTactics": _string_list(),
                    "budgetAllocation": _string(),
                }
            ),
            "financialProjection": _object(
                {
                    "month1": _string(),
                    "month3": _string(),
                    "month6": _string(),
                    "month12": _string(),
                    "breakEvenTimeline": _string(),
                    "keyExpenses": _string_list(),
                }
            ),
            "risks": _string_list("Top 5 risks and mitigations"),
            "nextSteps": _string_list("Immediate next 5 actions to take today"),
        }
    ),
)

COMPETITOR_ANALYSIS_TOOL = ToolDefinition(
    name="return_competitor_analysis",
    description="Return competitive analysis",
    parameters=_object(
        {
            "marketOverview": _string(),
            "directCompetitors": {
                "type": "array",
                "items": _object(
                    {
                        "name": _string(),
                        "strengths": _string(),
                        "weaknesses": _string(),
                        "pricing": _string(),
                        "marketShare": _string(),
                    }
                ),
            },
            "marketGaps": _string_list(),
            "positioningStrategy": _string(),
            "differentiators": _string_list(),
            "threatLevel": {
                "type": "string",
                "enum": [level.value for level in ThreatLevel],
                "description": "Low, Medium, or High",
            },
        }
    ),
)

MARKETING_COPY_TOOL = ToolDefinition(
    name="return_marketing_copy",
    description="Return marketing copy",
    parameters=_object(
        {
            "headlines": _string_list("5 attention-grabbing headlines"),
            "emailSequence": {
                "type": "array",
                "items": _object({"subject": _string(), "preview": _string(), "body": _string()}),
            },
            "socialPosts": _string_list("5 social media posts"),
            "landingPageCopy": _object(
                {
                    "heroHeadline": _string(),
                    "heroSubheadline": _string(),
                    "features": _string_list(),
                    "cta": _string(),
                    "testimonialTemplates": _string_list(),
                }
            ),
            "adCopy": _string_list("3 ad copy variants"),
        }
    ),
)


# ---------------------------------------------------------------------------
# Prompt builders
# ---------------------------------------------------------------------------


def _full_plan_prompt(idea: Idea, profile: Profile) -> PromptSpec:
    user_prompt = dedent(
        f"""
        Create a complete business launch plan for:
        Business: "{idea.name}"
        Description: {idea.description}
        Problem it solves: {idea.problem}
        Startup Cost: {idea.startup_cost}
        User Experience: {profile.expertise.value}
        User Budget: {profile.budget.value}
        User Skills: {profile.skills}

        Generate a detailed plan with brand identity, marketing strategy, financial projections, launch timeline, and step-by-step actions.
        """
    )
    return PromptSpec(
        system_prompt=(
            "You are a world-class business strategist and startup advisor. Generate comprehensive, "
            "actionable business plans. You MUST respond by calling the provided function tool."
        ),
        user_prompt=user_prompt,
        tool=BUSINESS_PLAN_TOOL,
    )


def _competitor_analysis_prompt(idea: Idea, profile: Profile) -> PromptSpec:
    return PromptSpec(
        system_prompt=(
            "You are a competitive intelligence analyst. Analyze the competitive landscape thoroughly. "
            "You MUST respond by calling the provided function tool."
        ),
        user_prompt=(
            f'Analyze the competitive landscape for: "{idea.name}" - {idea.description}. '
            f"Industry focus: {profile.interests}. Identify direct competitors, indirect competitors, "
            "market gaps, and positioning strategies. Rate the overall threat level as Low, Medium, or High."
        ),
        tool=COMPETITOR_ANALYSIS_TOOL,
    )


def _marketing_copy_prompt(idea: Idea, profile: Profile) -> PromptSpec:
    return PromptSpec(
        system_prompt=(
            "You are an expert copywriter and marketing strategist. Generate compelling marketing "
            "materials. You MUST respond by calling the provided function tool."
        ),
        user_prompt=(
            f'Generate marketing copy for: "{idea.name}" - {idea.description}. '
            f"Target audience based on: {profile.interests}. Budget: {profile.budget.value}."
        ),
        tool=MARKETING_COPY_TOOL,
    )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


PromptBuilder = Callable[[Idea, Profile], PromptSpec]


@dataclass(frozen=True)
class ActionInfo:
    """Runtime definition used by the registry below."""

    action: BuilderAction
    label: str
    description: str
    prompt_builder: PromptBuilder
    result_model: Type[BuilderResult]


ACTION_REGISTRY: Dict[BuilderAction, ActionInfo] = {
    BuilderAction.FULL_PLAN: ActionInfo(
        action=BuilderAction.FULL_PLAN,
        label="Full Business Plan",
        description="Brand, timeline, marketing & financials",
        prompt_builder=_full_plan_prompt,
        result_model=BusinessPlan,
    ),
    BuilderAction.COMPETITOR_ANALYSIS: ActionInfo(
        action=BuilderAction.COMPETITOR_ANALYSIS,
        label="Competitor Analysis",
        description="Market gaps, threats & positioning",
        prompt_builder=_competitor_analysis_prompt,
        result_model=CompetitorAnalysis,
    ),
    BuilderAction.MARKETING_COPY: ActionInfo(
        action=BuilderAction.MARKETING_COPY,
        label="Marketing Copy",
        description="Headlines, emails, social posts & ads",
        prompt_builder=_marketing_copy_prompt,
        result_model=MarketingCopy,
    ),
}


def list_actions() -> List[ActionDefinition]:
    """Return UI-friendly descriptors for all builder actions."""

    return [
        ActionDefinition(id=info.action.value, label=info.label, description=info.description)
        for info in ACTION_REGISTRY.values()
    ]


def decode_result(action: BuilderAction, arguments: Dict[str, Any]) -> BuilderResult:
    """Validate raw tool arguments against the action's result model."""

    model = ACTION_REGISTRY[action].result_model
    try:
        return model.model_validate(arguments)
    except ValidationError as exc:
        logger.error("%s result failed validation: %s", action.value, exc)
        raise MalformedResponse(f"AI returned an incomplete {action.value} result") from exc


class BuilderService:
    """Run one builder action for an idea and profile."""

    def __init__(self, ai_client: StructuredOutputClient) -> None:
        self._ai = ai_client

    def run(self, idea: Idea, profile: Profile, action: str | BuilderAction) -> BuilderResult:
        resolved = action if isinstance(action, BuilderAction) else resolve_action(action)
        info = ACTION_REGISTRY[resolved]
        spec = info.prompt_builder(idea, profile)
        # Credit exhaustion is only surfaced as such on the idea path.
        arguments = self._ai.complete(spec, quota_errors=False)
        result = decode_result(resolved, arguments)
        logger.info("Built %s for idea %r", resolved.value, idea.name)
        return result
