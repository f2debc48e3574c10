"""Idea generation and validation on top of the structured-output client."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from textwrap import dedent
from typing import Any, Dict, Iterable, List

from pydantic import ValidationError

from .errors import InvalidRequest, MalformedResponse, UnknownMode
from .llm import PromptSpec, StructuredOutputClient, ToolDefinition
from .schemas import BudgetRange, Expertise, Idea, OptionDefinition, Profile, UrgencyLevel

logger = logging.getLogger(__name__)

GENERATED_IDEA_COUNT = 6
VALIDATION_ALTERNATIVES = 3


class IdeaMode(str, Enum):
    GENERATE = "generate"
    VALIDATE = "validate"


def resolve_mode(raw: str) -> IdeaMode:
    """Map the wire value onto :class:`IdeaMode` or raise :class:`UnknownMode`."""

    try:
        return IdeaMode(raw)
    except ValueError as exc:
        raise UnknownMode(f"Unknown mode: {raw}") from exc


# ---------------------------------------------------------------------------
# Prompts and tool schema
# ---------------------------------------------------------------------------


SYSTEM_PROMPT = dedent(
    """
    You are an elite AI business strategist. You analyze market trends, identify underserved niches, and generate highly actionable business ideas.

    Your task is to generate business ideas that are:
    - "Painkiller" solutions solving urgent, real problems
    - Based on current market trends and gaps
    - Tailored to the user's experience level, budget, skills, and interests
    - Practical and launchable within the stated timeframe

    You MUST respond by calling the provided function tool. Do not respond with plain text.
    """
)

IDEA_ITEM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Business name/concept"},
        "description": {
            "type": "string",
            "description": "2-3 sentence description of the business model",
        },
        "problem": {
            "type": "string",
            "description": "The urgent problem this solves with data/stats if possible",
        },
        "viabilityScore": {
            "type": "integer",
            "minimum": 0,
            "maximum": 100,
            "description": "Score 0-100 based on market demand, competition, and feasibility",
        },
        "profitPotential": {"type": "string", "description": "Monthly revenue range e.g. '$5K-20K/mo'"},
        "timeToLaunch": {"type": "string", "description": "e.g. '1-2 weeks', '3-5 days'"},
        "startupCost": {"type": "string", "description": "e.g. '$100-300'"},
        "experienceNeeded": {"type": "string", "description": "Beginner, Intermediate, or Experienced"},
        "urgencyLevel": {
            "type": "string",
            "enum": [level.value for level in UrgencyLevel],
            "description": "How urgent is the market demand",
        },
        "tags": {
            "type": "array",
            "items": {"type": "string"},
            "description": "3-4 relevant category tags",
        },
    },
    "required": [
        "name",
        "description",
        "problem",
        "viabilityScore",
        "profitPotential",
        "timeToLaunch",
        "startupCost",
        "experienceNeeded",
        "urgencyLevel",
        "tags",
    ],
    "additionalProperties": False,
}

IDEAS_TOOL = ToolDefinition(
    name="return_business_ideas",
    description="Return a list of business ideas with detailed analysis.",
    parameters={
        "type": "object",
        "properties": {"ideas": {"type": "array", "items": IDEA_ITEM_SCHEMA}},
        "required": ["ideas"],
        "additionalProperties": False,
    },
)


def _profile_block(profile: Profile, interests_label: str) -> str:
    return dedent(
        f"""
        User Profile:
        - Experience Level: {profile.expertise.value}
        - {interests_label}: {profile.interests}
        - Budget: {profile.budget.value}
        - Skills: {profile.skills}
        """
    ).strip()


def build_prompt(mode: IdeaMode, profile: Profile, user_idea: str = "") -> PromptSpec:
    """Return the prompt pair and tool for *mode*."""

    if mode is IdeaMode.VALIDATE:
        user_prompt = (
            f'The user wants to validate this business idea: "{user_idea.strip()}"\n\n'
            f"{_profile_block(profile, 'Interests')}\n\n"
            f"Analyze the idea's viability and also suggest {VALIDATION_ALTERNATIVES} improved or related "
            "alternatives. Return all ideas (including the validated original) via the tool call."
        )
    else:
        user_prompt = (
            f"Generate {GENERATED_IDEA_COUNT} unique, high-potential business ideas for this user:\n\n"
            f"{_profile_block(profile, 'Interests & Industries')}\n\n"
            "Focus on ideas that match their budget and experience. Prioritize urgent market needs and "
            "underserved niches. Each idea should be distinct and actionable."
        )
    return PromptSpec(system_prompt=SYSTEM_PROMPT, user_prompt=user_prompt, tool=IDEAS_TOOL)


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------


def assign_ids(raw_ideas: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Give each raw idea the id ``str(position + 1)``.

    Pure function of position; any id supplied by the model is overwritten.
    """

    return [{**raw, "id": str(index + 1)} for index, raw in enumerate(raw_ideas)]


def decode_ideas(raw_ideas: Any) -> List[Idea]:
    """Validate the tool's ``ideas`` array and return :class:`Idea` records."""

    if not isinstance(raw_ideas, list) or not all(isinstance(item, dict) for item in raw_ideas):
        raise MalformedResponse("AI returned ideas of the wrong shape")
    try:
        return [Idea.model_validate(item) for item in assign_ids(raw_ideas)]
    except ValidationError as exc:
        logger.error("Idea failed validation: %s", exc)
        raise MalformedResponse("AI returned an incomplete idea") from exc


@dataclass(frozen=True)
class IdeaBatch:
    """One delivered array of ideas; ids are only unique inside it."""

    batch_id: str
    mode: IdeaMode
    ideas: List[Idea]


class IdeaService:
    """Build prompts for a mode, call the model, and normalize the ideas."""

    def __init__(self, ai_client: StructuredOutputClient) -> None:
        self._ai = ai_client

    def run(self, profile: Profile, mode: str | IdeaMode, user_idea: str = "") -> IdeaBatch:
        resolved = mode if isinstance(mode, IdeaMode) else resolve_mode(mode)
        if resolved is IdeaMode.VALIDATE and not user_idea.strip():
            raise InvalidRequest("Please describe the idea you want to validate.")

        spec = build_prompt(resolved, profile, user_idea)
        arguments = self._ai.complete(spec, quota_errors=True)
        ideas = decode_ideas(arguments.get("ideas"))

        if resolved is IdeaMode.GENERATE and len(ideas) != GENERATED_IDEA_COUNT:
            raise MalformedResponse(
                f"AI returned {len(ideas)} ideas instead of {GENERATED_IDEA_COUNT}"
            )
        if not ideas:
            raise MalformedResponse("AI returned no ideas")

        batch = IdeaBatch(batch_id=uuid.uuid4().hex, mode=resolved, ideas=ideas)
        logger.info("Delivered %d ideas (mode=%s, batch=%s)", len(ideas), resolved.value, batch.batch_id)
        return batch


# ---------------------------------------------------------------------------
# Profile form catalogues
# ---------------------------------------------------------------------------


EXPERTISE_OPTIONS: Dict[Expertise, OptionDefinition] = {
    Expertise.BEGINNER: OptionDefinition(
        value=Expertise.BEGINNER.value, label="Beginner", description="New to entrepreneurship"
    ),
    Expertise.INTERMEDIATE: OptionDefinition(
        value=Expertise.INTERMEDIATE.value, label="Intermediate", description="Some business experience"
    ),
    Expertise.EXPERIENCED: OptionDefinition(
        value=Expertise.EXPERIENCED.value, label="Experienced", description="Multiple ventures"
    ),
    Expertise.SERIAL: OptionDefinition(
        value=Expertise.SERIAL.value, label="Serial Entrepreneur", description="Built & exited businesses"
    ),
}

BUDGET_OPTIONS: Dict[BudgetRange, OptionDefinition] = {
    BudgetRange.UP_TO_100: OptionDefinition(
        value=BudgetRange.UP_TO_100.value, label="$0 - $100", description="Bootstrap"
    ),
    BudgetRange.UP_TO_500: OptionDefinition(
        value=BudgetRange.UP_TO_500.value, label="$100 - $500", description="Minimal investment"
    ),
    BudgetRange.UP_TO_1000: OptionDefinition(
        value=BudgetRange.UP_TO_1000.value, label="$500 - $1,000", description="Moderate"
    ),
    BudgetRange.UP_TO_2000: OptionDefinition(
        value=BudgetRange.UP_TO_2000.value, label="$1,000 - $2,000", description="Full launch"
    ),
}


def list_expertise_levels() -> List[OptionDefinition]:
    """Return the experience levels in form order."""

    return [EXPERTISE_OPTIONS[level] for level in Expertise]


def list_budget_ranges() -> List[OptionDefinition]:
    return [BUDGET_OPTIONS[band] for band in BudgetRange]
