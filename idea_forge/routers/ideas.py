"""Idea generation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..dependencies import get_idea_service, require_bearer
from ..ideas import IdeaService, list_budget_ranges, list_expertise_levels
from ..schemas import ErrorResponse, GenerateIdeasRequest, GenerateIdeasResponse, ProfileOptions


router = APIRouter(tags=["ideas"])


@router.post(
    "/generate-ideas",
    response_model=GenerateIdeasResponse,
    responses={status: {"model": ErrorResponse} for status in (400, 401, 402, 429, 500)},
)
def generate_ideas(
    payload: GenerateIdeasRequest,
    _token: str = Depends(require_bearer),
    service: IdeaService = Depends(get_idea_service),
) -> GenerateIdeasResponse:
    """Generate ideas from a profile, or validate the user's own idea."""

    batch = service.run(payload.profile, payload.mode, payload.user_idea)
    return GenerateIdeasResponse(ideas=batch.ideas, batch_id=batch.batch_id)


@router.get("/options/profile", response_model=ProfileOptions)
def profile_options() -> ProfileOptions:
    """Expose the profile form choices to the UI."""

    return ProfileOptions(expertise=list_expertise_levels(), budget=list_budget_ranges())
