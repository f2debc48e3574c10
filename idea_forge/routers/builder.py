"""Business builder endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..builder import BuilderService, list_actions, resolve_action
from ..dependencies import get_builder_results, get_builder_service, get_flow_sessions, require_bearer
from ..errors import SessionNotFound
from ..memory import BuilderResultStore, FlowSessionStore
from ..schemas import (
    ActionDefinition,
    BuildBusinessRequest,
    BuildBusinessResponse,
    BuilderSessionResponse,
    ErrorResponse,
)


router = APIRouter(prefix="/build-business", tags=["builder"])


@router.post(
    "",
    response_model=BuildBusinessResponse,
    responses={status: {"model": ErrorResponse} for status in (401, 429, 500)},
)
def build_business(
    payload: BuildBusinessRequest,
    token: str = Depends(require_bearer),
    service: BuilderService = Depends(get_builder_service),
    store: BuilderResultStore = Depends(get_builder_results),
    sessions: FlowSessionStore = Depends(get_flow_sessions),
) -> BuildBusinessResponse:
    """Run one builder action for the selected idea.

    ``sessionId`` must name a flow session issued to the same credential.
    """

    action = resolve_action(payload.action)
    if payload.session_id:
        sessions.get(payload.session_id, token)
    result = service.run(payload.idea, payload.profile, action)
    if payload.session_id:
        store.upsert_result(payload.session_id, payload.idea, action, result)
    return BuildBusinessResponse(result=result, action=action.value)


@router.get("/actions", response_model=list[ActionDefinition])
def list_actions_endpoint() -> list[ActionDefinition]:
    """Expose builder action metadata to the UI."""

    return list_actions()


@router.get("/session/{session_id}", response_model=BuilderSessionResponse)
def fetch_session(
    session_id: str,
    token: str = Depends(require_bearer),
    store: BuilderResultStore = Depends(get_builder_results),
    sessions: FlowSessionStore = Depends(get_flow_sessions),
) -> BuilderSessionResponse:
    """Return the cached builder results for the session's selected idea."""

    sessions.get(session_id, token)
    slot = store.get_session(session_id)
    if slot is None:
        raise SessionNotFound(f"No builder results found for session '{session_id}'.")
    return BuilderSessionResponse(
        session_id=session_id,
        idea=slot.idea,
        results={action.value: result for action, result in slot.results.items()},
    )
