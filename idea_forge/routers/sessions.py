"""Application flow endpoints driving the screen state machine."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from ..dependencies import get_builder_results, get_flow_sessions, get_idea_service, require_bearer
from ..flow import (
    GenerationFailed,
    GenerationSucceeded,
    Hero,
    Loading,
    describe,
    parse_user_event,
    transition,
)
from ..errors import SessionNotFound
from ..ideas import IdeaService
from ..memory import BuilderResultStore, FlowSessionStore
from ..schemas import ErrorResponse, FlowEventRequest, FlowSessionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _complete(sessions: FlowSessionStore, session_id: str, token: str, event) -> None:
    """Feed a completion event to the stored screen; a deleted session drops it."""

    try:
        current = sessions.get(session_id, token)
    except SessionNotFound:
        return
    sessions.set(session_id, token, transition(current, event))


@router.post("", response_model=FlowSessionResponse, status_code=201)
def create_session(
    token: str = Depends(require_bearer),
    sessions: FlowSessionStore = Depends(get_flow_sessions),
) -> FlowSessionResponse:
    """Start a new flow on the hero screen."""

    screen = Hero()
    session_id = sessions.create(screen, owner=token)
    return FlowSessionResponse(session_id=session_id, state=describe(screen))


@router.get("/{session_id}", response_model=FlowSessionResponse)
def fetch_session(
    session_id: str,
    token: str = Depends(require_bearer),
    sessions: FlowSessionStore = Depends(get_flow_sessions),
) -> FlowSessionResponse:
    return FlowSessionResponse(session_id=session_id, state=describe(sessions.get(session_id, token)))


@router.delete("/{session_id}", status_code=204)
def delete_session(
    session_id: str,
    token: str = Depends(require_bearer),
    sessions: FlowSessionStore = Depends(get_flow_sessions),
    builder_results: BuilderResultStore = Depends(get_builder_results),
) -> Response:
    """Drop the flow state and any cached builder results for the session."""

    sessions.delete(session_id, token)
    builder_results.discard(session_id)
    return Response(status_code=204)


@router.post(
    "/{session_id}/events",
    response_model=FlowSessionResponse,
    responses={status: {"model": ErrorResponse} for status in (402, 404, 409, 429, 500)},
)
def post_event(
    session_id: str,
    payload: FlowEventRequest,
    token: str = Depends(require_bearer),
    sessions: FlowSessionStore = Depends(get_flow_sessions),
    service: IdeaService = Depends(get_idea_service),
) -> FlowSessionResponse:
    """Apply a user event; entering the loading screen runs the idea service.

    On failure the session returns to the screen that started the load and
    the upstream error status is returned.
    """

    event = parse_user_event(payload.type, payload.profile, payload.user_idea)
    screen = transition(sessions.get(session_id, token), event)
    sessions.set(session_id, token, screen)

    if isinstance(screen, Loading):
        try:
            batch = service.run(screen.profile, screen.mode, screen.user_idea)
        except Exception as exc:
            _complete(sessions, session_id, token, GenerationFailed(exc, screen.request_id))
            logger.info("Generation failed for session %s", session_id)
            raise
        _complete(sessions, session_id, token, GenerationSucceeded(batch, screen.request_id))

    return FlowSessionResponse(session_id=session_id, state=describe(sessions.get(session_id, token)))
