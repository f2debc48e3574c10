"""FastAPI dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .builder import BuilderService
from .errors import MissingCredential
from .ideas import IdeaService
from .memory import BuilderResultStore, FlowSessionStore

bearer_scheme = HTTPBearer(auto_error=False)


def require_bearer(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """Require an ``Authorization: Bearer <token>`` header.

    The token is propagated, not verified; identity checks belong to the
    platform in front of this service.
    """

    if credentials is None or not credentials.credentials.strip():
        raise MissingCredential()
    return credentials.credentials


def get_idea_service(request: Request) -> IdeaService:
    return request.app.state.idea_service


def get_builder_service(request: Request) -> BuilderService:
    return request.app.state.builder_service


def get_builder_results(request: Request) -> BuilderResultStore:
    return request.app.state.builder_results


def get_flow_sessions(request: Request) -> FlowSessionStore:
    return request.app.state.flow_sessions
