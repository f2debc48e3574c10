"""Application factory for the Idea Forge FastAPI backend."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from openai import OpenAI

from .builder import BuilderService
from .config import AISettings, get_ai_settings
from .errors import IdeaForgeError
from .ideas import IdeaService
from .llm import StructuredOutputClient
from .logging_config import configure_logging
from .memory import BuilderResultStore, FlowSessionStore
from .routers import builder, ideas, sessions

logger = logging.getLogger(__name__)

CORS_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


def _format_validation_error(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request body."


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(IdeaForgeError)
    async def handle_idea_forge_error(request: Request, exc: IdeaForgeError) -> JSONResponse:
        logger.warning("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"error": _format_validation_error(exc)})

    # Must sit inside CORSMiddleware; an Exception handler would run outside
    # it and its 500s would lack CORS headers.
    @app.middleware("http")
    async def convert_unexpected_errors(request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            logger.exception("%s %s crashed", request.method, request.url.path)
            return JSONResponse(status_code=500, content={"error": "Unknown error"})


def create_app(settings: AISettings | None = None, openai_client: OpenAI | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    *openai_client* replaces the lazily built gateway client, which lets
    tests run without network access.
    """

    settings = settings or get_ai_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Idea Forge Backend",
        version="0.1.0",
        description="AI-powered business idea generation and validation backend.",
    )
    ai_client = StructuredOutputClient(settings, client=openai_client)
    app.state.ai_settings = settings
    app.state.idea_service = IdeaService(ai_client)
    app.state.builder_service = BuilderService(ai_client)
    app.state.builder_results = BuilderResultStore()
    app.state.flow_sessions = FlowSessionStore()

    _register_error_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=CORS_ALLOWED_HEADERS,
    )

    @app.get("/health")
    async def healthcheck() -> dict[str, str]:
        """Simple health check endpoint."""

        return {"status": "ok"}

    app.include_router(ideas.router)
    app.include_router(builder.router)
    app.include_router(sessions.router)

    if not settings.has_api_key and openai_client is None:
        logger.warning("No AI gateway key configured; AI endpoints will fail until one is set")
    return app


app = create_app()
