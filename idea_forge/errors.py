"""Error taxonomy shared by the services and the HTTP boundary."""

from __future__ import annotations


class IdeaForgeError(Exception):
    """Base error carrying the HTTP status and a user-facing message."""

    status_code: int = 500
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredential(IdeaForgeError):
    status_code = 401
    default_message = "Missing authorization header"


class InvalidRequest(IdeaForgeError):
    status_code = 400
    default_message = "Invalid request."


class UpstreamRateLimited(IdeaForgeError):
    status_code = 429
    default_message = "Rate limit exceeded. Please try again in a moment."


class UpstreamQuotaExhausted(IdeaForgeError):
    status_code = 402
    default_message = "AI credits exhausted. Please add credits to continue."


class UpstreamError(IdeaForgeError):
    status_code = 500
    default_message = "AI gateway error. Please try again."


class MalformedResponse(IdeaForgeError):
    status_code = 500
    default_message = "No structured response from AI"


class UnknownMode(IdeaForgeError):
    status_code = 500


class UnknownAction(IdeaForgeError):
    status_code = 500


class ConfigurationError(IdeaForgeError):
    status_code = 500
    default_message = "AI gateway API key is not configured"


class InvalidTransition(IdeaForgeError):
    status_code = 409
    default_message = "That action is not available on the current screen."


class SessionNotFound(IdeaForgeError):
    status_code = 404
