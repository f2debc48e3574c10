"""Structured-output client for the chat-completions model gateway."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

from openai import APIConnectionError, APIStatusError, APITimeoutError, OpenAI, RateLimitError

from .config import AISettings
from .errors import (
    ConfigurationError,
    MalformedResponse,
    UpstreamError,
    UpstreamQuotaExhausted,
    UpstreamRateLimited,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolDefinition:
    """A function tool the model is forced to call."""

    name: str
    description: str
    parameters: Dict[str, Any]

    @property
    def required_keys(self) -> Tuple[str, ...]:
        return tuple(self.parameters.get("required", ()))

    def as_tool(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    def as_tool_choice(self) -> Dict[str, Any]:
        return {"type": "function", "function": {"name": self.name}}


@dataclass(frozen=True)
class PromptSpec:
    """Container describing one structured call to the model."""

    system_prompt: str
    user_prompt: str
    tool: ToolDefinition


class StructuredOutputClient:
    """Send a prompt pair plus a tool schema and return the tool arguments.

    Every call is a single round trip: the underlying OpenAI client is built
    with ``max_retries=0`` and nothing is cached between calls.
    """

    def __init__(self, settings: AISettings, client: OpenAI | None = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def model(self) -> str:
        return self._settings.model

    def _get_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        if not self._settings.api_key:
            raise ConfigurationError()
        self._client = OpenAI(
            api_key=self._settings.api_key,
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
            max_retries=0,
        )
        return self._client

    def complete(self, spec: PromptSpec, *, quota_errors: bool = True) -> Dict[str, Any]:
        """Call the model in forced tool mode and return the parsed arguments.

        When *quota_errors* is false an HTTP 402 is reported as a generic
        :class:`UpstreamError` instead of :class:`UpstreamQuotaExhausted`.
        """

        client = self._get_client()
        logger.debug("Calling %s with tool %s", self.model, spec.tool.name)
        try:
            response = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": spec.system_prompt.strip()},
                    {"role": "user", "content": spec.user_prompt.strip()},
                ],
                tools=[spec.tool.as_tool()],
                tool_choice=spec.tool.as_tool_choice(),
            )
        except RateLimitError as exc:
            logger.warning("AI gateway rate limited the request for %s", spec.tool.name)
            raise UpstreamRateLimited() from exc
        except APIStatusError as exc:
            if exc.status_code == 429:
                raise UpstreamRateLimited() from exc
            if exc.status_code == 402 and quota_errors:
                logger.warning("AI gateway reported exhausted credits")
                raise UpstreamQuotaExhausted() from exc
            logger.error("AI gateway error: %s %s", exc.status_code, exc.message)
            raise UpstreamError(f"AI gateway error: {exc.status_code}") from exc
        except APITimeoutError as exc:
            logger.error("AI gateway timed out after %ss", self._settings.timeout_seconds)
            raise UpstreamError("AI gateway timed out") from exc
        except APIConnectionError as exc:
            logger.error("AI gateway unreachable: %s", exc)
            raise UpstreamError("AI gateway unreachable") from exc

        return _parse_tool_arguments(response, spec.tool)


def _parse_tool_arguments(response: Any, tool: ToolDefinition) -> Dict[str, Any]:
    """Pull ``choices[0].message.tool_calls[0].function.arguments`` and decode it."""

    choices = getattr(response, "choices", None) or []
    message = choices[0].message if choices else None
    tool_calls = getattr(message, "tool_calls", None) or []
    function = getattr(tool_calls[0], "function", None) if tool_calls else None
    arguments = getattr(function, "arguments", None)
    if not arguments:
        logger.error("Model answered without calling %s", tool.name)
        raise MalformedResponse()

    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as exc:
        logger.error("Unparsable arguments for %s: %.200s", tool.name, arguments)
        raise MalformedResponse("AI returned unparsable structured output") from exc

    if not isinstance(parsed, dict):
        raise MalformedResponse("AI returned structured output of the wrong shape")

    missing = [key for key in tool.required_keys if key not in parsed]
    if missing:
        logger.error("Arguments for %s missing keys: %s", tool.name, ", ".join(missing))
        raise MalformedResponse(f"AI response is missing: {', '.join(missing)}")
    return parsed
