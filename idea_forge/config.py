"""Configuration helpers for the Idea Forge backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Tuple

from dotenv import load_dotenv

# Checked in priority order; the first non-empty value wins.
API_KEY_VARIABLES: Tuple[str, ...] = (
    "IDEA_FORGE_AI_API_KEY",
    "LOVABLE_API_KEY",
    "OPENAI_API_KEY",
)

DEFAULT_BASE_URL = "https://ai.gateway.lovable.dev/v1"
DEFAULT_MODEL = "google/gemini-3-flash-preview"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_LOG_LEVEL = "INFO"

load_dotenv(override=False)


@dataclass(frozen=True)
class AISettings:
    """Settings container for the model gateway and service runtime.

    The gateway key may come from several variables; ``key_source`` records
    which one supplied it so operators can tell a stray ``OPENAI_API_KEY``
    from a dedicated gateway key.
    """

    api_key: str | None = None
    key_source: str | None = None
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def has_api_key(self) -> bool:
        """True when a gateway key is configured."""

        return bool(self.api_key)


def _resolve_api_key(environ: Mapping[str, str]) -> Tuple[str | None, str | None]:
    for variable in API_KEY_VARIABLES:
        value = environ.get(variable)
        if value:
            return value, variable
    return None, None


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_SECONDS


@lru_cache(maxsize=1)
def get_ai_settings() -> AISettings:
    """Read environment variables and return cached settings."""

    environ = os.environ
    api_key, key_source = _resolve_api_key(environ)
    return AISettings(
        api_key=api_key,
        key_source=key_source,
        base_url=environ.get("IDEA_FORGE_AI_BASE_URL") or DEFAULT_BASE_URL,
        model=environ.get("IDEA_FORGE_AI_MODEL") or DEFAULT_MODEL,
        timeout_seconds=_parse_timeout(environ.get("IDEA_FORGE_AI_TIMEOUT")),
        log_level=(environ.get("IDEA_FORGE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
