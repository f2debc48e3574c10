"""Idea Forge backend package."""

from .app import create_app
from .config import get_ai_settings

__all__ = ["create_app", "get_ai_settings"]
