from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from idea_forge.app import create_app
from idea_forge.config import AISettings
from idea_forge.llm import StructuredOutputClient
from tests.fakes import FakeOpenAI


@pytest.fixture
def settings() -> AISettings:
    return AISettings(api_key="test-key", key_source="IDEA_FORGE_AI_API_KEY", model="test-model")


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI()


@pytest.fixture
def ai_client(settings: AISettings, fake_openai: FakeOpenAI) -> StructuredOutputClient:
    return StructuredOutputClient(settings, client=fake_openai)


@pytest.fixture
def client(settings: AISettings, fake_openai: FakeOpenAI) -> TestClient:
    return TestClient(create_app(settings=settings, openai_client=fake_openai))


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": "Bearer test-token"}
