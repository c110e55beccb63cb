"""
Pytest Configuration and Shared Fixtures

Provides a throwaway SQLite database per test, signed-in identities and
canned AI payloads.
"""

import json
import pytest
from typing import Any, Callable, Dict, List
from uuid import uuid4

import httpx

from nichelab.auth.identity import AuthUser, RequestIdentity
from nichelab.auth.sync import sync_profile
from nichelab.database import session as db_session
from nichelab.database.session import create_db_engine, create_session_factory, get_db_context, init_db
from nichelab.integrations.openrouter import OpenRouterClient


# ============================================================================
# Database
# ============================================================================

@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine (worker threads share it) with all tables."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'nichelab_test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine, monkeypatch):
    """Session factory, also installed as the shared one."""
    factory = create_session_factory(engine)
    monkeypatch.setattr(db_session, "_SessionLocal", factory)
    return factory


# ============================================================================
# Identities
# ============================================================================

def _make_user(session_factory, email: str, name: str) -> AuthUser:
    user = AuthUser(id=str(uuid4()), email=email, name=name)
    with get_db_context(session_factory) as db:
        sync_profile(db, user)
    return user


@pytest.fixture
def alice(session_factory) -> AuthUser:
    """Signed-in user with a profile row."""
    return _make_user(session_factory, "alice@example.com", "Alice")


@pytest.fixture
def bob(session_factory) -> AuthUser:
    """Second user, for ownership checks."""
    return _make_user(session_factory, "bob@example.com", "Bob")


@pytest.fixture
def identity(alice) -> RequestIdentity:
    return RequestIdentity(alice)


@pytest.fixture
def anonymous() -> RequestIdentity:
    return RequestIdentity(None)


# ============================================================================
# AI payloads
# ============================================================================

@pytest.fixture
def research_payload() -> Dict[str, Any]:
    """Validated niche research reply (camelCase, as the client returns it)."""
    return {
        "niche": {
            "name": "Indoor Herb Gardening",
            "description": "Growing culinary herbs indoors year round",
            "searchVolume": 22000,
            "competitionLevel": "low",
            "monetizationPotential": 72,
        },
        "keywords": [
            {"name": "indoor herb garden kit", "searchVolume": 2400, "competitionLevel": "low", "cpcValue": 1.2},
            {"name": "grow basil indoors", "searchVolume": 1800, "competitionLevel": "medium", "cpcValue": 0.8},
            {"name": "best grow lights for herbs", "searchVolume": 3200, "competitionLevel": "high", "cpcValue": 2.5},
            {"name": "hydroponic herb garden", "searchVolume": 1500, "competitionLevel": "low", "cpcValue": 1.9},
        ],
        "opportunities": ["Beginner kits comparison", "Apartment lighting guides"],
        "painPoints": ["Herbs die in winter", "Not enough sunlight"],
        "contentIdeas": ["10 herbs that grow without sun", "Grow light buying guide"],
    }


@pytest.fixture
def content_ideas() -> List[Dict[str, Any]]:
    return [
        {
            "title": f"Idea {i}",
            "type": "how-to guide" if i % 2 else "listicle",
            "description": "",
            "targetKeywords": ["herbs"],
            "difficulty": ["easy", "medium", "hard"][i % 3],
            "engagementPotential": "medium",
            "estimatedWordCount": 1000,
        }
        for i in range(10)
    ]


# ============================================================================
# Mock OpenRouter
# ============================================================================

def _completion_body(content: str) -> Dict[str, Any]:
    """OpenAI-compatible chat completion body with a single reply."""
    return {
        "id": "gen-test",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


@pytest.fixture
def completion_body():
    return _completion_body


@pytest.fixture
def openrouter_factory():
    """
    Build an OpenRouterClient over a MockTransport.

    The handler receives each httpx.Request; sent requests are recorded on
    ``client.sent``.
    """

    def _create(handler: Callable[[httpx.Request], httpx.Response], api_key: str = "sk-or-test") -> OpenRouterClient:
        sent = []

        def record(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        client = OpenRouterClient(api_key=api_key, transport=httpx.MockTransport(record))
        client.sent = sent
        return client

    return _create


@pytest.fixture
def json_reply():
    """Handler answering every request with ``payload`` as the model reply."""
    def _handler(payload: Any, status_code: int = 200):
        def handle(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=_completion_body(json.dumps(payload)))
        return handle
    return _handler


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
