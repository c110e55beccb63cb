"""
API Tests

Routers exercised through FastAPI's TestClient against the per-test SQLite
database. Startup hooks are not run; the AI service is overridden.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import jwt
from fastapi.testclient import TestClient

from api.app import app
from api.common import get_ai_service
from nichelab.auth.config import AuthConfig
from nichelab.auth.identity import SupabaseIdentityService
from nichelab.errors import ConfigurationError
from nichelab.results import ServiceResult
from nichelab.services import AIService

SECRET = "api-test-secret-key-of-32-bytes!"


@pytest.fixture
def dev_auth(session_factory):
    """Auth disabled: every request acts as the development user."""
    with patch("nichelab.auth.dependencies.get_auth_config", return_value=AuthConfig(auth_enabled=False)):
        yield


@pytest.fixture
def jwt_auth(session_factory):
    config = AuthConfig(
        supabase_url="https://test.supabase.co",
        supabase_jwt_secret=SECRET,
        auth_enabled=True,
    )
    with patch("nichelab.auth.dependencies.get_auth_config", return_value=config):
        yield config


def token_for(user_id: str, email: str) -> str:
    return jwt.encode(
        {
            "sub": user_id,
            "email": email,
            "aud": "authenticated",
            "exp": int((datetime.utcnow() + timedelta(hours=1)).timestamp()),
        },
        SECRET,
        algorithm="HS256",
    )


@pytest.fixture
def client():
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def ai(research_payload):
    ai = MagicMock()
    ai.research_niche = AsyncMock(return_value=ServiceResult.ok(research_payload))
    app.dependency_overrides[get_ai_service] = lambda: ai
    return ai


def create_niche(client, headers=None, **overrides):
    body = {"name": "Smart Home Security", "competition_level": "medium", **overrides}
    response = client.post("/api/niches", json=body, headers=headers or {})
    assert response.status_code == 201
    return response.json()["data"]


# =============================================================================
# HEALTH
# =============================================================================

class TestHealth:

    def test_root(self, client):
        assert client.get("/").json() == {"status": "ok", "service": "NicheLab"}

    def test_health_reports_database(self, client, monkeypatch):
        monkeypatch.setattr("api.app.check_db_connection", lambda: False)

        body = client.get("/api/health").json()

        assert body["status"] == "healthy"
        assert body["database"] == "disconnected"


# =============================================================================
# AUTHENTICATION
# =============================================================================

class TestBearerAuth:

    def test_missing_token(self, client, jwt_auth):
        response = client.get("/api/niches")

        assert response.status_code == 401

    def test_invalid_token(self, client, jwt_auth):
        response = client.get("/api/niches", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_token_scopes_requests(self, client, jwt_auth):
        alice = {"Authorization": f"Bearer {token_for(str(uuid4()), 'alice@example.com')}"}
        bob = {"Authorization": f"Bearer {token_for(str(uuid4()), 'bob@example.com')}"}

        create_niche(client, alice)

        assert len(client.get("/api/niches", headers=alice).json()["data"]) == 1
        assert client.get("/api/niches", headers=bob).json()["data"] == []

    def test_profile_created_on_first_request(self, client, jwt_auth):
        headers = {"Authorization": f"Bearer {token_for(str(uuid4()), 'new@example.com')}"}

        response = client.get("/api/users/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["plan_type"] == "free"

    def test_logout_requires_token(self, client):
        response = client.post("/api/auth/logout")

        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "User not authenticated",
            "details": {"kind": "not_authenticated"},
        }


class TestAuthRoutes:

    @pytest.fixture
    def gotrue(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/signup"):
                return httpx.Response(200, json={"id": str(uuid4()), "email": "carol@example.com"})
            return httpx.Response(400, json={"error_description": "Invalid login credentials"})

        def make():
            return SupabaseIdentityService("https://test.supabase.co", "anon", transport=httpx.MockTransport(handler))

        with patch("api.auth.create_auth_client", side_effect=make):
            yield

    def test_register_creates_profile(self, client, session_factory, gotrue):
        response = client.post(
            "/api/auth/register",
            json={"email": "carol@example.com", "password": "hunter22", "name": "Carol"},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["plan_type"] == "free"
        assert data["session"] is None

    def test_login_bad_credentials(self, client, gotrue):
        response = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "x"})

        assert response.status_code == 401
        assert response.json()["details"]["kind"] == "not_authenticated"

    def test_unconfigured_backend(self, client):
        error = ConfigurationError("Missing Supabase environment variables", details={"missing": ["SUPABASE_URL"]})

        with patch("api.auth.create_auth_client", side_effect=error):
            response = client.post("/api/auth/login", json={"email": "carol@example.com", "password": "x"})

        assert response.status_code == 503
        assert response.json()["details"]["missing"] == ["SUPABASE_URL"]


# =============================================================================
# ENVELOPES AND STATUS CODES
# =============================================================================

class TestNicheRoutes:

    def test_crud(self, client, dev_auth):
        niche = create_niche(client, description="Cameras and locks")

        updated = client.patch(f"/api/niches/{niche['id']}", json={"monetization_potential": 80})
        assert updated.json()["data"]["monetization_potential"] == 80
        assert updated.json()["data"]["name"] == "Smart Home Security"

        found = client.get("/api/niches/search", params={"q": "locks"}).json()["data"]
        assert [n["id"] for n in found] == [niche["id"]]

        assert client.delete(f"/api/niches/{niche['id']}").status_code == 200
        assert client.get(f"/api/niches/{niche['id']}").status_code == 404

    def test_not_found_envelope(self, client, dev_auth):
        response = client.get(f"/api/niches/{uuid4()}")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["details"]["kind"] == "not_found"

    def test_malformed_id_is_not_found(self, client, dev_auth):
        response = client.get("/api/niches/not-a-uuid")

        assert response.status_code == 404
        assert response.json()["details"]["kind"] == "not_found"

    def test_request_validation(self, client, dev_auth):
        response = client.post("/api/niches", json={"name": "X", "competition_level": "extreme"})

        assert response.status_code == 422

    def test_stats(self, client, dev_auth):
        niche = create_niche(client)
        client.post("/api/keywords", json={"name": "door camera", "niche_id": niche["id"], "cpc_value": 2.0})

        stats = client.get(f"/api/niches/{niche['id']}/stats").json()["data"]

        assert stats["keywordCount"] == 1
        assert stats["contentCount"] == 0
        assert stats["averageCPC"] == 2.0


class TestKeywordAndContentRoutes:

    def test_bulk_keywords_and_top(self, client, dev_auth):
        niche = create_niche(client)
        rows = [
            {"name": "video doorbell", "search_volume": 900, "niche_id": niche["id"]},
            {"name": "smart lock", "search_volume": 4000, "niche_id": niche["id"]},
        ]

        created = client.post("/api/keywords/bulk", json=rows)
        top = client.get(f"/api/keywords/niche/{niche['id']}/top", params={"limit": 1})

        assert created.status_code == 201
        assert len(created.json()["data"]) == 2
        assert [k["name"] for k in top.json()["data"]] == ["smart lock"]

    def test_content_metrics_derived(self, client, dev_auth):
        niche = create_niche(client)

        response = client.post("/api/content", json={
            "title": "Choosing a smart lock",
            "body": " ".join(["word"] * 250),
            "niche_id": niche["id"],
        })

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["word_count"] == 250
        assert data["reading_time"] == 2

    def test_content_requires_parent(self, client, dev_auth):
        response = client.post("/api/content", json={"title": "Orphan"})

        assert response.status_code == 422
        assert response.json()["details"]["kind"] == "invalid_input"


class TestSiteRoutes:

    def test_revenue_and_portfolio(self, client, dev_auth):
        site = client.post("/api/sites", json={
            "name": "LockLab", "niche": "Smart Home Security", "monetization_method": "affiliate",
        }).json()["data"]

        client.put(f"/api/sites/{site['id']}/revenue", json={"revenue": 120.5})
        portfolio = client.get("/api/sites/portfolio").json()["data"]

        assert portfolio["totalSites"] == 1
        assert portfolio["totalRevenue"] == 120.5

    def test_negative_revenue(self, client, dev_auth):
        site = client.post("/api/sites", json={"name": "LockLab"}).json()["data"]

        response = client.put(f"/api/sites/{site['id']}/revenue", json={"revenue": -5})

        assert response.status_code == 422


# =============================================================================
# RESEARCH
# =============================================================================

class TestResearchRoutes:

    def test_research_stores_niche(self, client, dev_auth, ai):
        response = client.post("/api/research", json={"topic": "indoor herbs", "competitive_analysis": False})

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["niche"]["name"] == "Indoor Herb Gardening"
        assert len(data["keywords"]) == 4
        assert len(client.get("/api/niches").json()["data"]) == 1

    def test_ai_unconfigured(self, client, dev_auth, openrouter_factory):
        completion = openrouter_factory(lambda request: httpx.Response(500), api_key=None)
        app.dependency_overrides[get_ai_service] = lambda: AIService(completion)

        response = client.post("/api/research/keywords", json={"seed_keyword": "smart lock"})

        assert response.status_code == 503
        assert response.json()["details"]["kind"] == "configuration"
        assert completion.sent == []

    def test_viability(self, client, dev_auth):
        response = client.post("/api/research/viability", json={
            "searchVolume": 3000, "competitionLevel": "high", "monetizationPotential": 75,
        })

        assert response.json()["data"]["viabilityScore"] == 38
