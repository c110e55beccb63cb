"""
User Service Tests

Registration, profile updates, plan changes, account stats and deletion.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from nichelab.auth.identity import AuthUser, RequestIdentity
from nichelab.auth.models import User
from nichelab.database import CollectionGateway, Keyword
from nichelab.errors import NotAuthenticatedError
from nichelab.results import ServiceResult
from nichelab.services import ContentService, KeywordService, NicheService, NicheSiteService, UserService


@pytest.fixture
def users(identity, session_factory):
    return UserService(identity, session_factory)


class TestRegistration:

    @pytest.fixture
    def auth(self):
        auth = MagicMock()
        new_user = AuthUser(id=str(uuid4()), email="carol@example.com", name="Carol")
        auth.sign_up = AsyncMock(return_value=ServiceResult.ok({"user": new_user, "session": None}))
        return auth

    @pytest.mark.asyncio
    async def test_register_creates_free_profile(self, auth, anonymous, session_factory):
        result = await UserService(anonymous, session_factory).register(
            auth, "carol@example.com", "hunter22", "Carol",
        )

        assert result.success
        profile = result.data["user"]
        assert profile["email"] == "carol@example.com"
        assert profile["name"] == "Carol"
        assert profile["plan_type"] == "free"
        assert result.data["session"] is None
        auth.sign_up.assert_awaited_once_with("carol@example.com", "hunter22", "Carol")

    @pytest.mark.asyncio
    async def test_sign_up_failure_creates_nothing(self, auth, anonymous, session_factory):
        auth.sign_up.return_value = ServiceResult.fail(NotAuthenticatedError("User already registered"))

        result = await UserService(anonymous, session_factory).register(auth, "carol@example.com", "hunter22")

        assert result.kind == "not_authenticated"
        assert result.error == "User already registered"
        assert CollectionGateway(User, session_factory).count({"email": "carol@example.com"}).data == 0

    @pytest.mark.asyncio
    async def test_duplicate_profile_fails_registration(self, auth, alice, anonymous, session_factory):
        auth.sign_up.return_value = ServiceResult.ok({"user": alice, "session": None})

        result = await UserService(anonymous, session_factory).register(auth, alice.email, "hunter22")

        assert result.kind == "persistence"


class TestProfile:

    def test_current_profile(self, users, alice):
        profile = users.get_current_profile().data

        assert profile["id"] == alice.id
        assert profile["plan_type"] == "free"

    def test_missing_profile(self, session_factory):
        ghost = RequestIdentity(AuthUser(id=str(uuid4()), email="ghost@example.com"))

        assert UserService(ghost, session_factory).get_current_profile().kind == "not_found"

    def test_update_profile(self, users):
        assert users.update_profile({"name": "Alice B."}).data["name"] == "Alice B."

    def test_update_profile_rejects_other_fields(self, users):
        result = users.update_profile({"name": "x", "plan_type": "enterprise"})

        assert result.kind == "invalid_input"
        assert result.details["fields"] == ["plan_type"]
        assert users.get_current_profile().data["plan_type"] == "free"

    def test_update_plan(self, users):
        assert users.update_plan("pro").data["plan_type"] == "pro"
        assert users.update_plan("platinum").kind == "invalid_input"

    def test_unauthenticated(self, anonymous, session_factory):
        assert UserService(anonymous, session_factory).get_current_profile().kind == "not_authenticated"


class TestAccount:

    @pytest.fixture
    def owned_data(self, identity, session_factory):
        niche = NicheService(identity, session_factory).create_niche({"name": "Aquascaping"}).data
        site = NicheSiteService(identity, session_factory).create_site({"name": "TankTales"}).data
        KeywordService(identity, session_factory).create_keyword({"niche_id": niche["id"], "name": "co2 kit"})
        content = ContentService(identity, session_factory)
        content.create_content({"niche_id": niche["id"], "title": "Layouts"})
        content.create_content({"niche_site_id": site["id"], "title": "Plants"})
        return niche, site

    @pytest.mark.asyncio
    async def test_stats(self, users, owned_data, bob, session_factory):
        NicheService(RequestIdentity(bob), session_factory).create_niche({"name": "Not Alice's"})

        stats = (await users.get_user_stats()).data

        assert stats == {"nichesCount": 1, "sitesCount": 1, "contentCount": 2}

    def test_delete_account_cascades(self, users, owned_data, identity, session_factory):
        assert users.delete_account().data == {"deleted": True}

        assert users.get_current_profile().kind == "not_found"
        assert NicheService(identity, session_factory).get_niches().data == []
        assert NicheSiteService(identity, session_factory).get_sites().data == []
        assert CollectionGateway(Keyword, session_factory).count().data == 0
