"""
Content Service Tests

Derived metrics (word_count, reading_time), reachability through niche or
site, and AI generation.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from nichelab.auth.identity import RequestIdentity
from nichelab.errors import TransportError
from nichelab.results import ServiceResult
from nichelab.services import ContentService, NicheService, NicheSiteService, SimulatedDataProvider, derive_metrics


@pytest.fixture
def niche(identity, session_factory):
    return NicheService(identity, session_factory).create_niche({"name": "Trail Running"}).data


@pytest.fixture
def site(identity, session_factory):
    return NicheSiteService(identity, session_factory).create_site({"name": "TrailHub"}).data


@pytest.fixture
def content(identity, session_factory):
    return ContentService(identity, session_factory, simulator=SimulatedDataProvider(seed=1))


def words(count: int) -> str:
    return " ".join(["stride"] * count)


class TestDerivedMetrics:

    @pytest.mark.parametrize("count,minutes", [(0, 0), (150, 1), (200, 1), (201, 2), (401, 3)])
    def test_reading_time_rounds_up(self, count, minutes):
        assert derive_metrics(words(count)) == {"word_count": count, "reading_time": minutes}

    def test_whitespace_runs(self):
        assert derive_metrics("  hill \n\n repeats\tand   tempo ")["word_count"] == 4

    def test_create_computes_metrics(self, content, niche):
        row = content.create_content({
            "niche_id": niche["id"],
            "title": "Hill Repeats",
            "body": words(150),
            "word_count": 9999,
            "reading_time": 42,
        }).data

        assert row["word_count"] == 150
        assert row["reading_time"] == 1

    def test_update_recomputes_on_new_body(self, content, niche):
        row = content.create_content({"niche_id": niche["id"], "title": "Tempo Runs", "body": words(150)}).data

        updated = content.update_content(row["id"], {"body": words(401)}).data

        assert updated["word_count"] == 401
        assert updated["reading_time"] == 3

    def test_update_without_body_keeps_metrics(self, content, niche):
        row = content.create_content({"niche_id": niche["id"], "title": "Tempo Runs", "body": words(401)}).data

        updated = content.update_content(row["id"], {"title": "Tempo Runs 101", "word_count": 1}).data

        assert updated["title"] == "Tempo Runs 101"
        assert updated["word_count"] == 401


class TestReachability:

    def test_requires_a_parent(self, content):
        result = content.create_content({"title": "Orphan"})

        assert result.kind == "invalid_input"

    def test_site_only_content(self, content, site):
        row = content.create_content({"niche_site_id": site["id"], "title": "Gear list", "body": "shoes"}).data

        assert row["niche_id"] is None
        assert [c["id"] for c in content.get_content_by_site(site["id"]).data] == [row["id"]]

    def test_foreign_parent_rejected(self, niche, bob, session_factory):
        theirs = ContentService(RequestIdentity(bob), session_factory)

        assert theirs.create_content({"niche_id": niche["id"], "title": "x"}).kind == "not_found"

    def test_foreign_content_invisible(self, content, niche, bob, session_factory):
        row = content.create_content({"niche_id": niche["id"], "title": "Mine", "body": "a b"}).data
        theirs = ContentService(RequestIdentity(bob), session_factory)

        assert theirs.get_user_content().data == []
        assert theirs.get_content(row["id"]).kind == "not_found"
        assert theirs.update_content(row["id"], {"title": "Theirs"}).kind == "not_found"
        assert theirs.delete_content(row["id"]).kind == "not_found"
        assert theirs.get_content_performance(row["id"]).kind == "not_found"

    def test_update_cannot_drop_last_parent(self, content, niche):
        row = content.create_content({"niche_id": niche["id"], "title": "Hill Repeats"}).data

        result = content.update_content(row["id"], {"niche_id": None})

        assert result.kind == "invalid_input"
        assert result.error == "Content must belong to a niche or a site"
        assert content.get_content(row["id"]).data["niche_id"] == niche["id"]

    def test_update_can_move_between_parents(self, content, niche, site):
        row = content.create_content({"niche_id": niche["id"], "title": "Gear list"}).data

        moved = content.update_content(row["id"], {"niche_id": None, "niche_site_id": site["id"]}).data

        assert moved["niche_id"] is None
        assert moved["niche_site_id"] == site["id"]
        assert content.get_content(row["id"]).success

    def test_update_to_foreign_parent_rejected(self, content, niche, bob, session_factory):
        row = content.create_content({"niche_id": niche["id"], "title": "Mine"}).data
        their_niche = NicheService(RequestIdentity(bob), session_factory).create_niche({"name": "Theirs"}).data

        result = content.update_content(row["id"], {"niche_id": their_niche["id"]})

        assert result.kind == "not_found"
        assert content.get_content(row["id"]).data["niche_id"] == niche["id"]

    def test_user_content_spans_niches_and_sites(self, content, niche, site):
        content.create_content({"niche_id": niche["id"], "title": "One"})
        content.create_content({"niche_site_id": site["id"], "title": "Two"})
        content.create_content({"niche_id": niche["id"], "niche_site_id": site["id"], "title": "Three"})

        assert len(content.get_user_content().data) == 3
        assert len(content.get_content_by_niche(niche["id"]).data) == 2
        assert len(content.get_recent_content(limit=1).data) == 1

    def test_search(self, content, niche, site):
        content.create_content({"niche_id": niche["id"], "title": "Ultra prep", "body": "long miles"})
        content.create_content({"niche_site_id": site["id"], "title": "Shoes", "body": "ULTRA cushioned"})

        assert len(content.search_content("ultra").data) == 2
        assert len(content.search_content("ultra", site_id=site["id"]).data) == 1

    def test_bulk_create(self, content, niche):
        rows = content.bulk_create_content([
            {"niche_id": niche["id"], "title": "A", "body": words(10)},
            {"niche_id": niche["id"], "title": "B", "body": words(250)},
        ]).data

        assert [r["reading_time"] for r in rows] == [1, 2]

    def test_analytics(self, content, niche):
        content.create_content({"niche_id": niche["id"], "title": "A", "body": words(300)})
        content.create_content({"niche_id": niche["id"], "title": "B", "body": words(100)})

        data = content.get_content_analytics(niche_id=niche["id"]).data

        assert data["totalContent"] == 2
        assert data["totalWordCount"] == 400
        assert data["averageWordCount"] == 200
        assert data["totalReadingTime"] == 3
        assert sum(data["contentByMonth"].values()) == 2

    def test_performance_is_simulated(self, content, niche):
        row = content.create_content({"niche_id": niche["id"], "title": "A"}).data

        data = content.get_content_performance(row["id"]).data

        assert data["contentId"] == row["id"]
        assert 0 <= data["conversionRate"] <= 10


class TestGeneration:

    @pytest.fixture
    def ai(self):
        ai = MagicMock()
        ai.generate_content = AsyncMock(return_value=ServiceResult.ok({
            "title": "Trail Shoes Buying Guide",
            "body": words(250),
            "wordCount": 1200,
            "readingTime": 6,
            "keywords": ["trail shoes"],
            "metaDescription": "Pick the right trail shoe",
        }))
        return ai

    @pytest.mark.asyncio
    async def test_generated_article_is_stored(self, ai, identity, session_factory, niche):
        service = ContentService(identity, session_factory, ai=ai)

        result = await service.generate_content(
            "Trail Shoes", "trail running", length="short", keywords=["trail shoes"], niche_id=niche["id"],
        )

        assert result.success
        row = result.data
        assert row["title"] == "Trail Shoes Buying Guide"
        assert row["word_count"] == 250
        assert row["reading_time"] == 2
        assert row["meta_description"] == "Pick the right trail shoe"
        assert row["keywords"] == ["trail shoes"]
        assert row["niche_id"] == niche["id"]
        ai.generate_content.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_ai_failure_stores_nothing(self, ai, identity, session_factory, niche):
        ai.generate_content.return_value = ServiceResult.fail(TransportError("timeout"))
        service = ContentService(identity, session_factory, ai=ai)

        result = await service.generate_content("Trail Shoes", "trail running", niche_id=niche["id"])

        assert result.kind == "transport"
        assert service.get_user_content().data == []

    @pytest.mark.asyncio
    async def test_parent_checked_before_ai_call(self, ai, identity, session_factory):
        service = ContentService(identity, session_factory, ai=ai)

        result = await service.generate_content("Trail Shoes", "trail running")

        assert result.kind == "invalid_input"
        ai.generate_content.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_without_ai(self, identity, session_factory, niche):
        result = await ContentService(identity, session_factory).generate_content(
            "Trail Shoes", "trail running", niche_id=niche["id"],
        )

        assert result.kind == "configuration"
