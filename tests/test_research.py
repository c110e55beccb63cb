"""
Niche Research Workflow Tests

conduct_niche_research stages: AI call, niche insert, keyword bulk insert,
combined payload. Plus the calendar, viability and trend helpers.
"""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from nichelab.errors import ParseError, PersistenceError, TransportError
from nichelab.results import ServiceResult
from nichelab.services import KeywordService, NicheService, ResearchService, SimulatedDataProvider
from nichelab.services.aggregates import competition_breakdown
from nichelab.services.research import calculate_viability_score, month_keys, summarize_research


@pytest.fixture
def mock_ai(research_payload):
    """AI service whose research call succeeds."""
    ai = MagicMock()
    ai.research_niche = AsyncMock(return_value=ServiceResult.ok(research_payload))
    ai.analyze_competition = AsyncMock(return_value=ServiceResult.ok({
        "overview": "Crowded at the top, thin in the middle",
        "competitors": [{"name": "GardenBlog", "marketPosition": "dominant", "estimatedTraffic": "high"}],
        "opportunities": ["Video tutorials"],
        "recommendations": [],
    }))
    return ai


@pytest.fixture
def research(mock_ai, identity, session_factory):
    return ResearchService(
        mock_ai,
        NicheService(identity, session_factory),
        KeywordService(identity, session_factory),
        simulator=SimulatedDataProvider(seed=7),
    )


# =============================================================================
# WORKFLOW
# =============================================================================

class TestConductNicheResearch:
    """The staged research workflow."""

    @pytest.mark.asyncio
    async def test_stores_niche_and_keywords(self, research, research_payload, alice):
        result = await research.conduct_niche_research("indoor herbs")

        assert result.success
        data = result.data
        assert data["niche"]["name"] == "Indoor Herb Gardening"
        assert data["niche"]["user_id"] == alice.id
        assert data["niche"]["competition_level"] == "low"
        assert len(data["keywords"]) == 4
        assert {k["niche_id"] for k in data["keywords"]} == {data["niche"]["id"]}
        assert data["opportunities"] == research_payload["opportunities"]
        assert data["painPoints"] == research_payload["painPoints"]
        assert data["contentIdeas"] == research_payload["contentIdeas"]

        stored = research.niche_service.get_niche(data["niche"]["id"])
        assert len(stored.data["keywords"]) == 4

    @pytest.mark.asyncio
    async def test_research_summary(self, research):
        result = await research.conduct_niche_research("indoor herbs")

        summary = result.data["researchSummary"]
        assert summary["totalKeywords"] == 4
        assert summary["averageSearchVolume"] == 2225
        assert summary["monetizationScore"] == 72
        assert summary["competitionBreakdown"] == {
            "low": {"count": 2, "percentage": 50.0},
            "medium": {"count": 1, "percentage": 25.0},
            "high": {"count": 1, "percentage": 25.0},
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,kind,status_code", [
        (TransportError("OpenRouter API error: 500", status_code=500), "transport", 500),
        (ParseError("Invalid JSON response from AI"), "parse", None),
    ])
    async def test_ai_failure_persists_nothing(self, error, kind, status_code):
        failure = ServiceResult.fail(error)
        ai = MagicMock()
        ai.research_niche = AsyncMock(return_value=failure)
        niches = MagicMock()
        keywords = MagicMock()

        result = await ResearchService(ai, niches, keywords).conduct_niche_research("indoor herbs")

        assert result is failure
        assert result.kind == kind
        assert result.details.get("status_code") == status_code
        assert niches.create_niche.call_count == 0
        assert keywords.create_keywords.call_count == 0

    @pytest.mark.asyncio
    async def test_niche_insert_failure_is_returned(self, mock_ai):
        niches = MagicMock()
        niches.create_niche.return_value = ServiceResult.fail(PersistenceError("Failed to create niches: locked"))
        keywords = MagicMock()

        result = await ResearchService(mock_ai, niches, keywords).conduct_niche_research("indoor herbs")

        assert not result.success
        assert result.kind == "persistence"
        assert keywords.create_keywords.call_count == 0

    @pytest.mark.asyncio
    async def test_keyword_failure_still_succeeds(self, mock_ai, research_payload, identity, session_factory):
        keywords = MagicMock()
        keywords.create_keywords.return_value = ServiceResult.fail(PersistenceError("Failed to create keywords"))
        service = ResearchService(mock_ai, NicheService(identity, session_factory), keywords)

        result = await service.conduct_niche_research("indoor herbs")

        assert result.success
        assert result.data["keywords"] == []
        assert result.data["niche"]["name"] == "Indoor Herb Gardening"
        assert result.data["researchSummary"]["totalKeywords"] == 4
        assert result.data["opportunities"] == research_payload["opportunities"]
        assert result.data["painPoints"] == research_payload["painPoints"]
        assert result.data["contentIdeas"] == research_payload["contentIdeas"]
        assert keywords.create_keywords.call_count == 1

    @pytest.mark.asyncio
    async def test_unauthenticated_research_stores_nothing(self, mock_ai, anonymous, session_factory):
        service = ResearchService(
            mock_ai, NicheService(anonymous, session_factory), KeywordService(anonymous, session_factory),
        )

        result = await service.conduct_niche_research("indoor herbs")

        assert result.kind == "not_authenticated"
        assert result.error == "User not authenticated"


class TestBackgroundAnalysis:
    """Competitive analysis scheduled after research."""

    @pytest.mark.asyncio
    async def test_background_task_runs_and_is_released(self, research, mock_ai):
        task = research.start_background_analysis("indoor herbs", ["gardenblog.com"])
        assert task in research._background

        await task

        mock_ai.analyze_competition.assert_awaited_once_with("indoor herbs", ["gardenblog.com"])
        await asyncio.sleep(0)
        assert task not in research._background

    @pytest.mark.asyncio
    async def test_background_failure_is_only_logged(self, research, mock_ai, caplog):
        mock_ai.analyze_competition.return_value = ServiceResult.fail(TransportError("down", status_code=503))

        await research.run_competitive_analysis("indoor herbs")

        assert "failed: down" in caplog.text


# =============================================================================
# CONTENT CALENDAR
# =============================================================================

class TestContentCalendar:

    @pytest.mark.asyncio
    async def test_ideas_spread_over_months(self, research, mock_ai, content_ideas):
        niche = research.niche_service.create_niche({"name": "Indoor Herb Gardening"}).data
        mock_ai.generate_content_ideas = AsyncMock(return_value=ServiceResult.ok({"contentIdeas": content_ideas}))

        result = await research.generate_content_calendar(niche["id"], months=3, start=date(2024, 11, 5))

        assert result.success
        mock_ai.generate_content_ideas.assert_awaited_once_with("Indoor Herb Gardening", "mixed", 24)
        calendar = result.data["calendar"]
        assert list(calendar) == ["2024-11", "2024-12", "2025-01"]
        assert [len(ideas) for ideas in calendar.values()] == [4, 4, 2]
        assert result.data["timeframe"] == "3 months"

        summary = result.data["summary"]
        assert summary["totalContent"] == 10
        assert summary["contentTypes"] == {"listicle": 5, "how-to guide": 5}
        assert summary["difficultyBreakdown"] == {"easy": 4, "medium": 3, "hard": 3}
        assert summary["estimatedWorkload"] == {"totalWords": 10000, "estimatedHours": 20, "estimatedDays": 3}

    @pytest.mark.asyncio
    async def test_zero_months_rejected(self, research, mock_ai):
        result = await research.generate_content_calendar("00000000-0000-4000-8000-000000000000", months=0)

        assert result.kind == "invalid_input"

    @pytest.mark.asyncio
    async def test_unknown_niche(self, research, mock_ai):
        mock_ai.generate_content_ideas = AsyncMock()

        result = await research.generate_content_calendar("00000000-0000-4000-8000-000000000000")

        assert result.kind == "not_found"
        mock_ai.generate_content_ideas.assert_not_awaited()

    def test_month_keys_wrap_year(self):
        assert month_keys(4, date(2023, 10, 31)) == ["2023-10", "2023-11", "2023-12", "2024-01"]


# =============================================================================
# VIABILITY AND AGGREGATES
# =============================================================================

class TestViability:

    def test_excellent_niche(self, research):
        result = research.validate_niche_viability({
            "searchVolume": 25000,
            "competitionLevel": "low",
            "monetizationPotential": 80,
            "keywords": list(range(12)),
        })

        assert result.data["viabilityScore"] == 84
        assert result.data["rating"] == "Excellent"
        assert "High search volume indicates strong market demand" in result.data["strengths"]
        assert result.data["nextSteps"][0] == "Proceed with content creation and site development"

    def test_half_points_round_up(self):
        # 10 + 5 + 22.5 + 0
        assert calculate_viability_score(3000, "high", 75, 0) == 38

    def test_weak_niche(self, research):
        result = research.validate_niche_viability({
            "searchVolume": 3000,
            "competitionLevel": "high",
            "monetizationPotential": 30,
        })

        data = result.data
        assert data["rating"] == "Very Poor"
        assert "Focus on long-tail keywords to avoid high competition" in data["recommendations"]
        assert "Low search volume may limit audience reach" in data["weaknesses"]
        assert "Limited monetization options may affect profitability" in data["weaknesses"]


class TestAggregates:

    def test_competition_breakdown_percentages(self):
        assert competition_breakdown(["low", "low", "medium", "high"]) == {
            "low": {"count": 2, "percentage": 50.0},
            "medium": {"count": 1, "percentage": 25.0},
            "high": {"count": 1, "percentage": 25.0},
        }

    def test_competition_breakdown_empty(self):
        assert competition_breakdown([]) == {
            "low": {"count": 0, "percentage": 0.0},
            "medium": {"count": 0, "percentage": 0.0},
            "high": {"count": 0, "percentage": 0.0},
        }

    def test_average_search_volume(self):
        keywords = [{"searchVolume": v, "competitionLevel": "low"} for v in (2400, 1800, 3200, 1500, 2800)]

        summary = summarize_research({"monetizationPotential": 60}, keywords)

        assert summary["averageSearchVolume"] == 2340


class TestTrends:

    def test_search_trends_shape(self, research):
        result = research.analyze_search_trends(["basil", {"name": "mint"}])

        trends = result.data["trends"]
        assert [t["keyword"] for t in trends] == ["basil", "mint"]
        assert len(trends[0]["seasonality"]) == 12
        assert trends[1]["relatedQueries"][0] == "best mint"
        assert result.data["summary"]["overallTrend"]["direction"] in ("positive", "negative")
        assert len(result.data["summary"]["bestPerformingKeywords"]) == 2

    def test_trending_niches_fixed(self, research):
        assert len(research.get_trending_niches().data) == 3
