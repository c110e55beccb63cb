"""
Research Service

The niche research workflow and its supplementary research operations.

conduct_niche_research runs in stages:
1. AI research: a failure is returned untouched and nothing is persisted
2. Niche creation: a failure is returned and the AI result is discarded
3. Keyword bulk create: a failure is logged and the workflow continues
   with an empty keyword list
4. The combined payload (created rows, AI pass-through lists and a summary)

Competitive analysis can be scheduled in the background after a successful
research run; its outcome never changes the research result.
"""

import asyncio
import logging
import math
from datetime import date
from typing import Any, Dict, List, Optional, Set, Union

from nichelab.errors import InvalidInputError
from nichelab.results import ServiceResult
from .aggregates import average, competition_breakdown
from .ai import AIService
from .base import envelope, unwrap
from .competitive import CompetitiveAnalysisService
from .keywords import KeywordService
from .niches import NicheService
from .simulated import SEASONAL_INSIGHTS, SimulatedDataProvider

logger = logging.getLogger(__name__)

IDEAS_PER_MONTH = 8
WORDS_PER_HOUR = 500
HOURS_PER_DAY = 8


def summarize_research(niche: Dict[str, Any], keywords: List[Dict[str, Any]]) -> Dict[str, Any]:
    """researchSummary block, computed from the AI keywords (not the stored ones)."""
    return {
        "totalKeywords": len(keywords),
        "averageSearchVolume": average([k.get("searchVolume") or 0 for k in keywords]),
        "competitionBreakdown": competition_breakdown([k.get("competitionLevel") for k in keywords]),
        "monetizationScore": niche.get("monetizationPotential"),
    }


def month_keys(months: int, start: Optional[date] = None) -> List[str]:
    """YYYY-MM keys for ``months`` consecutive months starting at ``start``."""
    start = start or date.today()
    keys = []
    for offset in range(months):
        index = start.month - 1 + offset
        keys.append(f"{start.year + index // 12}-{index % 12 + 1:02d}")
    return keys


def calculate_viability_score(
    search_volume: float,
    competition_level: Optional[str],
    monetization_potential: float,
    keyword_count: int,
) -> int:
    """0-100 viability score from volume, competition, monetization and keyword diversity."""
    score = 0.0

    if search_volume > 50000:
        score += 30
    elif search_volume > 20000:
        score += 25
    elif search_volume > 10000:
        score += 20
    elif search_volume > 5000:
        score += 15
    else:
        score += 10

    if competition_level == "low":
        score += 25
    elif competition_level == "medium":
        score += 15
    else:
        score += 5

    score += monetization_potential / 100 * 30

    if keyword_count > 20:
        score += 15
    elif keyword_count > 10:
        score += 10
    elif keyword_count > 5:
        score += 5

    # Half rounds up
    return int(math.floor(score + 0.5))


def viability_rating(score: int) -> str:
    if score >= 80:
        return "Excellent"
    if score >= 65:
        return "Good"
    if score >= 50:
        return "Fair"
    if score >= 35:
        return "Poor"
    return "Very Poor"


class ResearchService:
    """Niche research workflows."""

    def __init__(
        self,
        ai: AIService,
        niche_service: NicheService,
        keyword_service: KeywordService,
        competitive: Optional[CompetitiveAnalysisService] = None,
        simulator: Optional[SimulatedDataProvider] = None,
    ):
        self.ai = ai
        self.niche_service = niche_service
        self.keyword_service = keyword_service
        self.simulator = simulator or SimulatedDataProvider()
        self.competitive = competitive or CompetitiveAnalysisService(ai, self.simulator)
        self._background: Set[asyncio.Task] = set()

    # =========================================================================
    # NICHE RESEARCH WORKFLOW
    # =========================================================================

    async def conduct_niche_research(self, topic: str) -> ServiceResult:
        """
        Research a niche idea with the AI and persist the niche and keywords.

        Returns:
            ServiceResult with niche, keywords, opportunities, painPoints,
            contentIdeas and researchSummary
        """
        logger.info(f"Starting niche research: {topic}")

        ai_result = await self.ai.research_niche(topic)
        if not ai_result.success:
            logger.warning(f"Niche research for '{topic}' failed at the AI step: {ai_result.error}")
            return ai_result

        research = ai_result.data
        niche = research["niche"]
        keywords = research["keywords"]

        niche_result = await asyncio.to_thread(self.niche_service.create_niche, {
            "name": niche["name"],
            "description": niche.get("description"),
            "search_volume": niche["searchVolume"],
            "competition_level": niche["competitionLevel"],
            "monetization_potential": niche["monetizationPotential"],
        })
        if not niche_result.success:
            logger.warning(f"Niche research for '{topic}' failed to store the niche: {niche_result.error}")
            return niche_result

        created_niche = niche_result.data

        keywords_result = await asyncio.to_thread(self.keyword_service.create_keywords, [
            {
                "name": keyword["name"],
                "search_volume": keyword["searchVolume"],
                "competition_level": keyword["competitionLevel"],
                "cpc_value": keyword.get("cpcValue") or 0,
                "niche_id": created_niche["id"],
            }
            for keyword in keywords
        ])
        if keywords_result.success:
            saved_keywords = keywords_result.data
        else:
            logger.warning(f"Failed to save keywords for niche {created_niche['id']}: {keywords_result.error}")
            saved_keywords = []

        logger.info(
            f"Niche research complete: {created_niche['name']} "
            f"({len(saved_keywords)}/{len(keywords)} keywords stored)"
        )
        return ServiceResult.ok({
            "niche": created_niche,
            "keywords": saved_keywords,
            "opportunities": research.get("opportunities", []),
            "painPoints": research.get("painPoints", []),
            "contentIdeas": research.get("contentIdeas", []),
            "researchSummary": summarize_research(niche, keywords),
        })

    # =========================================================================
    # BACKGROUND COMPETITIVE ANALYSIS
    # =========================================================================

    async def run_competitive_analysis(self, topic: str, competitors: Optional[List[str]] = None) -> None:
        """Competitive analysis whose outcome is only logged."""
        try:
            result = await self.competitive.analyze_competitors(topic, competitors)
        except Exception as e:
            logger.error(f"Background competitive analysis for '{topic}' crashed: {e}", exc_info=True)
            return

        if result.success:
            logger.info(
                f"Background competitive analysis for '{topic}' complete: "
                f"{len(result.data.get('competitors', []))} competitors, "
                f"threat level {result.data['threatLevel']['level']}"
            )
        else:
            logger.warning(f"Background competitive analysis for '{topic}' failed: {result.error}")

    def start_background_analysis(self, topic: str, competitors: Optional[List[str]] = None) -> asyncio.Task:
        """Schedule competitive analysis on the running loop and return immediately."""
        task = asyncio.create_task(self.run_competitive_analysis(topic, competitors))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # =========================================================================
    # SUPPLEMENTARY RESEARCH
    # =========================================================================

    async def research_reddit_pain_points(self, topic: str) -> ServiceResult:
        return await self.ai.research_reddit_pain_points(topic)

    def analyze_search_trends(self, keywords: List[Union[str, Dict[str, Any]]]) -> ServiceResult:
        """Simulated trend data per keyword plus an overall summary."""
        names = [k.get("name") if isinstance(k, dict) else k for k in keywords]
        trends = [self.simulator.keyword_trend(name) for name in names]

        growth = average([t["trend"]["growth"] for t in trends])
        best = sorted(trends, key=lambda t: t["trend"]["growth"], reverse=True)[:5]
        return ServiceResult.ok({
            "trends": trends,
            "summary": {
                "overallTrend": {
                    "averageGrowth": round(growth, 1),
                    "direction": "positive" if growth > 0 else "negative",
                    "confidence": self.simulator.trend_confidence(),
                },
                "bestPerformingKeywords": best,
                "seasonalInsights": list(SEASONAL_INSIGHTS),
            },
        })

    @envelope
    async def generate_content_calendar(self, niche_id: str, months: int = 3, start: Optional[date] = None) -> ServiceResult:
        """
        Spread months*8 AI content ideas for an owned niche over month buckets.

        Returns:
            ServiceResult with niche, timeframe, calendar ({"YYYY-MM": [ideas]})
            and a summary of types, difficulty and estimated workload
        """
        if months < 1:
            raise InvalidInputError("months must be at least 1", details={"value": months})

        niche = unwrap(await asyncio.to_thread(self.niche_service.get_niche, niche_id))
        ideas_result = await self.ai.generate_content_ideas(niche["name"], "mixed", months * IDEAS_PER_MONTH)
        if not ideas_result.success:
            return ideas_result

        ideas = ideas_result.data.get("contentIdeas", [])
        per_month = math.ceil(len(ideas) / months)
        calendar = {
            key: ideas[i * per_month:(i + 1) * per_month]
            for i, key in enumerate(month_keys(months, start))
        }

        content_types: Dict[str, int] = {}
        difficulty = {"easy": 0, "medium": 0, "hard": 0}
        for idea in ideas:
            content_types[idea.get("type")] = content_types.get(idea.get("type"), 0) + 1
            difficulty[idea.get("difficulty")] = difficulty.get(idea.get("difficulty"), 0) + 1

        total_words = sum(idea.get("estimatedWordCount") or 0 for idea in ideas)
        hours = total_words / WORDS_PER_HOUR
        return ServiceResult.ok({
            "niche": niche["name"],
            "timeframe": f"{months} months",
            "calendar": calendar,
            "summary": {
                "totalContent": len(ideas),
                "contentTypes": content_types,
                "difficultyBreakdown": difficulty,
                "estimatedWorkload": {
                    "totalWords": total_words,
                    "estimatedHours": math.ceil(hours),
                    "estimatedDays": math.ceil(hours / HOURS_PER_DAY),
                },
            },
        })

    def validate_niche_viability(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Deterministic viability assessment.

        Accepts the research payload's camelCase niche fields (searchVolume,
        competitionLevel, monetizationPotential, keywords).
        """
        search_volume = data.get("searchVolume") or 0
        competition = data.get("competitionLevel")
        monetization = data.get("monetizationPotential") or 0
        keywords = data.get("keywords") or []

        score = calculate_viability_score(search_volume, competition, monetization, len(keywords))

        recommendations = []
        if score < 50:
            recommendations.append("Consider researching additional niches with higher potential")
        if competition == "high":
            recommendations.append("Focus on long-tail keywords to avoid high competition")
        if search_volume < 10000:
            recommendations.append("Look for related niches with higher search volume")
        if monetization < 50:
            recommendations.append("Research additional monetization methods for this niche")

        strengths = []
        if search_volume > 20000:
            strengths.append("High search volume indicates strong market demand")
        if competition == "low":
            strengths.append("Low competition provides easier market entry")
        if monetization > 70:
            strengths.append("High monetization potential for revenue generation")

        weaknesses = []
        if search_volume < 5000:
            weaknesses.append("Low search volume may limit audience reach")
        if competition == "high":
            weaknesses.append("High competition will make ranking difficult")
        if monetization < 40:
            weaknesses.append("Limited monetization options may affect profitability")

        if score >= 65:
            next_steps = [
                "Proceed with content creation and site development",
                "Develop a comprehensive content calendar",
                "Research and implement monetization strategies",
            ]
        elif score >= 50:
            next_steps = [
                "Conduct additional keyword research to improve potential",
                "Analyze competitor strategies for insights",
                "Consider niche refinement or sub-niche focus",
            ]
        else:
            next_steps = [
                "Research alternative niches with better potential",
                "Analyze successful competitors in related niches",
                "Consider combining multiple micro-niches",
            ]

        return ServiceResult.ok({
            "viabilityScore": score,
            "rating": viability_rating(score),
            "recommendations": recommendations,
            "strengths": strengths,
            "weaknesses": weaknesses,
            "nextSteps": next_steps,
        })

    def get_trending_niches(self) -> ServiceResult:
        return ServiceResult.ok(self.simulator.trending_niches())
