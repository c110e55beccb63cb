"""
Research API

Endpoints:
- POST /api/research - Research a niche idea and store niche + keywords
- POST /api/research/reddit - Reddit pain points for a topic
- POST /api/research/trends - Simulated search trends for keywords
- POST /api/research/calendar - Content calendar for an owned niche
- POST /api/research/viability - Viability score for niche figures
- POST /api/research/keywords - Expand a seed keyword
- GET  /api/research/trending - Trending niches
- POST /api/research/competitors - Competitive analysis
- POST /api/research/competitors/discover - Find competitors
- POST /api/research/competitors/profile - Analyze one competitor
- POST /api/research/competitors/gaps - Content gaps
- POST /api/research/competitors/benchmark - Simulated benchmark
- POST /api/research/competitors/monitor - Simulated change monitoring
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import get_current_user
from nichelab.services import AIService, CompetitiveAnalysisService, ResearchService
from .common import envelope_response, get_ai_service, get_competitive_service, get_research_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/research",
    tags=["Research"],
    dependencies=[Depends(get_current_user)],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ResearchRequest(BaseModel):
    """Request to research a niche idea."""
    topic: str = Field(..., min_length=2, max_length=255)
    competitive_analysis: bool = Field(
        default=True,
        description="Run competitive analysis in the background after a successful research run",
    )
    competitors: Optional[List[str]] = None


class TopicRequest(BaseModel):
    topic: str = Field(..., min_length=2, max_length=255)


class TrendsRequest(BaseModel):
    keywords: List[str] = Field(..., min_length=1)


class CalendarRequest(BaseModel):
    niche_id: str
    months: int = Field(3, ge=1, le=12)


class ViabilityRequest(BaseModel):
    """Niche figures, in the camelCase shape research returns."""
    searchVolume: int = Field(0, ge=0)
    competitionLevel: Literal["low", "medium", "high"] = "medium"
    monetizationPotential: int = Field(0, ge=0, le=100)
    keywords: List[Any] = Field(default_factory=list)


class KeywordExpansionRequest(BaseModel):
    seed_keyword: str = Field(..., min_length=1)
    count: int = Field(20, ge=1, le=100)


class CompetitorsRequest(BaseModel):
    topic: str = Field(..., min_length=2, max_length=255)
    competitors: Optional[List[str]] = None


class DiscoverRequest(BaseModel):
    topic: str = Field(..., min_length=2, max_length=255)
    count: int = Field(10, ge=1, le=50)


class CompetitorProfileRequest(BaseModel):
    url: str = Field(..., min_length=3)
    topic: str = Field(..., min_length=2, max_length=255)


class BenchmarkRequest(BaseModel):
    site: Dict[str, Any]
    competitors: List[Dict[str, Any]]


class MonitorRequest(BaseModel):
    competitors: List[Dict[str, Any]]


# =============================================================================
# NICHE RESEARCH
# =============================================================================

@router.post("")
async def research_niche(
    request: ResearchRequest,
    background_tasks: BackgroundTasks,
    service: ResearchService = Depends(get_research_service),
):
    """
    Research a niche idea.

    Stores the niche and its keywords for the caller. Competitive analysis is
    scheduled after the response; its outcome is only logged.
    """
    result = await service.conduct_niche_research(request.topic)

    if result.success and request.competitive_analysis:
        background_tasks.add_task(service.run_competitive_analysis, request.topic, request.competitors)
        logger.info(f"Queued background competitive analysis for '{request.topic}'")

    return envelope_response(result, success_status=201)


@router.post("/reddit")
async def reddit_pain_points(request: TopicRequest, service: ResearchService = Depends(get_research_service)):
    return envelope_response(await service.research_reddit_pain_points(request.topic))


@router.post("/trends")
async def search_trends(request: TrendsRequest, service: ResearchService = Depends(get_research_service)):
    return envelope_response(service.analyze_search_trends(request.keywords))


@router.post("/calendar")
async def content_calendar(request: CalendarRequest, service: ResearchService = Depends(get_research_service)):
    return envelope_response(await service.generate_content_calendar(request.niche_id, request.months))


@router.post("/viability")
async def niche_viability(request: ViabilityRequest, service: ResearchService = Depends(get_research_service)):
    return envelope_response(service.validate_niche_viability(request.model_dump()))


@router.post("/keywords")
async def expand_keywords(request: KeywordExpansionRequest, ai: AIService = Depends(get_ai_service)):
    return envelope_response(await ai.generate_keywords(request.seed_keyword, request.count))


@router.get("/trending")
async def trending_niches(service: ResearchService = Depends(get_research_service)):
    return envelope_response(service.get_trending_niches())


# =============================================================================
# COMPETITIVE ANALYSIS
# =============================================================================

@router.post("/competitors")
async def analyze_competitors(
    request: CompetitorsRequest,
    service: CompetitiveAnalysisService = Depends(get_competitive_service),
):
    return envelope_response(await service.analyze_competitors(request.topic, request.competitors))


@router.post("/competitors/discover")
async def discover_competitors(
    request: DiscoverRequest,
    service: CompetitiveAnalysisService = Depends(get_competitive_service),
):
    return envelope_response(await service.find_competitors(request.topic, request.count))


@router.post("/competitors/profile")
async def competitor_profile(
    request: CompetitorProfileRequest,
    service: CompetitiveAnalysisService = Depends(get_competitive_service),
):
    return envelope_response(await service.analyze_competitor(request.url, request.topic))


@router.post("/competitors/gaps")
async def content_gaps(
    request: CompetitorsRequest,
    service: CompetitiveAnalysisService = Depends(get_competitive_service),
):
    return envelope_response(await service.analyze_content_gaps(request.topic, request.competitors))


@router.post("/competitors/benchmark")
async def benchmark(
    request: BenchmarkRequest,
    service: CompetitiveAnalysisService = Depends(get_competitive_service),
):
    return envelope_response(service.benchmark_performance(request.site, request.competitors))


@router.post("/competitors/monitor")
async def monitor(
    request: MonitorRequest,
    service: CompetitiveAnalysisService = Depends(get_competitive_service),
):
    return envelope_response(service.monitor_competitors(request.competitors))
