"""
Competitive Analysis Service

AI competitor analysis, enriched with derived insights (market gaps, threat
level, entry strategies) and simulated scores. Nothing here is persisted.
"""

import logging
from typing import Any, Dict, List, Optional

from nichelab.results import ServiceResult
from .ai import AIService
from .simulated import BENCHMARK_RECOMMENDATIONS, SimulatedDataProvider

logger = logging.getLogger(__name__)

COMMON_GAPS = [
    {"type": "content", "description": "Lack of beginner-friendly content", "priority": "medium"},
    {"type": "format", "description": "Limited video content available", "priority": "high"},
    {"type": "audience", "description": "Underserved mobile users", "priority": "medium"},
]

COMPETITIVE_ADVANTAGES = [
    "First-mover advantage in emerging sub-niches",
    "Better user experience design",
    "More comprehensive content coverage",
    "Stronger community engagement",
    "Superior mobile optimization",
]

THREAT_LEVELS = {
    "high": {
        "description": "Market dominated by established players",
        "recommendation": "Focus on niche differentiation and long-tail opportunities",
    },
    "medium": {
        "description": "Competitive market with opportunities",
        "recommendation": "Target content gaps and underserved segments",
    },
    "low": {
        "description": "Market has room for new entrants",
        "recommendation": "Aggressive content strategy and SEO focus",
    },
}


def identify_market_gaps(analysis: Dict[str, Any]) -> List[Dict[str, str]]:
    """Every AI opportunity as a high-priority gap, followed by the common gap types."""
    gaps = [
        {"type": "opportunity", "description": opportunity, "priority": "high"}
        for opportunity in analysis.get("opportunities") or []
    ]
    gaps.extend(dict(gap) for gap in COMMON_GAPS)
    return gaps


def assess_threat_level(competitors: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    High when more than 70% of competitors are dominant or high-traffic,
    medium above 40%, low otherwise.
    """
    strong = sum(
        1 for c in competitors
        if c.get("marketPosition") == "dominant" or c.get("estimatedTraffic") == "high"
    )
    if strong > len(competitors) * 0.7:
        level = "high"
    elif strong > len(competitors) * 0.4:
        level = "medium"
    else:
        level = "low"
    return {"level": level, **THREAT_LEVELS[level]}


def suggest_entry_strategy(analysis: Dict[str, Any]) -> List[Dict[str, Any]]:
    strategies = []
    opportunities = analysis.get("opportunities") or []
    if opportunities:
        strategies.append({
            "type": "opportunity-based",
            "description": "Focus on identified market opportunities",
            "tactics": opportunities[:3],
        })

    strategies.append({
        "type": "content-first",
        "description": "Build authority through superior content",
        "tactics": [
            "Create comprehensive guides",
            "Develop unique content formats",
            "Focus on user experience",
        ],
    })
    strategies.append({
        "type": "niche-focused",
        "description": "Dominate a specific sub-niche first",
        "tactics": [
            "Identify underserved segments",
            "Become the go-to resource",
            "Expand gradually",
        ],
    })
    return strategies


class CompetitiveAnalysisService:
    """Competitor research for a niche."""

    def __init__(self, ai: AIService, simulator: Optional[SimulatedDataProvider] = None):
        self.ai = ai
        self.simulator = simulator or SimulatedDataProvider()

    async def analyze_competitors(self, topic: str, competitors: Optional[List[str]] = None) -> ServiceResult:
        """AI landscape analysis plus matrix, gaps, advantages, threat level and entry strategy."""
        result = await self.ai.analyze_competition(topic, competitors)
        if not result.success:
            return result

        analysis = result.data
        found = analysis.get("competitors") or []
        return ServiceResult.ok({
            **analysis,
            "competitiveMatrix": self.simulator.competitive_matrix(found),
            "marketGaps": identify_market_gaps(analysis),
            "competitiveAdvantages": list(COMPETITIVE_ADVANTAGES),
            "threatLevel": assess_threat_level(found),
            "entryStrategy": suggest_entry_strategy(analysis),
        })

    async def analyze_competitor(self, url: str, topic: str) -> ServiceResult:
        return await self.ai.analyze_competitor(url, topic)

    async def find_competitors(self, topic: str, count: int = 10) -> ServiceResult:
        return await self.ai.find_competitors(topic, count)

    async def analyze_content_gaps(self, topic: str, competitors: Optional[List[str]] = None) -> ServiceResult:
        return await self.ai.analyze_content_gaps(topic, competitors)

    def benchmark_performance(self, site: Dict[str, Any], competitors: List[Dict[str, Any]]) -> ServiceResult:
        """Simulated benchmark of a site against competitors."""
        return ServiceResult.ok({
            "site": site,
            "competitors": [
                {**competitor, "metrics": self.simulator.competitor_metrics()}
                for competitor in competitors
            ],
            "analysis": self.simulator.rankings(len(competitors)),
            "recommendations": list(BENCHMARK_RECOMMENDATIONS),
        })

    def monitor_competitors(self, competitors: List[Dict[str, Any]]) -> ServiceResult:
        """Simulated recent changes per competitor over a 30 day window."""
        observed = [
            {"competitor": competitor.get("name"), "changes": self.simulator.competitor_changes()}
            for competitor in competitors
        ]
        most_active = max(observed, key=lambda c: len(c["changes"]), default=None)
        return ServiceResult.ok({
            "monitoringPeriod": "30 days",
            "competitors": observed,
            "summary": {
                "totalChanges": sum(len(c["changes"]) for c in observed),
                "highImpactChanges": sum(
                    1 for c in observed for change in c["changes"] if change["impact"] == "high"
                ),
                "mostActiveCompetitor": most_active["competitor"] if most_active else None,
            },
        })
