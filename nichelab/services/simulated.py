"""
Simulated Data Provider

Every invented metric lives here: search trends, content performance,
competitor scores, benchmark and monitoring data, trending niches. Nothing
here comes from a real analytics source. Results are deterministic for a
given seed.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
COUNTRIES = ["United States", "United Kingdom", "Canada", "Australia", "Germany"]
MATRIX_FACTORS = ["Content Quality", "SEO Strength", "User Experience", "Brand Authority", "Innovation"]

SEASONAL_INSIGHTS = [
    "Peak interest typically occurs in Q4",
    "Summer months show decreased search volume",
    "Back-to-school season drives increased interest",
]

BENCHMARK_RECOMMENDATIONS = [
    "Increase content publishing frequency to match top performers",
    "Improve site speed to reduce bounce rate",
    "Develop social media presence to increase brand awareness",
    "Focus on long-form content to improve engagement",
    "Implement better internal linking strategy",
]

TRENDING_NICHES = [
    {
        "name": "Sustainable Living",
        "growth": "+45%",
        "searchVolume": 125000,
        "competition": "medium",
        "description": "Eco-friendly products and zero-waste lifestyle",
    },
    {
        "name": "Remote Work Tools",
        "growth": "+38%",
        "searchVolume": 89000,
        "competition": "high",
        "description": "Software and equipment for remote workers",
    },
    {
        "name": "Plant-Based Nutrition",
        "growth": "+52%",
        "searchVolume": 156000,
        "competition": "medium",
        "description": "Vegan recipes and plant-based diet guides",
    },
]


class SimulatedDataProvider:
    """Random stand-ins for analytics the system does not integrate with."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    # =========================================================================
    # SEARCH TRENDS
    # =========================================================================

    def trend(self) -> Dict[str, Any]:
        return {
            "growth": round(self.rng.uniform(-100, 100), 1),
            "direction": "rising" if self.rng.random() > 0.5 else "declining",
            "stability": "stable" if self.rng.random() > 0.7 else "volatile",
        }

    def seasonality(self) -> List[Dict[str, Any]]:
        return [{"month": month, "interest": self.rng.randrange(100)} for month in MONTHS]

    def geographic_interest(self) -> List[Dict[str, Any]]:
        return [{"country": country, "interest": self.rng.randrange(100)} for country in COUNTRIES]

    @staticmethod
    def related_queries(keyword: str) -> List[str]:
        return [
            f"best {keyword}",
            f"{keyword} guide",
            f"how to {keyword}",
            f"{keyword} tips",
            f"{keyword} reviews",
        ]

    def keyword_trend(self, keyword: str) -> Dict[str, Any]:
        return {
            "keyword": keyword,
            "trend": self.trend(),
            "seasonality": self.seasonality(),
            "relatedQueries": self.related_queries(keyword),
            "geographicInterest": self.geographic_interest(),
        }

    def trend_confidence(self) -> str:
        return "high" if self.rng.random() > 0.5 else "medium"

    # =========================================================================
    # CONTENT AND SITES
    # =========================================================================

    def content_performance(self) -> Dict[str, Any]:
        return {
            "views": self.rng.randrange(10000),
            "shares": self.rng.randrange(500),
            "engagement": self.rng.randrange(100),
            "conversionRate": round(self.rng.uniform(0, 10), 2),
            "revenue": round(self.rng.uniform(0, 1000), 2),
        }

    def trending_niches(self) -> List[Dict[str, Any]]:
        return [dict(niche) for niche in TRENDING_NICHES]

    # =========================================================================
    # COMPETITORS
    # =========================================================================

    def competitive_matrix(self, competitors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """1-5 score per factor for each competitor."""
        matrix = []
        for competitor in competitors:
            scores = {factor: self.rng.randint(1, 5) for factor in MATRIX_FACTORS}
            matrix.append({
                "name": competitor.get("name"),
                "scores": scores,
                "totalScore": sum(scores.values()),
            })
        return matrix

    def competitor_metrics(self) -> Dict[str, Any]:
        return {
            "monthlyTraffic": self.rng.randrange(100000),
            "bounceRate": round(self.rng.uniform(25, 75), 1),
            "avgSessionDuration": round(self.rng.uniform(60, 360)),
            "conversionRate": round(self.rng.uniform(0, 5), 2),
            "socialFollowers": self.rng.randrange(50000),
            "contentVolume": self.rng.randrange(50, 550),
        }

    def rankings(self, field_size: int) -> Dict[str, int]:
        field_size = max(field_size, 1)
        return {
            "trafficRanking": self.rng.randint(1, field_size),
            "contentRanking": self.rng.randint(1, field_size),
            "engagementRanking": self.rng.randint(1, field_size),
            "overallRanking": self.rng.randint(1, field_size),
        }

    def competitor_changes(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """One to three recent changes observed on a competitor site."""
        now = now or datetime.now(timezone.utc)
        candidates = [
            ("content", "Published 3 new blog posts this week", "medium", 7),
            ("seo", "Updated meta descriptions on key pages", "low", 14),
            ("social", "Increased posting frequency on Instagram", "medium", 5),
        ]
        changes = [
            {
                "type": change_type,
                "description": description,
                "impact": impact,
                "date": (now - timedelta(days=self.rng.uniform(0, window))).isoformat(),
            }
            for change_type, description, impact, window in candidates
        ]
        return changes[: self.rng.randint(1, 3)]
