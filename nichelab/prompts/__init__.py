"""
Prompt builders and response schemas for every AI use case.
"""

from .builders import (
    CONTENT_LENGTHS,
    PromptRequest,
    resolve_word_count,
    build_niche_research,
    build_competitive_analysis,
    build_competitor_profile,
    build_competitor_discovery,
    build_content_gaps,
    build_keyword_expansion,
    build_content_generation,
    build_content_ideas,
    build_reddit_pain_points,
)
from .schemas import (
    NicheResearchResponse,
    CompetitiveAnalysisResponse,
    KeywordExpansionResponse,
    GeneratedArticle,
    ContentIdeasResponse,
    RedditResearchResponse,
)

__all__ = [
    "CONTENT_LENGTHS",
    "PromptRequest",
    "resolve_word_count",
    "build_niche_research",
    "build_competitive_analysis",
    "build_competitor_profile",
    "build_competitor_discovery",
    "build_content_gaps",
    "build_keyword_expansion",
    "build_content_generation",
    "build_content_ideas",
    "build_reddit_pain_points",
    "NicheResearchResponse",
    "CompetitiveAnalysisResponse",
    "KeywordExpansionResponse",
    "GeneratedArticle",
    "ContentIdeasResponse",
    "RedditResearchResponse",
]
