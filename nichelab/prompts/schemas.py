"""
Response Schemas for Structured Completions

One pydantic model per request type. Parsed model output is validated against
these before any service uses it; missing or mis-typed required fields turn
into a ParseError in the completion client.

Wire names are camelCase (what the model is told to produce); Python
attribute names are snake_case. Unknown extra keys are kept so callers can
pass model output through unchanged.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model for camelCase JSON produced by the LLM."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


CompetitionLevelName = Annotated[Literal["low", "medium", "high"], BeforeValidator(_lower)]
LowercaseStr = Annotated[str, BeforeValidator(_lower)]


# ============================================================================
# NICHE RESEARCH
# ============================================================================

class NicheProfile(WireModel):
    name: str
    description: str = ""
    search_volume: int = Field(ge=0)
    competition_level: CompetitionLevelName
    monetization_potential: int = Field(ge=0, le=100)


class KeywordSuggestion(WireModel):
    name: str
    search_volume: int = Field(ge=0)
    competition_level: CompetitionLevelName
    cpc_value: float = Field(default=0.0, ge=0)


class NicheResearchResponse(WireModel):
    niche: NicheProfile
    keywords: List[KeywordSuggestion]
    opportunities: List[str] = Field(default_factory=list)
    pain_points: List[str] = Field(default_factory=list)
    content_ideas: List[str] = Field(default_factory=list)


# ============================================================================
# COMPETITIVE ANALYSIS
# ============================================================================

class CompetitorSummary(WireModel):
    name: str
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    content_strategy: str = ""
    monetization: str = ""
    estimated_traffic: str = ""
    market_position: str = ""


class CompetitiveAnalysisResponse(WireModel):
    overview: str
    competitors: List[CompetitorSummary]
    opportunities: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class CompetitorProfileResponse(WireModel):
    competitor: Dict[str, Any]
    content_strategy: Dict[str, Any] = Field(default_factory=dict)
    seo_analysis: Dict[str, Any] = Field(default_factory=dict)
    monetization: Dict[str, Any] = Field(default_factory=dict)
    user_experience: Dict[str, Any] = Field(default_factory=dict)
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)


class DiscoveredCompetitor(WireModel):
    name: str
    url: str = ""
    description: str = ""
    authority: str = ""
    focus: str = ""
    estimated_traffic: str = ""


class CompetitorDiscoveryResponse(WireModel):
    competitors: List[DiscoveredCompetitor]


class ContentGapsResponse(WireModel):
    content_gaps: List[Dict[str, Any]] = Field(default_factory=list)
    format_gaps: List[Dict[str, Any]] = Field(default_factory=list)
    audience_gaps: List[Dict[str, Any]] = Field(default_factory=list)


# ============================================================================
# KEYWORDS
# ============================================================================

class ExpandedKeyword(WireModel):
    name: str
    type: str = "informational"
    search_volume: int = Field(ge=0)
    competition_level: CompetitionLevelName
    cpc_value: float = Field(default=0.0, ge=0)
    difficulty: Optional[int] = Field(default=None, ge=0, le=100)


class KeywordExpansionResponse(WireModel):
    keywords: List[ExpandedKeyword]


# ============================================================================
# CONTENT
# ============================================================================

class GeneratedArticle(WireModel):
    title: str
    body: str
    word_count: int = 0
    reading_time: int = 0
    keywords: List[str] = Field(default_factory=list)
    meta_description: str = ""


class ContentIdea(WireModel):
    title: str
    type: str = "blog post"
    description: str = ""
    target_keywords: List[str] = Field(default_factory=list)
    difficulty: LowercaseStr = "medium"
    engagement_potential: str = "medium"
    estimated_word_count: int = 0


class ContentIdeasResponse(WireModel):
    content_ideas: List[ContentIdea]


class RedditPainPoint(WireModel):
    problem: str
    frequency: str = ""
    subreddits: List[str] = Field(default_factory=list)
    sentiment: str = ""
    business_opportunity: str = ""


class RedditResearchResponse(WireModel):
    pain_points: List[RedditPainPoint]
    trending_topics: List[str] = Field(default_factory=list)
    common_questions: List[str] = Field(default_factory=list)
