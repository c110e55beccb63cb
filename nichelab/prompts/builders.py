"""
Domain Request Builders

Pure functions that turn user parameters into a PromptRequest: the prompt
text, the JSON shape description shown to the model, the schema the reply is
validated against, and the default generation options for that use case.

Builders have no side effects; every parameter appears verbatim in the prompt.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel

from nichelab.integrations.openrouter import MODELS, CompletionOptions
from .schemas import (
    CompetitiveAnalysisResponse,
    CompetitorDiscoveryResponse,
    CompetitorProfileResponse,
    ContentGapsResponse,
    ContentIdeasResponse,
    GeneratedArticle,
    KeywordExpansionResponse,
    NicheResearchResponse,
    RedditResearchResponse,
)


# Target word counts for named content lengths
CONTENT_LENGTHS = {
    "short": 500,
    "medium": 1000,
    "long": 2000,
}


@dataclass
class PromptRequest:
    """Everything the completion client needs for one use case."""
    prompt: str
    shape: Dict[str, Any]
    schema: Type[BaseModel]
    options: CompletionOptions


def resolve_word_count(length: Union[str, int]) -> int:
    """Map short/medium/long (or an explicit number) to a target word count."""
    if isinstance(length, int):
        if length <= 0:
            raise ValueError(f"length must be positive, got {length}")
        return length
    key = str(length).strip().lower()
    if key.isdigit():
        return resolve_word_count(int(key))
    if key not in CONTENT_LENGTHS:
        raise ValueError(f"Unknown content length '{length}' (expected one of {sorted(CONTENT_LENGTHS)})")
    return CONTENT_LENGTHS[key]


# ============================================================================
# NICHE RESEARCH
# ============================================================================

NICHE_RESEARCH_SHAPE = {
    "niche": {
        "name": "string",
        "description": "string",
        "searchVolume": "number",
        "competitionLevel": "low|medium|high",
        "monetizationPotential": "number (0-100)",
    },
    "keywords": [{
        "name": "string",
        "searchVolume": "number",
        "competitionLevel": "low|medium|high",
        "cpcValue": "number",
    }],
    "opportunities": ["string"],
    "painPoints": ["string"],
    "contentIdeas": ["string"],
}


def build_niche_research(topic: str) -> PromptRequest:
    """Research demand, competition and monetization for a niche idea."""
    prompt = f"""Analyze the niche "{topic}" and provide comprehensive research data.

Consider:
- Market demand and search volume potential
- Competition level analysis
- Monetization opportunities
- Target audience demographics
- Content opportunities
- Seasonal trends
- Pain points and problems to solve
- Reddit communities and discussions related to this niche

Give the niche a refined name, estimated monthly searches, a competition level
of low, medium or high, and a monetization potential score from 0 to 100.
List keyword phrases with estimated volume, competition level and CPC in dollars."""

    return PromptRequest(
        prompt=prompt,
        shape=NICHE_RESEARCH_SHAPE,
        schema=NicheResearchResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.3, max_tokens=1500),
    )


# ============================================================================
# COMPETITIVE ANALYSIS
# ============================================================================

COMPETITIVE_ANALYSIS_SHAPE = {
    "overview": "string",
    "competitors": [{
        "name": "string",
        "strengths": ["string"],
        "weaknesses": ["string"],
        "contentStrategy": "string",
        "monetization": "string",
        "estimatedTraffic": "string",
        "marketPosition": "string",
    }],
    "opportunities": ["string"],
    "recommendations": ["string"],
}


def build_competitive_analysis(topic: str, competitors: Optional[List[str]] = None) -> PromptRequest:
    """Analyze the competitive landscape, optionally focused on known competitors."""
    competitors = competitors or []
    if competitors:
        focus = f"Focus on these specific competitors: {', '.join(competitors)}"
    else:
        focus = "Identify and analyze the main competitors in this space."

    prompt = f"""Analyze the competitive landscape for the "{topic}" niche.

{focus}

Provide analysis on:
- Market positioning of competitors
- Content strategies they use
- Monetization methods
- Strengths and weaknesses
- Market gaps and opportunities
- Differentiation strategies
- Traffic and authority estimates"""

    return PromptRequest(
        prompt=prompt,
        shape=COMPETITIVE_ANALYSIS_SHAPE,
        schema=CompetitiveAnalysisResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.4, max_tokens=1800),
    )


def build_competitor_profile(url: str, topic: str) -> PromptRequest:
    """Profile a single competitor site."""
    prompt = f"""Analyze the competitor website "{url}" in the "{topic}" niche.

Provide a detailed analysis including:
- Content strategy and topics covered
- SEO approach and keyword targeting
- Monetization methods
- User experience and site structure
- Social media presence
- Strengths and weaknesses
- Traffic estimates
- Content quality assessment"""

    shape = {
        "competitor": {"name": "string", "url": url, "description": "string"},
        "contentStrategy": {
            "mainTopics": ["string"],
            "contentTypes": ["string"],
            "publishingFrequency": "string",
            "contentQuality": "high|medium|low",
        },
        "seoAnalysis": {
            "primaryKeywords": ["string"],
            "estimatedTraffic": "string",
            "domainAuthority": "string",
            "backlinks": "string",
        },
        "monetization": {
            "methods": ["string"],
            "revenueEstimate": "string",
            "conversionStrategy": "string",
        },
        "userExperience": {
            "siteSpeed": "fast|medium|slow",
            "mobileOptimized": "boolean",
            "navigation": "easy|difficult",
            "design": "modern|outdated",
        },
        "strengths": ["string"],
        "weaknesses": ["string"],
        "opportunities": ["string"],
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=CompetitorProfileResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.4, max_tokens=1800),
    )


def build_competitor_discovery(topic: str, count: int = 10) -> PromptRequest:
    """Find the top competitors operating in a niche."""
    prompt = f"""Find the top {count} competitors in the "{topic}" niche.

Identify websites, blogs, and businesses that are successfully operating in this space.

For each competitor, provide:
- Website name and URL
- Brief description
- Estimated authority/popularity
- Main focus area within the niche"""

    shape = {
        "competitors": [{
            "name": "string",
            "url": "string",
            "description": "string",
            "authority": "high|medium|low",
            "focus": "string",
            "estimatedTraffic": "string",
        }],
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=CompetitorDiscoveryResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.4, max_tokens=1500),
    )


def build_content_gaps(topic: str, competitors: Optional[List[str]] = None) -> PromptRequest:
    """Find underserved topics, formats and audiences in a niche."""
    competitors = competitors or []
    considered = f"Consider these competitors: {', '.join(competitors)}" if competitors else ""

    prompt = f"""Analyze content gaps in the "{topic}" niche market.

{considered}

Identify:
- Topics that are underserved or poorly covered
- Content formats that are missing
- Audience segments that are neglected
- Questions that aren't being answered well
- Opportunities for better content"""

    shape = {
        "contentGaps": [{
            "topic": "string",
            "description": "string",
            "opportunity": "string",
            "difficulty": "easy|medium|hard",
            "potential": "high|medium|low",
        }],
        "formatGaps": [{
            "format": "string",
            "description": "string",
            "examples": ["string"],
        }],
        "audienceGaps": [{
            "segment": "string",
            "needs": ["string"],
            "opportunity": "string",
        }],
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=ContentGapsResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.5, max_tokens=1500),
    )


# ============================================================================
# KEYWORDS
# ============================================================================

def build_keyword_expansion(seed_keyword: str, count: int = 20) -> PromptRequest:
    """Expand a seed keyword into related phrases."""
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")

    prompt = f"""Generate {count} related keywords and variations for the seed keyword "{seed_keyword}".

Include:
- Long-tail variations
- Question-based keywords
- Commercial intent keywords
- Informational keywords
- Local variations if applicable

For each keyword, estimate:
- Search volume potential
- Competition level
- Commercial value"""

    shape = {
        "keywords": [{
            "name": "string",
            "type": "informational|commercial|navigational|transactional",
            "searchVolume": "number",
            "competitionLevel": "low|medium|high",
            "cpcValue": "number",
            "difficulty": "number (1-100)",
        }],
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=KeywordExpansionResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.5, max_tokens=1200),
    )


# ============================================================================
# CONTENT
# ============================================================================

def build_content_generation(
    title: str,
    topic: str,
    length: Union[str, int] = "medium",
    tone: str = "informative",
    content_type: str = "article",
    keywords: Optional[List[str]] = None,
) -> PromptRequest:
    """Write an article for a niche."""
    word_count = resolve_word_count(length)
    keyword_line = ""
    if keywords:
        keyword_line = f"\n- Work in these keywords: {', '.join(keywords)}"

    prompt = f"""Write a {content_type} about "{title}" for the {topic} niche.

Requirements:
- Target length: {length} ({word_count} words)
- Tone: {tone}
- Include relevant keywords naturally{keyword_line}
- Structure with clear headings and subheadings
- Make it engaging and valuable for the target audience
- Include actionable insights or tips"""

    shape = {
        "title": "string",
        "body": "string (full article with HTML formatting)",
        "wordCount": "number",
        "readingTime": "number (minutes)",
        "keywords": ["string"],
        "metaDescription": "string",
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=GeneratedArticle,
        options=CompletionOptions(model=MODELS["BALANCED"], temperature=0.7, max_tokens=2000),
    )


def build_content_ideas(topic: str, content_type: str = "mixed", count: int = 10) -> PromptRequest:
    """Brainstorm content ideas for a niche."""
    prompt = f"""Generate {count} content ideas for the "{topic}" niche.

Content type focus: {content_type}
(mixed = variety of content types, blog = blog posts, video = video content, etc.)

For each idea, provide:
- Compelling title
- Content type (blog post, how-to guide, listicle, review, etc.)
- Target keywords
- Estimated difficulty to create
- Potential for engagement/shares"""

    shape = {
        "contentIdeas": [{
            "title": "string",
            "type": "string",
            "description": "string",
            "targetKeywords": ["string"],
            "difficulty": "easy|medium|hard",
            "engagementPotential": "low|medium|high",
            "estimatedWordCount": "number",
        }],
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=ContentIdeasResponse,
        options=CompletionOptions(model=MODELS["CREATIVE"], temperature=0.8, max_tokens=1500),
    )


def build_reddit_pain_points(topic: str) -> PromptRequest:
    """Summarize problems people discuss on Reddit for a niche."""
    prompt = f"""Research pain points and problems discussed on Reddit related to the "{topic}" niche.

Simulate what you would find by analyzing Reddit posts, comments, and discussions in relevant subreddits.

Focus on:
- Common complaints and frustrations
- Unmet needs and desires
- Questions people frequently ask
- Problems they're trying to solve
- Product/service gaps they mention

Provide realistic pain points that would actually be discussed on Reddit."""

    shape = {
        "painPoints": [{
            "problem": "string",
            "frequency": "high|medium|low",
            "subreddits": ["string"],
            "sentiment": "frustrated|confused|seeking",
            "businessOpportunity": "string",
        }],
        "trendingTopics": ["string"],
        "commonQuestions": ["string"],
    }

    return PromptRequest(
        prompt=prompt,
        shape=shape,
        schema=RedditResearchResponse,
        options=CompletionOptions(model=MODELS["RESEARCH"], temperature=0.5, max_tokens=1500),
    )
