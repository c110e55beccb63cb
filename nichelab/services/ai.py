"""
AI Service

One method per prompt type: build the request, send it through the
structured completion client, return the envelope. Invalid arguments are
rejected before any request is made.
"""

import logging
from typing import List, Optional, Union

from nichelab.errors import InvalidInputError
from nichelab.integrations.openrouter import OpenRouterClient
from nichelab.prompts import builders
from nichelab.prompts.builders import PromptRequest
from nichelab.results import ServiceResult

logger = logging.getLogger(__name__)


class AIService:
    """Prompt-level facade over the completion client."""

    def __init__(self, client: OpenRouterClient):
        self.client = client

    async def _complete(self, build, *args, **kwargs) -> ServiceResult:
        try:
            request: PromptRequest = build(*args, **kwargs)
        except ValueError as e:
            return ServiceResult.fail(InvalidInputError(str(e)))

        logger.info(f"Requesting {build.__name__.replace('build_', '')} ({request.options.model})")
        return await self.client.complete(request.prompt, request.shape, request.options, request.schema)

    async def research_niche(self, topic: str) -> ServiceResult:
        return await self._complete(builders.build_niche_research, topic)

    async def analyze_competition(self, topic: str, competitors: Optional[List[str]] = None) -> ServiceResult:
        return await self._complete(builders.build_competitive_analysis, topic, competitors)

    async def analyze_competitor(self, url: str, topic: str) -> ServiceResult:
        return await self._complete(builders.build_competitor_profile, url, topic)

    async def find_competitors(self, topic: str, count: int = 10) -> ServiceResult:
        return await self._complete(builders.build_competitor_discovery, topic, count)

    async def analyze_content_gaps(self, topic: str, competitors: Optional[List[str]] = None) -> ServiceResult:
        return await self._complete(builders.build_content_gaps, topic, competitors)

    async def generate_keywords(self, seed_keyword: str, count: int = 20) -> ServiceResult:
        return await self._complete(builders.build_keyword_expansion, seed_keyword, count)

    async def generate_content(
        self,
        title: str,
        topic: str,
        length: Union[str, int] = "medium",
        tone: str = "informative",
        content_type: str = "article",
        keywords: Optional[List[str]] = None,
    ) -> ServiceResult:
        return await self._complete(
            builders.build_content_generation,
            title, topic, length=length, tone=tone, content_type=content_type, keywords=keywords,
        )

    async def generate_content_ideas(self, topic: str, content_type: str = "mixed", count: int = 10) -> ServiceResult:
        return await self._complete(builders.build_content_ideas, topic, content_type, count)

    async def research_reddit_pain_points(self, topic: str) -> ServiceResult:
        return await self._complete(builders.build_reddit_pain_points, topic)
