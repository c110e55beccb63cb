"""
Niche Service

CRUD for niches, scoped to the signed-in owner, plus the concurrent stats
read (keywords and content fetched side by side).
"""

import logging
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from nichelab.database.gateway import CollectionGateway
from nichelab.database.models import COMPETITION_LEVELS, Content, Keyword, Niche
from nichelab.results import ServiceResult
from .base import OwnedService, envelope, gather_results, unwrap

logger = logging.getLogger(__name__)


class NicheService(OwnedService):
    """Niches owned by the current identity."""

    def __init__(self, identity, session_factory=None):
        super().__init__(identity, session_factory)
        self.niches = CollectionGateway(Niche, session_factory)
        self.keywords = CollectionGateway(Keyword, session_factory)
        self.content = CollectionGateway(Content, session_factory)

    def _scope(self) -> Dict[str, Any]:
        return {"user_id": self.owner_id()}

    @envelope
    def create_niche(self, data: Dict[str, Any]) -> ServiceResult:
        return self.niches.create({**data, "user_id": self.owner_id()})

    @envelope
    def get_niches(self) -> ServiceResult:
        """All owned niches, newest first, with keyword and content counts."""
        owner = self.owner_id()

        def work(db: Session):
            keyword_count = (
                select(func.count(Keyword.id))
                .where(Keyword.niche_id == Niche.id)
                .correlate(Niche)
                .scalar_subquery()
            )
            content_count = (
                select(func.count(Content.id))
                .where(Content.niche_id == Niche.id)
                .correlate(Niche)
                .scalar_subquery()
            )
            rows = db.execute(
                select(Niche, keyword_count.label("keyword_count"), content_count.label("content_count"))
                .where(Niche.user_id == owner)
                .order_by(Niche.created_at.desc())
            ).all()
            return [
                {**niche.to_dict(), "keyword_count": keywords, "content_count": articles}
                for niche, keywords, articles in rows
            ]

        return self.niches.run("read", work)

    @envelope
    def get_niche(self, niche_id: str) -> ServiceResult:
        """One owned niche with its keywords and content."""
        niche = unwrap(self.niches.find_one({"id": niche_id, **self._scope()}))
        keywords = unwrap(self.keywords.find({"niche_id": niche_id}, order_by="search_volume"))
        content = unwrap(self.content.find({"niche_id": niche_id}))
        return ServiceResult.ok({**niche, "keywords": keywords, "content": content})

    @envelope
    def update_niche(self, niche_id: str, updates: Dict[str, Any]) -> ServiceResult:
        updates = {k: v for k, v in updates.items() if k != "user_id"}
        return self.niches.update({"id": niche_id, **self._scope()}, updates)

    @envelope
    def delete_niche(self, niche_id: str) -> ServiceResult:
        """Delete an owned niche; its keywords and content go with it."""
        result = self.niches.delete({"id": niche_id, **self._scope()})
        if result.success:
            logger.info(f"Deleted niche {niche_id}")
        return result

    @envelope
    def search_niches(self, query: str) -> ServiceResult:
        return self.niches.find(self._scope(), search=(query, ("name", "description")))

    @envelope
    async def get_niche_stats(self, niche_id: str) -> ServiceResult:
        """
        Keyword and content statistics for an owned niche.

        Both reads run concurrently; either failing fails the whole result.
        """
        scope = self._scope()
        unwrap(self.niches.find_one({"id": niche_id, **scope}))

        keywords, content = await gather_results(
            lambda: self.keywords.find({"niche_id": niche_id}, order_by=None),
            lambda: self.content.find({"niche_id": niche_id}, order_by=None),
        )

        keyword_count = len(keywords)
        content_count = len(content)
        return ServiceResult.ok({
            "keywordCount": keyword_count,
            "totalSearchVolume": sum(k["search_volume"] or 0 for k in keywords),
            "averageCPC": (
                sum(k["cpc_value"] or 0 for k in keywords) / keyword_count if keyword_count else 0
            ),
            "competitionBreakdown": {
                level: sum(1 for k in keywords if k["competition_level"] == level)
                for level in COMPETITION_LEVELS
            },
            "contentCount": content_count,
            "totalWordCount": sum(c["word_count"] or 0 for c in content),
            "averageReadingTime": (
                sum(c["reading_time"] or 0 for c in content) / content_count if content_count else 0
            ),
        })
