"""
Content Service

Articles attached to a niche, a site, or both. A content row is reachable
when its niche or its site belongs to the current identity.

word_count and reading_time are always derived from the body here: on create
and whenever an update carries a new body. Values supplied by callers (or by
the model) are ignored.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import or_, select

from nichelab.database.gateway import CollectionGateway, to_uuid
from nichelab.database.models import Content, Niche, NicheSite, count_words, reading_time_for
from nichelab.errors import ConfigurationError, InvalidInputError
from nichelab.results import ServiceResult
from .aggregates import average, count_by_month
from .base import OwnedService, envelope, unwrap
from .simulated import SimulatedDataProvider

logger = logging.getLogger(__name__)

_DERIVED = ("word_count", "reading_time")


def derive_metrics(body: Optional[str]) -> Dict[str, int]:
    """word_count and reading_time (minutes at 200 wpm, rounded up) for a body."""
    words = count_words(body or "")
    return {"word_count": words, "reading_time": reading_time_for(words)}


class ContentService(OwnedService):
    """Content owned (through niche or site) by the current identity."""

    def __init__(self, identity, session_factory=None, ai=None, simulator: Optional[SimulatedDataProvider] = None):
        super().__init__(identity, session_factory)
        self.ai = ai
        self.simulator = simulator or SimulatedDataProvider()
        self.content = CollectionGateway(Content, session_factory)
        self.niches = CollectionGateway(Niche, session_factory)
        self.sites = CollectionGateway(NicheSite, session_factory)

    # =========================================================================
    # OWNERSHIP
    # =========================================================================

    def _owned(self) -> list:
        owner = self.owner_id()
        return [or_(
            Content.niche_id.in_(select(Niche.id).where(Niche.user_id == owner)),
            Content.niche_site_id.in_(select(NicheSite.id).where(NicheSite.user_id == owner)),
        )]

    def _check_parents(self, record: Dict[str, Any], required: bool = True) -> None:
        """The referenced niche and site must exist and belong to the owner."""
        niche_id = record.get("niche_id")
        site_id = record.get("niche_site_id")
        if required and not niche_id and not site_id:
            raise InvalidInputError("Content must belong to a niche or a site")

        owner = self.owner_id()
        if niche_id:
            unwrap(self.niches.find_one({"id": niche_id, "user_id": owner}))
        if site_id:
            unwrap(self.sites.find_one({"id": site_id, "user_id": owner}))

    @staticmethod
    def _prepare(record: Dict[str, Any]) -> Dict[str, Any]:
        prepared = {k: v for k, v in record.items() if k not in _DERIVED}
        prepared.setdefault("body", "")
        prepared.update(derive_metrics(prepared["body"]))
        return prepared

    # =========================================================================
    # CRUD
    # =========================================================================

    @envelope
    def create_content(self, data: Dict[str, Any]) -> ServiceResult:
        self._check_parents(data)
        return self.content.create(self._prepare(data))

    @envelope
    def bulk_create_content(self, items: List[Dict[str, Any]]) -> ServiceResult:
        """Insert many articles in one transaction."""
        if not items:
            return ServiceResult.ok([])
        for item in items:
            self._check_parents(item)
        return self.content.create_many([self._prepare(item) for item in items])

    @envelope
    def get_content(self, content_id: str) -> ServiceResult:
        return self.content.find_one({"id": content_id}, criteria=self._owned())

    @envelope
    def update_content(self, content_id: str, updates: Dict[str, Any]) -> ServiceResult:
        """Update an article; a new body recomputes word_count and reading_time."""
        updates = {k: v for k, v in updates.items() if k not in _DERIVED}
        if "niche_id" in updates or "niche_site_id" in updates:
            # The article must keep at least one parent after the patch
            current = unwrap(self.content.find_one({"id": content_id}, criteria=self._owned()))
            parents = {key: current[key] for key in ("niche_id", "niche_site_id")}
            parents.update({k: updates[k] for k in parents if k in updates})
            if not parents["niche_id"] and not parents["niche_site_id"]:
                raise InvalidInputError("Content must belong to a niche or a site")
        self._check_parents(updates, required=False)
        if "body" in updates:
            updates.update(derive_metrics(updates["body"]))
        return self.content.update({"id": content_id}, updates, criteria=self._owned())

    @envelope
    def delete_content(self, content_id: str) -> ServiceResult:
        return self.content.delete({"id": content_id}, criteria=self._owned())

    # =========================================================================
    # QUERIES
    # =========================================================================

    @envelope
    def get_content_by_niche(self, niche_id: str) -> ServiceResult:
        return self.content.find({"niche_id": niche_id}, criteria=self._owned())

    @envelope
    def get_content_by_site(self, site_id: str) -> ServiceResult:
        return self.content.find({"niche_site_id": site_id}, criteria=self._owned())

    @envelope
    def get_user_content(self) -> ServiceResult:
        """Every reachable article, newest first."""
        return self.content.find(criteria=self._owned())

    @envelope
    def get_recent_content(self, limit: int = 10) -> ServiceResult:
        return self.content.find(criteria=self._owned(), limit=limit)

    @envelope
    def search_content(self, query: str, niche_id: Optional[str] = None, site_id: Optional[str] = None) -> ServiceResult:
        """Title/body search, optionally narrowed to one niche or site."""
        filters = {}
        if niche_id:
            filters["niche_id"] = niche_id
        if site_id:
            filters["niche_site_id"] = site_id
        return self.content.find(filters, criteria=self._owned(), search=(query, ("title", "body")))

    @envelope
    def get_content_analytics(self, niche_id: Optional[str] = None, site_id: Optional[str] = None) -> ServiceResult:
        filters = {}
        if niche_id:
            filters["niche_id"] = niche_id
        if site_id:
            filters["niche_site_id"] = site_id
        content = unwrap(self.content.find(filters, criteria=self._owned(), order_by=None))

        words = [c["word_count"] or 0 for c in content]
        minutes = [c["reading_time"] or 0 for c in content]
        return ServiceResult.ok({
            "totalContent": len(content),
            "totalWordCount": sum(words),
            "averageWordCount": average(words),
            "totalReadingTime": sum(minutes),
            "averageReadingTime": average(minutes),
            "contentByMonth": count_by_month(content),
        })

    @envelope
    def get_content_performance(self, content_id: str) -> ServiceResult:
        """Simulated traffic and revenue figures for an owned article."""
        unwrap(self.content.find_one({"id": content_id}, criteria=self._owned()))
        return ServiceResult.ok({"contentId": str(to_uuid(content_id)), **self.simulator.content_performance()})

    # =========================================================================
    # GENERATION
    # =========================================================================

    @envelope
    async def generate_content(
        self,
        title: str,
        topic: str,
        length: Union[str, int] = "medium",
        tone: str = "informative",
        content_type: str = "article",
        keywords: Optional[List[str]] = None,
        niche_id: Optional[str] = None,
        niche_site_id: Optional[str] = None,
    ) -> ServiceResult:
        """
        Generate an article with the AI and store it.

        The stored title, body, keywords and meta description come from the
        model; word_count and reading_time are recomputed from the body.
        """
        if self.ai is None:
            raise ConfigurationError("AI service is not configured")

        parents = {"niche_id": niche_id, "niche_site_id": niche_site_id}
        self._check_parents(parents)

        generated = await self.ai.generate_content(
            title, topic, length=length, tone=tone, content_type=content_type, keywords=keywords,
        )
        if not generated.success:
            return generated

        article = generated.data
        record = {
            "title": article.get("title") or title,
            "body": article.get("body", ""),
            "meta_description": article.get("metaDescription") or None,
            "keywords": article.get("keywords") or keywords or [],
            **{k: v for k, v in parents.items() if v},
        }
        result = self.content.create(self._prepare(record))
        if result.success:
            logger.info(f"Stored generated article '{record['title']}' ({result.data['word_count']} words)")
        return result
