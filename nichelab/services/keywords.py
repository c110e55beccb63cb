"""
Keyword Service

Keywords have no owner column; they are reachable only through a niche the
current identity owns.
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select

from nichelab.database.gateway import CollectionGateway, to_uuid
from nichelab.database.models import COMPETITION_LEVELS, Keyword, Niche
from nichelab.errors import InvalidInputError
from nichelab.results import ServiceResult
from .base import OwnedService, envelope, unwrap

logger = logging.getLogger(__name__)


class KeywordService(OwnedService):
    """Keywords of niches owned by the current identity."""

    def __init__(self, identity, session_factory=None):
        super().__init__(identity, session_factory)
        self.keywords = CollectionGateway(Keyword, session_factory)
        self.niches = CollectionGateway(Niche, session_factory)

    def _owned(self) -> list:
        """Criteria restricting keywords to the owner's niches."""
        owned_niches = select(Niche.id).where(Niche.user_id == self.owner_id())
        return [Keyword.niche_id.in_(owned_niches)]

    def _check_niches(self, niche_ids) -> None:
        """NotFoundError unless every niche id belongs to the owner."""
        owner = self.owner_id()
        for niche_id in {str(to_uuid(n)) for n in niche_ids}:
            unwrap(self.niches.find_one({"id": niche_id, "user_id": owner}))

    # =========================================================================
    # CRUD
    # =========================================================================

    @envelope
    def create_keyword(self, data: Dict[str, Any]) -> ServiceResult:
        self._check_niches([data.get("niche_id")])
        return self.keywords.create(data)

    @envelope
    def create_keywords(self, rows: List[Dict[str, Any]]) -> ServiceResult:
        """Bulk insert; all rows or none."""
        if not rows:
            return ServiceResult.ok([])
        self._check_niches([row.get("niche_id") for row in rows])
        return self.keywords.create_many(rows)

    @envelope
    def get_keywords_by_niche(self, niche_id: str) -> ServiceResult:
        return self.keywords.find({"niche_id": niche_id}, criteria=self._owned(), order_by="search_volume")

    @envelope
    def get_keyword(self, keyword_id: str) -> ServiceResult:
        return self.keywords.find_one({"id": keyword_id}, criteria=self._owned())

    @envelope
    def update_keyword(self, keyword_id: str, updates: Dict[str, Any]) -> ServiceResult:
        if "niche_id" in updates:
            self._check_niches([updates["niche_id"]])
        return self.keywords.update({"id": keyword_id}, updates, criteria=self._owned())

    @envelope
    def delete_keyword(self, keyword_id: str) -> ServiceResult:
        return self.keywords.delete({"id": keyword_id}, criteria=self._owned())

    @envelope
    def delete_keywords_by_niche(self, niche_id: str) -> ServiceResult:
        self._check_niches([niche_id])
        return self.keywords.delete({"niche_id": niche_id}, require_match=False)

    @envelope
    def bulk_update_keywords(self, updates: List[Dict[str, Any]]) -> ServiceResult:
        """Apply ``[{"id": ..., **changes}]`` in one transaction."""
        result = self.keywords.update_each(updates, criteria=self._owned())
        if not result.success:
            logger.warning(f"Bulk keyword update of {len(updates)} rows failed: {result.error}")
        return result

    # =========================================================================
    # QUERIES
    # =========================================================================

    @envelope
    def search_keywords(self, niche_id: str, query: str) -> ServiceResult:
        return self.keywords.find(
            {"niche_id": niche_id}, criteria=self._owned(),
            search=(query, ("name",)), order_by="search_volume",
        )

    @envelope
    def get_keywords_by_competition(self, niche_id: str, competition_level: str) -> ServiceResult:
        level = (competition_level or "").lower()
        if level not in COMPETITION_LEVELS:
            raise InvalidInputError(
                f"competition_level must be one of {', '.join(COMPETITION_LEVELS)}",
                details={"value": competition_level},
            )
        return self.keywords.find(
            {"niche_id": niche_id, "competition_level": level},
            criteria=self._owned(), order_by="search_volume",
        )

    @envelope
    def get_top_keywords(self, niche_id: str, limit: int = 10) -> ServiceResult:
        return self.keywords.find(
            {"niche_id": niche_id}, criteria=self._owned(), order_by="search_volume", limit=limit,
        )

    @envelope
    def get_high_value_keywords(self, niche_id: str, limit: int = 10) -> ServiceResult:
        return self.keywords.find(
            {"niche_id": niche_id}, criteria=self._owned(), order_by="cpc_value", limit=limit,
        )

    @envelope
    def get_keyword_analytics(self, niche_id: str) -> ServiceResult:
        keywords = unwrap(self.keywords.find({"niche_id": niche_id}, criteria=self._owned(), order_by=None))

        volumes = [k["search_volume"] or 0 for k in keywords]
        cpcs = [k["cpc_value"] or 0 for k in keywords]
        total = len(keywords)

        return ServiceResult.ok({
            "totalKeywords": total,
            "totalSearchVolume": sum(volumes),
            "averageSearchVolume": sum(volumes) / total if total else 0,
            "averageCPC": sum(cpcs) / total if total else 0,
            "competitionBreakdown": {
                level: sum(1 for k in keywords if k["competition_level"] == level)
                for level in COMPETITION_LEVELS
            },
            "topSearchVolume": max(volumes, default=0),
            "topCPC": max(cpcs, default=0),
        })
