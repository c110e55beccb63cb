"""
Niche Site Service

Sites owned by the current identity: CRUD, revenue tracking, portfolio
aggregates and cloning.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from nichelab.database.gateway import CollectionGateway
from nichelab.database.models import Content, NicheSite, utcnow
from nichelab.errors import InvalidInputError
from nichelab.results import ServiceResult
from .aggregates import average, count_by_month, sum_by_month
from .base import OwnedService, envelope, gather_results, unwrap

logger = logging.getLogger(__name__)

# Reset on clone; a copy starts without a domain, earnings or traffic
_CLONE_RESET = {"url": None, "revenue": 0, "traffic": 0}


def check_site_metrics(record: Dict[str, Any]) -> None:
    """revenue and traffic, when present, must be non-negative numbers."""
    for field in ("revenue", "traffic"):
        if field not in record:
            continue
        value = record[field]
        if value is None or value < 0:
            raise InvalidInputError(f"{field} must be a non-negative number", details={"field": field, "value": value})


def site_age_days(created_at: str, now: datetime = None) -> int:
    """Whole days since creation, rounded up."""
    now = now or utcnow()
    elapsed = abs((now - datetime.fromisoformat(created_at)).total_seconds())
    return int(-(-elapsed // 86400))


class NicheSiteService(OwnedService):
    """Sites owned by the current identity."""

    def __init__(self, identity, session_factory=None):
        super().__init__(identity, session_factory)
        self.sites = CollectionGateway(NicheSite, session_factory)
        self.content = CollectionGateway(Content, session_factory)

    def _scope(self) -> Dict[str, Any]:
        return {"user_id": self.owner_id()}

    # =========================================================================
    # CRUD
    # =========================================================================

    @envelope
    def create_site(self, data: Dict[str, Any]) -> ServiceResult:
        check_site_metrics(data)
        return self.sites.create({**data, "user_id": self.owner_id()})

    @envelope
    def get_sites(self) -> ServiceResult:
        return self.sites.find(self._scope())

    @envelope
    def get_site(self, site_id: str) -> ServiceResult:
        """One owned site with its content."""
        site = unwrap(self.sites.find_one({"id": site_id, **self._scope()}))
        content = unwrap(self.content.find({"niche_site_id": site_id}))
        return ServiceResult.ok({**site, "content": content})

    @envelope
    def update_site(self, site_id: str, updates: Dict[str, Any]) -> ServiceResult:
        updates = {k: v for k, v in updates.items() if k != "user_id"}
        check_site_metrics(updates)
        return self.sites.update({"id": site_id, **self._scope()}, updates)

    @envelope
    def delete_site(self, site_id: str) -> ServiceResult:
        """Delete an owned site; its content goes with it."""
        return self.sites.delete({"id": site_id, **self._scope()})

    @envelope
    def update_revenue(self, site_id: str, revenue: float) -> ServiceResult:
        check_site_metrics({"revenue": revenue})
        return self.sites.update({"id": site_id, **self._scope()}, {"revenue": revenue})

    @envelope
    def clone_site(self, site_id: str, new_name: str) -> ServiceResult:
        """Copy a site's structure under a new name (content is not copied)."""
        original = unwrap(self.sites.find_one({"id": site_id, **self._scope()}))
        clone = {k: v for k, v in original.items() if k not in ("id", "created_at", "updated_at")}
        clone.update(_CLONE_RESET, name=new_name, user_id=self.owner_id())
        result = self.sites.create(clone)
        if result.success:
            logger.info(f"Cloned site {site_id} as '{new_name}'")
        return result

    # =========================================================================
    # QUERIES
    # =========================================================================

    @envelope
    def search_sites(self, query: str) -> ServiceResult:
        return self.sites.find(self._scope(), search=(query, ("name",)))

    @envelope
    def get_sites_by_monetization(self, monetization_method: str) -> ServiceResult:
        return self.sites.find(
            {**self._scope(), "monetization_method": monetization_method}, order_by="revenue",
        )

    @envelope
    def get_top_sites(self, limit: int = 10) -> ServiceResult:
        return self.sites.find(self._scope(), order_by="revenue", limit=limit)

    @envelope
    async def get_site_stats(self, site_id: str) -> ServiceResult:
        """
        Revenue and content statistics for an owned site.

        The site and its content are read concurrently; either failing fails
        the whole result.
        """
        scope = self._scope()
        site, content = await gather_results(
            lambda: self.sites.find_one({"id": site_id, **scope}),
            lambda: self.content.find({"niche_site_id": site_id}, order_by=None),
        )

        revenue = site["revenue"] or 0
        words = [c["word_count"] or 0 for c in content]
        return ServiceResult.ok({
            "revenue": revenue,
            "traffic": site["traffic"] or 0,
            "contentCount": len(content),
            "totalWordCount": sum(words),
            "averageWordCount": average(words),
            "totalReadingTime": sum(c["reading_time"] or 0 for c in content),
            "siteAge": site_age_days(site["created_at"]),
            "contentByMonth": count_by_month(content),
            "revenuePerContent": revenue / len(content) if content else 0,
        })

    @envelope
    def get_portfolio_overview(self) -> ServiceResult:
        sites = unwrap(self.sites.find(self._scope(), order_by=None))

        revenues = [s["revenue"] or 0 for s in sites]
        breakdown: Dict[str, Dict[str, Any]] = {}
        for site in sites:
            method = site["monetization_method"] or "unknown"
            entry = breakdown.setdefault(method, {"count": 0, "revenue": 0})
            entry["count"] += 1
            entry["revenue"] += site["revenue"] or 0

        top_site = max(sites, key=lambda s: s["revenue"] or 0, default=None)
        return ServiceResult.ok({
            "totalSites": len(sites),
            "totalRevenue": sum(revenues),
            "averageRevenue": average(revenues),
            "totalTraffic": sum(s["traffic"] or 0 for s in sites),
            "monetizationBreakdown": breakdown,
            "revenueByMonth": sum_by_month(sites, "revenue"),
            "topRevenueSite": top_site,
        })
