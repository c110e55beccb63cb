"""
Niche Site API

Endpoints:
- GET    /api/sites - List owned sites
- POST   /api/sites - Create a site
- GET    /api/sites/search?q= - Search by name
- GET    /api/sites/top - Highest revenue
- GET    /api/sites/portfolio - Portfolio totals and breakdowns
- GET    /api/sites/monetization/{method} - Sites using a monetization method
- GET    /api/sites/{site_id} - Site with its content
- PATCH  /api/sites/{site_id}
- DELETE /api/sites/{site_id} - Delete a site (its content cascades)
- PUT    /api/sites/{site_id}/revenue - Set revenue
- GET    /api/sites/{site_id}/stats - Site and content statistics
- POST   /api/sites/{site_id}/clone - Copy a site under a new name
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import get_current_user
from nichelab.services import NicheSiteService
from .common import envelope_response, get_site_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/sites",
    tags=["Sites"],
    dependencies=[Depends(get_current_user)],
)


class CreateSiteRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    niche: Optional[str] = Field(None, max_length=255)
    template: Optional[str] = Field(None, max_length=100)
    monetization_method: Optional[str] = Field(None, max_length=100)
    url: Optional[str] = Field(None, max_length=2000)
    traffic: int = Field(0, ge=0)
    revenue: float = Field(0.0, ge=0)


class UpdateSiteRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    niche: Optional[str] = Field(None, max_length=255)
    template: Optional[str] = Field(None, max_length=100)
    monetization_method: Optional[str] = Field(None, max_length=100)
    url: Optional[str] = Field(None, max_length=2000)
    traffic: Optional[int] = Field(None, ge=0)
    revenue: Optional[float] = Field(None, ge=0)


class RevenueRequest(BaseModel):
    # Negative values are rejected by the service with invalid_input
    revenue: float


class CloneRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


@router.get("")
def list_sites(service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.get_sites())


@router.post("")
def create_site(request: CreateSiteRequest, service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.create_site(request.model_dump()), success_status=201)


@router.get("/search")
def search_sites(q: str = Query(..., min_length=1), service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.search_sites(q))


@router.get("/top")
def top_sites(
    limit: int = Query(10, ge=1, le=100),
    service: NicheSiteService = Depends(get_site_service),
):
    return envelope_response(service.get_top_sites(limit))


@router.get("/portfolio")
def portfolio_overview(service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.get_portfolio_overview())


@router.get("/monetization/{method}")
def sites_by_monetization(method: str, service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.get_sites_by_monetization(method))


@router.get("/{site_id}")
def get_site(site_id: str, service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.get_site(site_id))


@router.patch("/{site_id}")
def update_site(
    site_id: str,
    request: UpdateSiteRequest,
    service: NicheSiteService = Depends(get_site_service),
):
    return envelope_response(service.update_site(site_id, request.model_dump(exclude_unset=True)))


@router.delete("/{site_id}")
def delete_site(site_id: str, service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(service.delete_site(site_id))


@router.put("/{site_id}/revenue")
def update_revenue(
    site_id: str,
    request: RevenueRequest,
    service: NicheSiteService = Depends(get_site_service),
):
    return envelope_response(service.update_revenue(site_id, request.revenue))


@router.get("/{site_id}/stats")
async def site_stats(site_id: str, service: NicheSiteService = Depends(get_site_service)):
    return envelope_response(await service.get_site_stats(site_id))


@router.post("/{site_id}/clone")
def clone_site(
    site_id: str,
    request: CloneRequest,
    service: NicheSiteService = Depends(get_site_service),
):
    return envelope_response(service.clone_site(site_id, request.name), success_status=201)
