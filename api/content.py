"""
Content API

Content hangs off an owned niche, an owned site, or both. word_count and
reading_time are always computed from the body.

Endpoints:
- GET    /api/content - All content reachable by the caller
- POST   /api/content - Create content
- POST   /api/content/bulk - Create many items
- POST   /api/content/generate - Generate an article with the AI and store it
- GET    /api/content/recent - Most recently created
- GET    /api/content/search?q= - Search title and body
- GET    /api/content/analytics - Word count / reading time aggregates
- GET    /api/content/niche/{niche_id}
- GET    /api/content/site/{site_id}
- GET    /api/content/{content_id}
- PATCH  /api/content/{content_id}
- DELETE /api/content/{content_id}
- GET    /api/content/{content_id}/performance - Simulated performance metrics
"""

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import get_current_user
from nichelab.services import ContentService
from .common import envelope_response, get_content_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/content",
    tags=["Content"],
    dependencies=[Depends(get_current_user)],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class CreateContentRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    body: str = ""
    meta_description: Optional[str] = Field(None, max_length=500)
    keywords: List[str] = Field(default_factory=list)
    niche_id: Optional[str] = None
    niche_site_id: Optional[str] = None


class UpdateContentRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=500)
    body: Optional[str] = None
    meta_description: Optional[str] = Field(None, max_length=500)
    keywords: Optional[List[str]] = None


class GenerateContentRequest(BaseModel):
    """Article generation request. ``length`` is short/medium/long or a word count."""
    title: str = Field(..., min_length=1, max_length=500)
    topic: str = Field(..., min_length=2)
    length: Union[int, str] = "medium"
    tone: str = "informative"
    content_type: str = "article"
    keywords: Optional[List[str]] = None
    niche_id: Optional[str] = None
    niche_site_id: Optional[str] = None


# =============================================================================
# COLLECTION ENDPOINTS
# =============================================================================

@router.get("")
def list_content(service: ContentService = Depends(get_content_service)):
    return envelope_response(service.get_user_content())


@router.post("")
def create_content(request: CreateContentRequest, service: ContentService = Depends(get_content_service)):
    return envelope_response(service.create_content(request.model_dump(exclude_none=True)), success_status=201)


@router.post("/bulk")
def bulk_create_content(
    request: List[CreateContentRequest],
    service: ContentService = Depends(get_content_service),
):
    items = [item.model_dump(exclude_none=True) for item in request]
    return envelope_response(service.bulk_create_content(items), success_status=201)


@router.post("/generate")
async def generate_content(
    request: GenerateContentRequest,
    service: ContentService = Depends(get_content_service),
):
    """Generate an article and store it under the given niche and/or site."""
    result = await service.generate_content(**request.model_dump())
    return envelope_response(result, success_status=201)


@router.get("/recent")
def recent_content(
    limit: int = Query(10, ge=1, le=100),
    service: ContentService = Depends(get_content_service),
):
    return envelope_response(service.get_recent_content(limit))


@router.get("/search")
def search_content(
    q: str = Query(..., min_length=1),
    niche_id: Optional[str] = None,
    site_id: Optional[str] = None,
    service: ContentService = Depends(get_content_service),
):
    return envelope_response(service.search_content(q, niche_id=niche_id, site_id=site_id))


@router.get("/analytics")
def content_analytics(
    niche_id: Optional[str] = None,
    site_id: Optional[str] = None,
    service: ContentService = Depends(get_content_service),
):
    return envelope_response(service.get_content_analytics(niche_id=niche_id, site_id=site_id))


@router.get("/niche/{niche_id}")
def content_by_niche(niche_id: str, service: ContentService = Depends(get_content_service)):
    return envelope_response(service.get_content_by_niche(niche_id))


@router.get("/site/{site_id}")
def content_by_site(site_id: str, service: ContentService = Depends(get_content_service)):
    return envelope_response(service.get_content_by_site(site_id))


# =============================================================================
# ITEM ENDPOINTS
# =============================================================================

@router.get("/{content_id}")
def get_content(content_id: str, service: ContentService = Depends(get_content_service)):
    return envelope_response(service.get_content(content_id))


@router.patch("/{content_id}")
def update_content(
    content_id: str,
    request: UpdateContentRequest,
    service: ContentService = Depends(get_content_service),
):
    return envelope_response(service.update_content(content_id, request.model_dump(exclude_unset=True)))


@router.delete("/{content_id}")
def delete_content(content_id: str, service: ContentService = Depends(get_content_service)):
    return envelope_response(service.delete_content(content_id))


@router.get("/{content_id}/performance")
def content_performance(content_id: str, service: ContentService = Depends(get_content_service)):
    return envelope_response(service.get_content_performance(content_id))
