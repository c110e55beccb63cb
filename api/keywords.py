"""
Keyword API

Keywords are addressed through their niche; every route checks that the
niche belongs to the caller.

Endpoints:
- POST   /api/keywords - Create a keyword
- POST   /api/keywords/bulk - Create many keywords
- PATCH  /api/keywords/bulk - Update many keywords by id
- GET    /api/keywords/niche/{niche_id} - Keywords of a niche
- DELETE /api/keywords/niche/{niche_id} - Delete all keywords of a niche
- GET    /api/keywords/niche/{niche_id}/search?q= - Search by name
- GET    /api/keywords/niche/{niche_id}/competition/{level} - Filter by competition
- GET    /api/keywords/niche/{niche_id}/top - Highest search volume
- GET    /api/keywords/niche/{niche_id}/high-value - Highest CPC
- GET    /api/keywords/niche/{niche_id}/analytics - Aggregates
- GET    /api/keywords/{keyword_id}
- PATCH  /api/keywords/{keyword_id}
- DELETE /api/keywords/{keyword_id}
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import get_current_user
from nichelab.services import KeywordService
from .common import envelope_response, get_keyword_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/keywords",
    tags=["Keywords"],
    dependencies=[Depends(get_current_user)],
)

CompetitionLevel = Literal["low", "medium", "high"]


class CreateKeywordRequest(BaseModel):
    niche_id: str
    name: str = Field(..., min_length=1, max_length=500)
    search_volume: int = Field(0, ge=0)
    competition_level: CompetitionLevel = "medium"
    cpc_value: float = Field(0.0, ge=0)


class UpdateKeywordRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=500)
    search_volume: Optional[int] = Field(None, ge=0)
    competition_level: Optional[CompetitionLevel] = None
    cpc_value: Optional[float] = Field(None, ge=0)


class BulkUpdateItem(UpdateKeywordRequest):
    id: str


@router.post("")
def create_keyword(request: CreateKeywordRequest, service: KeywordService = Depends(get_keyword_service)):
    return envelope_response(service.create_keyword(request.model_dump()), success_status=201)


@router.post("/bulk")
def create_keywords(
    request: List[CreateKeywordRequest],
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(
        service.create_keywords([item.model_dump() for item in request]), success_status=201,
    )


@router.patch("/bulk")
def bulk_update_keywords(
    request: List[BulkUpdateItem],
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(service.bulk_update_keywords([item.model_dump(exclude_unset=True) for item in request]))


@router.get("/niche/{niche_id}")
def keywords_by_niche(niche_id: str, service: KeywordService = Depends(get_keyword_service)):
    return envelope_response(service.get_keywords_by_niche(niche_id))


@router.delete("/niche/{niche_id}")
def delete_keywords_by_niche(niche_id: str, service: KeywordService = Depends(get_keyword_service)):
    return envelope_response(service.delete_keywords_by_niche(niche_id))


@router.get("/niche/{niche_id}/search")
def search_keywords(
    niche_id: str,
    q: str = Query(..., min_length=1),
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(service.search_keywords(niche_id, q))


@router.get("/niche/{niche_id}/competition/{level}")
def keywords_by_competition(
    niche_id: str,
    level: str,
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(service.get_keywords_by_competition(niche_id, level))


@router.get("/niche/{niche_id}/top")
def top_keywords(
    niche_id: str,
    limit: int = Query(10, ge=1, le=100),
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(service.get_top_keywords(niche_id, limit))


@router.get("/niche/{niche_id}/high-value")
def high_value_keywords(
    niche_id: str,
    limit: int = Query(10, ge=1, le=100),
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(service.get_high_value_keywords(niche_id, limit))


@router.get("/niche/{niche_id}/analytics")
def keyword_analytics(niche_id: str, service: KeywordService = Depends(get_keyword_service)):
    return envelope_response(service.get_keyword_analytics(niche_id))


@router.get("/{keyword_id}")
def get_keyword(keyword_id: str, service: KeywordService = Depends(get_keyword_service)):
    return envelope_response(service.get_keyword(keyword_id))


@router.patch("/{keyword_id}")
def update_keyword(
    keyword_id: str,
    request: UpdateKeywordRequest,
    service: KeywordService = Depends(get_keyword_service),
):
    return envelope_response(service.update_keyword(keyword_id, request.model_dump(exclude_unset=True)))


@router.delete("/{keyword_id}")
def delete_keyword(keyword_id: str, service: KeywordService = Depends(get_keyword_service)):
    return envelope_response(service.delete_keyword(keyword_id))
