"""
Niche API

Endpoints:
- GET    /api/niches - List owned niches (with keyword/content counts)
- POST   /api/niches - Create a niche
- GET    /api/niches/search?q= - Search by name or description
- GET    /api/niches/{niche_id} - Niche with keywords and content
- PATCH  /api/niches/{niche_id} - Update a niche
- DELETE /api/niches/{niche_id} - Delete a niche (keywords and content cascade)
- GET    /api/niches/{niche_id}/stats - Keyword and content statistics
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from nichelab.auth.dependencies import get_current_user
from nichelab.services import NicheService
from .common import envelope_response, get_niche_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/niches",
    tags=["Niches"],
    dependencies=[Depends(get_current_user)],
)

CompetitionLevel = Literal["low", "medium", "high"]


class CreateNicheRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    search_volume: int = Field(0, ge=0)
    competition_level: CompetitionLevel = "medium"
    monetization_potential: int = Field(0, ge=0, le=100)


class UpdateNicheRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    search_volume: Optional[int] = Field(None, ge=0)
    competition_level: Optional[CompetitionLevel] = None
    monetization_potential: Optional[int] = Field(None, ge=0, le=100)


@router.get("")
def list_niches(service: NicheService = Depends(get_niche_service)):
    return envelope_response(service.get_niches())


@router.post("")
def create_niche(request: CreateNicheRequest, service: NicheService = Depends(get_niche_service)):
    return envelope_response(service.create_niche(request.model_dump()), success_status=201)


@router.get("/search")
def search_niches(
    q: str = Query(..., min_length=1, description="Matched against name and description"),
    service: NicheService = Depends(get_niche_service),
):
    return envelope_response(service.search_niches(q))


@router.get("/{niche_id}")
def get_niche(niche_id: str, service: NicheService = Depends(get_niche_service)):
    return envelope_response(service.get_niche(niche_id))


@router.patch("/{niche_id}")
def update_niche(
    niche_id: str,
    request: UpdateNicheRequest,
    service: NicheService = Depends(get_niche_service),
):
    return envelope_response(service.update_niche(niche_id, request.model_dump(exclude_unset=True)))


@router.delete("/{niche_id}")
def delete_niche(niche_id: str, service: NicheService = Depends(get_niche_service)):
    return envelope_response(service.delete_niche(niche_id))


@router.get("/{niche_id}/stats")
async def niche_stats(niche_id: str, service: NicheService = Depends(get_niche_service)):
    return envelope_response(await service.get_niche_stats(niche_id))
