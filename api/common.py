"""
Shared API plumbing

- Service dependencies built per request around the caller's identity
- The process-wide completion client
- Envelope to HTTP response mapping
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from nichelab.auth.dependencies import get_identity
from nichelab.auth.identity import RequestIdentity, SupabaseIdentityService
from nichelab.integrations import OpenRouterClient, create_completion_client
from nichelab.results import ServiceResult
from nichelab.services import (
    AIService,
    CompetitiveAnalysisService,
    ContentService,
    KeywordService,
    NicheService,
    NicheSiteService,
    ResearchService,
    SimulatedDataProvider,
    UserService,
)
from nichelab.utils.config import get_settings

logger = logging.getLogger(__name__)

# Envelope error kind -> HTTP status
STATUS_BY_KIND = {
    "not_authenticated": 401,
    "not_found": 404,
    "invalid_input": 422,
    "configuration": 503,
    "transport": 502,
    "parse": 502,
    "persistence": 400,
}


def envelope_response(result: ServiceResult, success_status: int = 200) -> JSONResponse:
    """Return the envelope verbatim with a status derived from its error kind."""
    status_code = success_status if result.success else STATUS_BY_KIND.get(result.kind, 500)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(result.to_dict()))


# =============================================================================
# SHARED CLIENTS
# =============================================================================

_completion_client: Optional[OpenRouterClient] = None
_simulator = SimulatedDataProvider()


def get_completion_client() -> OpenRouterClient:
    """Process-wide OpenRouter client (created on first use)."""
    global _completion_client
    if _completion_client is None:
        _completion_client = create_completion_client()
    return _completion_client


async def close_completion_client() -> None:
    global _completion_client
    if _completion_client is not None:
        await _completion_client.close()
        _completion_client = None


def create_auth_client() -> SupabaseIdentityService:
    """Supabase auth client for one request (raises ConfigurationError when unconfigured)."""
    settings = get_settings()
    return SupabaseIdentityService(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_ai_service() -> AIService:
    return AIService(get_completion_client())


def get_niche_service(identity: RequestIdentity = Depends(get_identity)) -> NicheService:
    return NicheService(identity)


def get_keyword_service(identity: RequestIdentity = Depends(get_identity)) -> KeywordService:
    return KeywordService(identity)


def get_content_service(
    identity: RequestIdentity = Depends(get_identity),
    ai: AIService = Depends(get_ai_service),
) -> ContentService:
    return ContentService(identity, ai=ai, simulator=_simulator)


def get_site_service(identity: RequestIdentity = Depends(get_identity)) -> NicheSiteService:
    return NicheSiteService(identity)


def get_user_service(identity: RequestIdentity = Depends(get_identity)) -> UserService:
    return UserService(identity)


def get_competitive_service(ai: AIService = Depends(get_ai_service)) -> CompetitiveAnalysisService:
    return CompetitiveAnalysisService(ai, _simulator)


def get_research_service(
    ai: AIService = Depends(get_ai_service),
    niches: NicheService = Depends(get_niche_service),
    keywords: KeywordService = Depends(get_keyword_service),
    competitive: CompetitiveAnalysisService = Depends(get_competitive_service),
) -> ResearchService:
    return ResearchService(ai, niches, keywords, competitive=competitive, simulator=_simulator)
