"""
NicheLab Services

Entity services (niches, keywords, content, sites, users) return
ServiceResult envelopes and scope every read to the current identity.
ResearchService orchestrates AI research into stored niches and keywords.

Usage:
    identity = RequestIdentity(user)
    ai = AIService(create_completion_client())

    research = ResearchService(ai, NicheService(identity), KeywordService(identity))
    result = await research.conduct_niche_research("indoor gardening")
"""

from .ai import AIService
from .competitive import CompetitiveAnalysisService
from .content import ContentService, derive_metrics
from .keywords import KeywordService
from .niches import NicheService
from .research import ResearchService
from .simulated import SimulatedDataProvider
from .sites import NicheSiteService
from .users import UserService

__all__ = [
    "AIService",
    "CompetitiveAnalysisService",
    "ContentService",
    "derive_metrics",
    "KeywordService",
    "NicheService",
    "ResearchService",
    "SimulatedDataProvider",
    "NicheSiteService",
    "UserService",
]
