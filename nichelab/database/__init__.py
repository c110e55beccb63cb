"""
NicheLab Database Layer

Usage:
    from nichelab.database import (
        # Session management
        init_db, get_db_context, create_db_engine,

        # Models
        Niche, Keyword, Content, NicheSite,

        # Gateway
        CollectionGateway,
    )

    init_db()

    niches = CollectionGateway(Niche)
    result = niches.create({"name": "Indoor Gardening", "user_id": user_id})
"""

from .models import (
    Base,
    Niche,
    Keyword,
    Content,
    NicheSite,
    CompetitionLevel,
    PlanType,
    COMPETITION_LEVELS,
    count_words,
    reading_time_for,
)
from .session import (
    get_database_url,
    create_db_engine,
    create_session_factory,
    get_engine,
    get_session_factory,
    get_db,
    get_db_context,
    init_db,
    check_db_connection,
    reset_engine,
)
from .gateway import CollectionGateway, to_uuid

__all__ = [
    "Base",
    "Niche",
    "Keyword",
    "Content",
    "NicheSite",
    "CompetitionLevel",
    "PlanType",
    "COMPETITION_LEVELS",
    "count_words",
    "reading_time_for",
    "get_database_url",
    "create_db_engine",
    "create_session_factory",
    "get_engine",
    "get_session_factory",
    "get_db",
    "get_db_context",
    "init_db",
    "check_db_connection",
    "reset_engine",
    "CollectionGateway",
    "to_uuid",
]
