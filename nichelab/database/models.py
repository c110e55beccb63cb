"""
SQLAlchemy Models for NicheLab

Collections mirror the Supabase schema:
- niches: researched market segments, owned by a user
- keywords: keyword suggestions, always children of a niche
- content: generated articles, attached to a niche or a site
- niche_sites: sites being built and monetized, owned by a user
- users: profile rows (see nichelab.auth.models)

Deleting a niche removes its keywords and content; deleting a site removes its
content. Both the foreign keys (ON DELETE CASCADE) and the ORM relationships
enforce this.
"""

import enum
import math
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID, uuid4

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text,
    ForeignKey, Index, CheckConstraint, JSON, Uuid,
)
from sqlalchemy.orm import declarative_base, relationship


WORDS_PER_MINUTE = 200


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are stored without timezone)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def count_words(text: str) -> int:
    return len((text or "").split())


def reading_time_for(word_count: int) -> int:
    """Minutes to read ``word_count`` words at 200 words per minute, rounded up."""
    return math.ceil(word_count / WORDS_PER_MINUTE)


class SerializableMixin:
    """Row to plain-dict conversion used by the persistence gateway."""

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for column in self.__table__.columns:
            value = getattr(self, column.key)
            if isinstance(value, UUID):
                value = str(value)
            elif isinstance(value, (datetime, date)):
                value = value.isoformat()
            elif isinstance(value, Decimal):
                value = float(value)
            elif isinstance(value, enum.Enum):
                value = value.value
            data[column.key] = value
        return data


Base = declarative_base(cls=SerializableMixin)


# =============================================================================
# ENUMS
# =============================================================================

class CompetitionLevel(enum.Enum):
    """How hard it is to rank in a niche or for a keyword."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PlanType(enum.Enum):
    """Subscription tier of a user."""
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


COMPETITION_LEVELS = tuple(level.value for level in CompetitionLevel)
_LEVELS_SQL = ", ".join(f"'{level}'" for level in COMPETITION_LEVELS)


# =============================================================================
# CORE TABLES
# =============================================================================

class Niche(Base):
    """A topical market segment being evaluated"""
    __tablename__ = "niches"

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    description = Column(Text)
    search_volume = Column(Integer, default=0, nullable=False)
    competition_level = Column(String(10), default=CompetitionLevel.MEDIUM.value, nullable=False)
    monetization_potential = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    keywords = relationship(
        "Keyword", back_populates="niche",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    content = relationship(
        "Content", back_populates="niche",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("search_volume >= 0", name="ck_niche_search_volume"),
        CheckConstraint(
            "monetization_potential >= 0 AND monetization_potential <= 100",
            name="ck_niche_monetization",
        ),
        CheckConstraint(f"competition_level IN ({_LEVELS_SQL})", name="ck_niche_competition"),
        Index("idx_niche_user", "user_id"),
    )


class Keyword(Base):
    """Keyword suggestion belonging to a niche"""
    __tablename__ = "keywords"

    id = Column(Uuid, primary_key=True, default=uuid4)
    niche_id = Column(Uuid, ForeignKey("niches.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(500), nullable=False)
    search_volume = Column(Integer, default=0, nullable=False)
    competition_level = Column(String(10), default=CompetitionLevel.MEDIUM.value, nullable=False)
    cpc_value = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=utcnow)

    niche = relationship("Niche", back_populates="keywords")

    __table_args__ = (
        CheckConstraint("search_volume >= 0", name="ck_keyword_search_volume"),
        CheckConstraint("cpc_value >= 0", name="ck_keyword_cpc"),
        CheckConstraint(f"competition_level IN ({_LEVELS_SQL})", name="ck_keyword_competition"),
        Index("idx_keyword_niche", "niche_id"),
    )


class NicheSite(Base):
    """A site built around a niche"""
    __tablename__ = "niche_sites"

    id = Column(Uuid, primary_key=True, default=uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    niche = Column(String(255))
    template = Column(String(100))
    monetization_method = Column(String(100))
    url = Column(String(2000))

    # Mutable metrics
    traffic = Column(Integer, default=0, nullable=False)
    revenue = Column(Float, default=0.0, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    content = relationship(
        "Content", back_populates="niche_site",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("revenue >= 0", name="ck_site_revenue"),
        CheckConstraint("traffic >= 0", name="ck_site_traffic"),
        Index("idx_site_user", "user_id"),
    )


class Content(Base):
    """Generated article, attached to a niche or a site"""
    __tablename__ = "content"

    id = Column(Uuid, primary_key=True, default=uuid4)
    niche_id = Column(Uuid, ForeignKey("niches.id", ondelete="CASCADE"), nullable=True)
    niche_site_id = Column(Uuid, ForeignKey("niche_sites.id", ondelete="CASCADE"), nullable=True)

    title = Column(String(500), nullable=False)
    body = Column(Text, default="")
    meta_description = Column(String(500))
    keywords = Column(JSON, default=list)

    # Derived from body
    word_count = Column(Integer, default=0, nullable=False)
    reading_time = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    niche = relationship("Niche", back_populates="content")
    niche_site = relationship("NicheSite", back_populates="content")

    __table_args__ = (
        Index("idx_content_niche", "niche_id"),
        Index("idx_content_site", "niche_site_id"),
    )
