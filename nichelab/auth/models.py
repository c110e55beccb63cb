"""
Authentication Models

Profile row for each Supabase identity. The id matches the Supabase
auth.users.id, so niches and sites reference it directly.
"""

from sqlalchemy import Column, String, DateTime, Index, CheckConstraint, Uuid

from nichelab.database.models import Base, PlanType, utcnow

_PLANS_SQL = ", ".join(f"'{plan.value}'" for plan in PlanType)


class User(Base):
    """
    Application profile for an authenticated identity.

    Created on sign-up (plan "free") or reconciled from a verified token on
    first API access.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True)

    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(255))
    plan_type = Column(String(20), default=PlanType.FREE.value, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(f"plan_type IN ({_PLANS_SQL})", name="ck_user_plan"),
        Index("idx_user_email", "email"),
    )

    def __repr__(self):
        return f"<User {self.email} ({self.plan_type})>"
