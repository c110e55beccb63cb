"""
Profile Synchronization

Every identity that acts through the API needs a users row: niches and sites
reference it. The row is created on first access, the same shape sign-up
creates ({id, name, email, plan_type: "free"}).
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from nichelab.auth.identity import AuthUser
from nichelab.auth.models import User
from nichelab.database.gateway import to_uuid
from nichelab.database.models import PlanType

logger = logging.getLogger(__name__)


def sync_profile(db: Session, user: AuthUser) -> User:
    """
    Ensure a profile row exists for ``user``.

    A missing row is created; an existing row keeps its name and plan and
    only picks up a changed email.
    """
    user_id = to_uuid(user.id)
    profile = db.query(User).filter(User.id == user_id).first()

    if profile is None:
        logger.info(f"Creating profile for {user.email}")
        profile = User(
            id=user_id,
            email=user.email or f"{user.id}@users.noreply",
            name=user.name,
            plan_type=PlanType.FREE.value,
        )
        db.add(profile)
        db.flush()
    elif user.email and profile.email != user.email:
        profile.email = user.email
        db.flush()

    return profile


def get_profile(db: Session, user_id: str) -> Optional[User]:
    """Profile row by id, or None when it has not been created yet."""
    return db.query(User).filter(User.id == to_uuid(user_id)).first()
