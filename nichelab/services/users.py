"""
User Service

Profile rows (users table) for the current identity, account statistics,
registration and account deletion.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_, select

from nichelab.auth.identity import SupabaseIdentityService
from nichelab.auth.models import User
from nichelab.database.gateway import CollectionGateway
from nichelab.database.models import Content, Niche, NicheSite, PlanType
from nichelab.errors import InvalidInputError
from nichelab.results import ServiceResult
from .base import OwnedService, envelope, gather_results, unwrap

logger = logging.getLogger(__name__)

# Columns a user may change on their own profile
PROFILE_FIELDS = ("name", "email")
PLAN_TYPES = tuple(plan.value for plan in PlanType)


class UserService(OwnedService):
    """Profile and account operations for the current identity."""

    def __init__(self, identity, session_factory=None):
        super().__init__(identity, session_factory)
        self.users = CollectionGateway(User, session_factory)
        self.niches = CollectionGateway(Niche, session_factory)
        self.sites = CollectionGateway(NicheSite, session_factory)
        self.content = CollectionGateway(Content, session_factory)

    @envelope
    async def register(
        self,
        auth: SupabaseIdentityService,
        email: str,
        password: str,
        name: Optional[str] = None,
    ) -> ServiceResult:
        """
        Sign up with Supabase and create the profile row ({id, name, email,
        plan_type: "free"}). A failed profile insert fails the registration.
        """
        signed_up = await auth.sign_up(email, password, name)
        if not signed_up.success:
            return signed_up

        user = signed_up.data["user"]
        profile = self.users.create({
            "id": user.id,
            "name": name,
            "email": email,
            "plan_type": PlanType.FREE.value,
        })
        if not profile.success:
            logger.error(f"Profile creation failed for {email}: {profile.error}")
            return profile

        logger.info(f"Registered {email}")
        return ServiceResult.ok({
            "user": profile.data,
            "session": signed_up.data["session"],
        })

    @envelope
    def get_current_profile(self) -> ServiceResult:
        """Profile row of the current identity (NotFoundError when none exists yet)."""
        return self.users.find_one({"id": self.owner_id()})

    @envelope
    def update_profile(self, updates: Dict[str, Any]) -> ServiceResult:
        rejected = sorted(set(updates) - set(PROFILE_FIELDS))
        if rejected:
            raise InvalidInputError(
                f"Cannot update profile fields: {', '.join(rejected)}",
                details={"fields": rejected},
            )
        return self.users.update({"id": self.owner_id()}, updates)

    @envelope
    def update_plan(self, plan_type: str) -> ServiceResult:
        if plan_type not in PLAN_TYPES:
            raise InvalidInputError(
                f"plan_type must be one of {', '.join(PLAN_TYPES)}",
                details={"value": plan_type},
            )
        return self.users.update({"id": self.owner_id()}, {"plan_type": plan_type})

    @envelope
    async def get_user_stats(self) -> ServiceResult:
        """Counts of owned niches, sites and reachable content, read concurrently."""
        owner = self.owner_id()
        owned_content = or_(
            Content.niche_id.in_(select(Niche.id).where(Niche.user_id == owner)),
            Content.niche_site_id.in_(select(NicheSite.id).where(NicheSite.user_id == owner)),
        )

        niches, sites, content = await gather_results(
            lambda: self.niches.count({"user_id": owner}),
            lambda: self.sites.count({"user_id": owner}),
            lambda: self.content.count(criteria=[owned_content]),
        )
        return ServiceResult.ok({
            "nichesCount": niches,
            "sitesCount": sites,
            "contentCount": content,
        })

    @envelope
    def delete_account(self) -> ServiceResult:
        """
        Delete the profile row; niches, sites, keywords and content cascade.

        The Supabase identity itself needs a service-role key to remove and
        is left in place.
        """
        owner = self.owner_id()
        unwrap(self.users.delete({"id": owner}))
        logger.warning(f"Deleted account data for {owner}; the Supabase identity remains")
        return ServiceResult.ok({"deleted": True})
