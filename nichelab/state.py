"""
Application State

Client-side state for a signed-in session: who is signed in, their profile
row and the collections loaded so far. Created explicitly and passed where
needed; ``init`` hydrates it and subscribes to session changes, ``teardown``
unsubscribes and resets it.

Usage:
    identity = SupabaseIdentityService(url, anon_key, store=FileSessionStore(path))
    state = AppState(identity, UserService(identity))

    await state.init()
    ...
    state.teardown()
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from nichelab.auth.identity import SIGNED_IN, SIGNED_OUT, AuthSession, SupabaseIdentityService
from nichelab.services.users import UserService

logger = logging.getLogger(__name__)


class AppState:
    """Session, profile and loaded collections."""

    def __init__(self, identity: SupabaseIdentityService, users: UserService):
        self.identity = identity
        self.users = users
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.reset()
        self.loading = True

    def reset(self) -> None:
        """Back to the signed-out state."""
        self.session: Optional[AuthSession] = None
        self.user: Optional[Dict[str, Any]] = None
        self.niches: List[Dict[str, Any]] = []
        self.keywords: List[Dict[str, Any]] = []
        self.content: List[Dict[str, Any]] = []
        self.sites: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def init(self) -> None:
        """Restore a stored session (if any), load the profile and listen for changes."""
        self.loading = True
        if self._unsubscribe is None:
            self._unsubscribe = self.identity.on_auth_state_change(self._on_auth_change)

        session = await self.identity.restore_session()
        # restore_session emits SIGNED_IN, which already loaded the profile
        if session is not None and self.session is None:
            self.session = session
            self.load_profile()
        self.loading = False

    def teardown(self) -> None:
        """Stop listening and clear everything."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.reset()

    async def _on_auth_change(self, event: str, session: Optional[AuthSession]) -> None:
        self.session = session
        self.loading = False
        if event == SIGNED_IN and session is not None:
            self.load_profile()
        elif event == SIGNED_OUT:
            self.reset()

    def load_profile(self) -> None:
        """
        Fetch the profile row of the signed-in identity.

        A missing row leaves ``user`` unset; any other failure is kept in
        ``error``.
        """
        result = self.users.get_current_profile()
        if result.success:
            self.user = result.data
        elif result.kind == "not_found":
            logger.info("No profile row yet for the signed-in identity")
        else:
            logger.error(f"Error fetching user profile: {result.error}")
            self.error = result.error

    # =========================================================================
    # COLLECTION UPDATES
    # =========================================================================

    def set_niches(self, niches: List[Dict[str, Any]]) -> None:
        self.niches = list(niches)

    def add_niche(self, niche: Dict[str, Any]) -> None:
        self.niches.append(niche)

    def update_niche(self, niche: Dict[str, Any]) -> None:
        self.niches = [niche if n["id"] == niche["id"] else n for n in self.niches]

    def remove_niche(self, niche_id: str) -> None:
        self.niches = [n for n in self.niches if n["id"] != niche_id]

    def set_keywords(self, keywords: List[Dict[str, Any]]) -> None:
        self.keywords = list(keywords)

    def set_content(self, content: List[Dict[str, Any]]) -> None:
        self.content = list(content)

    def add_content(self, item: Dict[str, Any]) -> None:
        self.content.append(item)

    def set_sites(self, sites: List[Dict[str, Any]]) -> None:
        self.sites = list(sites)

    def add_site(self, site: Dict[str, Any]) -> None:
        self.sites.append(site)

    def update_site(self, site: Dict[str, Any]) -> None:
        self.sites = [site if s["id"] == site["id"] else s for s in self.sites]
