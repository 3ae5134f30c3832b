"""Session/role gate deciding which dashboard views may render.

Two sources feed the gate: the provider's auth-state subscription and a
one-off initial session check. Neither does work inline; both only enqueue a
``SessionChanged`` message which a single consumer task applies, fetching the
profile when a session is present. Once a subscription event has been applied,
a late initial-check result is dropped, so both interleavings converge.

Authorization fails closed: provider errors while resolving the session end in
``UNAUTHENTICATED`` and a missing profile never grants more than
``AUTHENTICATED_USER``.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import asyncio
import logging

from painel.config import AUTH_RESOLUTION_TIMEOUT_SECONDS
from painel.exceptions import PainelError
from painel.schemas.auth import Role, Session, UserProfile
from painel.services.auth_store import AuthSnapshot, AuthStatus, AuthStore
from painel.services.providers import DataProvider, IdentityProvider

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = "id, email, role, nome"


class Decision(str, Enum):
    ALLOW = "allow"
    REDIRECT_TO_LOGIN = "redirect_to_login"
    REDIRECT_TO_FORBIDDEN = "redirect_to_forbidden"
    SHOW_LOADING_INDICATOR = "show_loading_indicator"


def decide(snapshot: AuthSnapshot, required_role: Optional[Role] = None, now: Optional[float] = None) -> Decision:
    if snapshot.status == AuthStatus.LOADING:
        return Decision.SHOW_LOADING_INDICATOR
    if (
        snapshot.status == AuthStatus.UNAUTHENTICATED
        or snapshot.session is None
        or snapshot.session.is_expired(now)
    ):
        return Decision.REDIRECT_TO_LOGIN
    if required_role == Role.ADMIN and not snapshot.is_admin:
        return Decision.REDIRECT_TO_FORBIDDEN
    return Decision.ALLOW


@dataclass(frozen=True)
class SessionChanged:
    session: Optional[Session]
    from_event: bool
    generation: int


class AccessGate:
    def __init__(
        self,
        identity: IdentityProvider,
        data: DataProvider,
        store: Optional[AuthStore] = None,
        timeout: float = AUTH_RESOLUTION_TIMEOUT_SECONDS,
    ):
        self.identity = identity
        self.data = data
        self.store = store or AuthStore()
        self.timeout = timeout
        self._queue: asyncio.Queue = asyncio.Queue()
        self._tasks = []
        self._unsubscribe = None
        self._event_applied = False
        self._pending_session: Optional[Session] = None
        self._generation = 0
        self._closed = False

    @property
    def snapshot(self) -> AuthSnapshot:
        return self.store.snapshot

    # -------- Lifecycle --------
    async def start(self) -> None:
        self._closed = False
        self._queue = asyncio.Queue()
        self._unsubscribe = self.identity.subscribe(self._on_session_change)
        self._tasks = [
            asyncio.create_task(self._consume(), name="auth-consumer"),
            asyncio.create_task(self._check_initial_session(), name="auth-initial-session"),
            asyncio.create_task(self._enforce_timeout(), name="auth-timeout"),
        ]

    async def stop(self) -> None:
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

    async def settled(self) -> None:
        """Wait until every queued session change has been applied."""
        try:
            # Profile lookups are bounded by the timeout too, so allow for one of them
            await asyncio.wait_for(self._queue.join(), self.timeout * 2)
        except asyncio.TimeoutError:
            logger.warning("Pending session changes were not applied in time")

    # -------- Public contract --------
    def resolve_access(self, required_role: Optional[Role] = None) -> Decision:
        snapshot = self.store.snapshot
        if snapshot.session is not None and snapshot.session.is_expired():
            logger.info("Session expired, clearing local auth state")
            self._generation += 1
            self._publish(AuthSnapshot(status=AuthStatus.UNAUTHENTICATED))
        return decide(self.store.snapshot, required_role)

    async def sign_in(self, identifier: str, secret: str) -> Session:
        # The resulting state arrives through the subscription like any other change
        return await self.identity.sign_in_with_password(identifier, secret)

    async def sign_out(self) -> None:
        self._generation += 1
        self._publish(AuthSnapshot(status=AuthStatus.UNAUTHENTICATED))
        try:
            await self.identity.sign_out()
        except PainelError as e:
            logger.warning(f"Provider sign-out failed, local session already cleared: {e}")

    # -------- Producers --------
    def _on_session_change(self, session: Optional[Session]) -> None:
        # Called from inside the provider callback: enqueue only
        if self._closed:
            return
        self._queue.put_nowait(SessionChanged(session, from_event=True, generation=self._generation))

    async def _check_initial_session(self) -> None:
        generation = self._generation
        try:
            session = await self.identity.get_current_session()
        except Exception as e:
            logger.warning(f"Initial session check failed, continuing as signed out: {e}")
            session = None
        if self._closed:
            return
        self._queue.put_nowait(SessionChanged(session, from_event=False, generation=generation))

    async def _enforce_timeout(self) -> None:
        await asyncio.sleep(self.timeout)
        if self._closed or self.store.snapshot.status != AuthStatus.LOADING:
            return
        if self._pending_session is not None:
            # A valid session is known, only its profile is late
            logger.warning(f"Profile lookup did not finish within {self.timeout}s, continuing with lowest privilege")
            self._publish(AuthSnapshot(status=AuthStatus.AUTHENTICATED_USER, session=self._pending_session))
            return
        logger.warning(f"Session resolution did not finish within {self.timeout}s, continuing as signed out")
        self._publish(AuthSnapshot(status=AuthStatus.UNAUTHENTICATED))

    # -------- Consumer --------
    async def _consume(self) -> None:
        while True:
            message = await self._queue.get()
            try:
                await self._apply(message)
            finally:
                self._queue.task_done()

    async def _apply(self, message: SessionChanged) -> None:
        if message.generation != self._generation:
            return
        if not message.from_event and self._event_applied:
            logger.debug("Dropping initial session result, a newer auth event was already applied")
            return
        if message.from_event:
            self._event_applied = True

        session = message.session
        if session is None or session.is_expired():
            self._publish(AuthSnapshot(status=AuthStatus.UNAUTHENTICATED))
            return

        self._pending_session = session
        try:
            profile = await self._fetch_profile(session.user_id)
        finally:
            self._pending_session = None
        if self._closed or message.generation != self._generation:
            return

        status = AuthStatus.AUTHENTICATED_ADMIN if profile and profile.role == Role.ADMIN else AuthStatus.AUTHENTICATED_USER
        self._publish(AuthSnapshot(status=status, session=session, profile=profile))

    async def _fetch_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            rows = await asyncio.wait_for(
                self.data.select("profiles", PROFILE_COLUMNS, eq={"id": user_id}, limit=1),
                self.timeout,
            )
        except (PainelError, asyncio.TimeoutError) as e:
            logger.warning(f"Profile lookup for {user_id} failed, granting lowest privilege: {e!r}")
            return None
        if not rows:
            logger.warning(f"No profile found for user {user_id}")
            return None
        return UserProfile.model_validate(rows[0])

    def _publish(self, snapshot: AuthSnapshot) -> None:
        if self._closed:
            return
        self.store.publish(snapshot)
