from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Callable, List, Optional
import logging

from painel.schemas.auth import Role, Session, UserProfile

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    LOADING = "loading"
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED_USER = "authenticated_user"
    AUTHENTICATED_ADMIN = "authenticated_admin"


class AuthSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: AuthStatus = AuthStatus.LOADING
    session: Optional[Session] = None
    profile: Optional[UserProfile] = None

    @property
    def role(self) -> Role:
        return self.profile.role if self.profile else Role.USER

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == Role.ADMIN

    @property
    def is_funcionario(self) -> bool:
        return self.profile is not None and self.profile.role in (Role.FUNCIONARIO, Role.ADMIN)

    @property
    def user_id(self) -> Optional[str]:
        return self.session.user_id if self.session else None

    @property
    def email(self) -> Optional[str]:
        if self.profile and self.profile.email:
            return self.profile.email
        return self.session.email if self.session else None


Listener = Callable[[AuthSnapshot], None]


class AuthStore:
    """Holds the process-wide session/profile pair.

    Readers get immutable snapshots, either by reading ``snapshot`` or by
    subscribing. Only the access gate publishes.
    """

    def __init__(self):
        self._snapshot = AuthSnapshot()
        self._listeners: List[Listener] = []

    @property
    def snapshot(self) -> AuthSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, snapshot: AuthSnapshot) -> None:
        previous = self._snapshot
        self._snapshot = snapshot
        if previous.status != snapshot.status:
            logger.info(f"Auth state {previous.status.value} -> {snapshot.status.value}")
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Auth state listener failed")
