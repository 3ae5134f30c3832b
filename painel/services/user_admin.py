import logging

from painel.exceptions import PermissionDenied, RateLimited
from painel.schemas.auth import NewUser, Role
from painel.services.auth_store import AuthStore
from painel.services.providers import DataProvider, UserFunctions

logger = logging.getLogger(__name__)


class UserAdminService:
    """Admin-side management of dashboard users and their roles."""

    def __init__(self, data: DataProvider, functions: UserFunctions, store: AuthStore):
        self.data = data
        self.functions = functions
        self.store = store

    def _access_token(self) -> str:
        session = self.store.snapshot.session
        if session is None:
            raise PermissionDenied("You need to be signed in")
        return session.access_token

    async def list_profiles(self):
        return await self.data.select("profiles", "id, email, role, nome", order="email")

    async def update_role(self, user_id: str, role: Role):
        return await self.data.update("profiles", user_id, {"role": role.value})

    async def create_user(self, new_user: NewUser):
        token = self._access_token()
        nome = (new_user.nome or "").strip() or None
        try:
            user = await self.functions.create_user(token, new_user.email, new_user.password, nome, new_user.role.value)
        except RateLimited as e:
            wait = e.retry_after if e.retry_after is not None else "a few"
            raise RateLimited(f"Wait {wait} seconds before creating another user.", retry_after=e.retry_after) from e
        logger.info(f"Created user {user['id']} with role {new_user.role.value}")
        return user

    async def delete_user(self, user_id: str) -> None:
        if user_id == self.store.snapshot.user_id:
            raise PermissionDenied("You cannot delete your own account")
        await self.functions.delete_user(self._access_token(), user_id)
        logger.info(f"Deleted user {user_id}")
