from supabase import (
    AsyncClient,
    AuthError,
    AuthRetryableError,
    FunctionsError,
    PostgrestAPIError,
    acreate_client,
)
from typing import Any, Dict, List, Optional, Sequence, Union
import httpx
import logging
import re
import time

from painel.config import validate_supabase_config
from painel.exceptions import (
    InvalidCredentials,
    NotFound,
    PainelError,
    PermissionDenied,
    ProviderUnavailable,
    RateLimited,
    ValidationFailed,
)
from painel.schemas.auth import Session

logger = logging.getLogger(__name__)

RATE_LIMIT_PATTERN = re.compile(r"(\d+)\s+seconds")
PERMISSION_CODES = {"42501", "PGRST301", "PGRST302"}


async def create_supabase_client(url=None, key=None) -> AsyncClient:
    url, key = validate_supabase_config(url, key)
    start_time = time.time()
    logger.info("Creating Supabase client")
    client = await acreate_client(url, key)
    logger.info(f"Supabase client ready in {time.time() - start_time:.2f} seconds")
    return client


def translate_provider_error(exc: Exception) -> PainelError:
    """Map supabase-py, postgrest and httpx failures onto the dashboard's error taxonomy."""
    if isinstance(exc, PainelError):
        return exc

    message = getattr(exc, "message", None) or str(exc)
    status = getattr(exc, "status", None)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
    elif isinstance(exc.__cause__, httpx.HTTPStatusError):
        # Edge function errors keep the real HTTP status on the chained cause
        status = exc.__cause__.response.status_code
    code = str(getattr(exc, "code", "") or "")
    lowered = message.lower()

    if isinstance(exc, (AuthRetryableError, httpx.TransportError)) or "timed out" in lowered:
        return ProviderUnavailable(f"Connection to Supabase failed: {message}")
    if "for security purposes" in lowered or status == 429 or code == "over_request_rate_limit":
        match = RATE_LIMIT_PATTERN.search(message)
        return RateLimited(message, retry_after=int(match.group(1)) if match else None)
    if "already registered" in lowered or "already been registered" in lowered:
        return ValidationFailed("This email is already registered.")
    if code == "invalid_credentials" or "invalid login credentials" in lowered:
        return InvalidCredentials("Invalid email or password")
    if code == "PGRST116":
        return NotFound(message)
    if code in PERMISSION_CODES or status in (401, 403):
        return PermissionDenied(message)
    if code.startswith(("22", "23")) or status in (400, 422):
        return ValidationFailed(message)
    return ProviderUnavailable(message)


def to_session(raw) -> Optional[Session]:
    if raw is None or getattr(raw, "user", None) is None:
        return None
    return Session(
        access_token=raw.access_token,
        user_id=str(raw.user.id),
        email=raw.user.email,
        expires_at=raw.expires_at,
    )


class SupabaseIdentityProvider:
    def __init__(self, client: AsyncClient):
        self.client = client

    async def get_current_session(self) -> Optional[Session]:
        try:
            raw = await self.client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            raise translate_provider_error(e) from e
        return to_session(raw)

    def subscribe(self, on_change):
        def listener(event, raw_session):
            logger.info(f"Auth state change: {event}")
            on_change(to_session(raw_session))

        subscription = self.client.auth.on_auth_state_change(listener)
        return subscription.unsubscribe

    async def sign_in_with_password(self, identifier: str, secret: str) -> Session:
        try:
            response = await self.client.auth.sign_in_with_password(
                {"email": identifier, "password": secret}
            )
        except (AuthError, httpx.HTTPError) as e:
            raise translate_provider_error(e) from e

        session = to_session(response.session)
        if session is None:
            raise InvalidCredentials("Invalid email or password")
        return session

    async def sign_out(self) -> None:
        try:
            await self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            raise translate_provider_error(e) from e


class SupabaseDataProvider:
    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, query, table: str):
        try:
            return await query.execute()
        except (PostgrestAPIError, httpx.HTTPError) as e:
            logger.error(f"Supabase request on '{table}' failed: {e}")
            raise translate_provider_error(e) from e

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        eq: Optional[Dict[str, Any]] = None,
        gte: Optional[Dict[str, Any]] = None,
        lte: Optional[Dict[str, Any]] = None,
        in_: Optional[Dict[str, Sequence[Any]]] = None,
        order: Union[str, Sequence[str], None] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        query = self.client.table(table).select(columns)
        for column, value in (eq or {}).items():
            query = query.eq(column, value)
        for column, value in (gte or {}).items():
            query = query.gte(column, value)
        for column, value in (lte or {}).items():
            query = query.lte(column, value)
        for column, values in (in_ or {}).items():
            query = query.in_(column, list(values))
        if isinstance(order, str):
            order = [order]
        for column in order or []:
            query = query.order(column, desc=desc)
        if limit is not None:
            query = query.limit(limit)

        response = await self._execute(query, table)
        return response.data or []

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._execute(self.client.table(table).insert(row), table)
        return response.data[0] if response.data else row

    async def update(self, table: str, id: Any, patch: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._execute(self.client.table(table).update(patch).eq("id", id), table)
        if not response.data:
            # Missing rows and rows hidden by RLS look the same from here
            raise NotFound(f"{table} record {id} not found")
        return response.data[0]

    async def delete(self, table: str, id: Any) -> None:
        response = await self._execute(self.client.table(table).delete().eq("id", id), table)
        if not response.data:
            raise NotFound(f"{table} record {id} not found")

    async def upsert(self, table: str, row: Dict[str, Any], on_conflict: Optional[str] = None) -> Dict[str, Any]:
        query = self.client.table(table).upsert(row, on_conflict=on_conflict or "")
        response = await self._execute(query, table)
        return response.data[0] if response.data else row


class SupabaseUserFunctions:
    """Calls the create-user / delete-user edge functions with the caller's token."""

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _invoke(self, name: str, access_token: str, body: Dict[str, Any]):
        try:
            data = await self.client.functions.invoke(
                name,
                invoke_options={
                    "body": body,
                    "headers": {"Authorization": f"Bearer {access_token}"},
                    "responseType": "json",
                },
            )
        except (FunctionsError, httpx.HTTPError) as e:
            logger.error(f"Edge function '{name}' failed: {e}")
            raise translate_provider_error(e) from e

        if isinstance(data, dict) and data.get("error"):
            raise translate_provider_error(RuntimeError(data["error"]))
        return data

    async def create_user(self, access_token, email, password, nome, role):
        data = await self._invoke(
            "create-user",
            access_token,
            {"email": email, "password": password, "nome": nome, "role": role},
        )
        user = data.get("user") if isinstance(data, dict) else None
        if not user:
            raise ProviderUnavailable("User was not created correctly")
        return {"id": user["id"], "email": user.get("email", email)}

    async def delete_user(self, access_token, user_id):
        await self._invoke("delete-user", access_token, {"userId": user_id})
