"""Contracts for the remote collaborators the dashboard talks to.

The identity provider issues sessions, the data provider serves the
RLS-gated tables and the user functions wrap the privileged edge functions.
Supabase adapters live in ``painel.services.supabase``; tests use in-memory
fakes of the same shape.
"""
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Union

from painel.schemas.auth import Session

Row = Dict[str, Any]
SessionListener = Callable[[Optional[Session]], None]
Unsubscribe = Callable[[], None]


class IdentityProvider(Protocol):
    async def get_current_session(self) -> Optional[Session]: ...

    def subscribe(self, on_change: SessionListener) -> Unsubscribe: ...

    async def sign_in_with_password(self, identifier: str, secret: str) -> Session: ...

    async def sign_out(self) -> None: ...


class DataProvider(Protocol):
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
    ) -> List[Row]: ...

    async def insert(self, table: str, row: Row) -> Row: ...

    async def update(self, table: str, id: Any, patch: Row) -> Row: ...

    async def delete(self, table: str, id: Any) -> None: ...

    async def upsert(self, table: str, row: Row, on_conflict: Optional[str] = None) -> Row: ...


class UserFunctions(Protocol):
    async def create_user(
        self, access_token: str, email: str, password: str, nome: Optional[str], role: str
    ) -> Row: ...

    async def delete_user(self, access_token: str, user_id: str) -> None: ...
