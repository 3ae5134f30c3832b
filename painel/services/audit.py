from typing import Any, Optional
import logging

from painel.exceptions import PainelError
from painel.services.auth_store import AuthStore
from painel.services.providers import DataProvider

logger = logging.getLogger(__name__)

AUDIT_ACTIONS = ("create", "update", "delete")


class AuditLogger:
    def __init__(self, data: DataProvider, store: AuthStore):
        self.data = data
        self.store = store

    async def record(self, table_name: str, record_id, action: str, changes: Optional[Any] = None) -> None:
        """Append an audit row for a confirmed mutation.

        The mutation already happened, so a failed audit write is logged and
        dropped instead of being reported back to the caller.
        """
        if action not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown audit action: {action}")

        email = self.store.snapshot.email
        if not email:
            logger.warning("No authenticated user, skipping audit log")
            return

        try:
            await self.data.insert("audit_logs", {
                "table_name": table_name,
                "record_id": str(record_id),
                "action": action,
                "changed_by": email,
                "changes": changes or None,
            })
        except PainelError as e:
            logger.error(f"Failed to write audit log for {table_name}/{record_id}: {e}")

    async def recent(self, limit: int = 100):
        return await self.data.select("audit_logs", order="created_at", desc=True, limit=limit)
