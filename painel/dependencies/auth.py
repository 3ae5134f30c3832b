from fastapi import Depends, HTTPException, Request
from typing import Optional
import logging

from painel.schemas.auth import Role
from painel.services.access_gate import AccessGate, Decision
from painel.services.audit import AuditLogger
from painel.services.schedule_conflict import ScheduleConflictChecker
from painel.services.user_admin import UserAdminService

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
FORBIDDEN_PATH = "/acesso-negado"


def get_gate(request: Request) -> AccessGate:
    return request.app.state.gate


def get_data_provider(request: Request):
    return request.app.state.data


def get_user_functions(request: Request):
    return request.app.state.user_functions


def get_conflict_checker(data=Depends(get_data_provider)) -> ScheduleConflictChecker:
    return ScheduleConflictChecker(data)


def require_access(required_role: Optional[Role] = None):
    """Route dependency turning the gate's decision into an HTTP outcome.

    Allowed requests get a context dict with the data provider, the auth
    snapshot and an audit logger bound to the signed-in user.
    """

    async def access_context(gate: AccessGate = Depends(get_gate), data=Depends(get_data_provider)):
        decision = gate.resolve_access(required_role)

        if decision == Decision.SHOW_LOADING_INDICATOR:
            raise HTTPException(
                status_code=503,
                detail="Session is still being resolved. Please try again.",
                headers={"Retry-After": "1"},
            )
        if decision == Decision.REDIRECT_TO_LOGIN:
            raise HTTPException(status_code=303, detail="Login required", headers={"Location": LOGIN_PATH})
        if decision == Decision.REDIRECT_TO_FORBIDDEN:
            logger.info(f"User {gate.snapshot.user_id} denied access to an admin-only view")
            raise HTTPException(status_code=303, detail="Access denied", headers={"Location": FORBIDDEN_PATH})

        snapshot = gate.snapshot
        return {
            "data": data,
            "snapshot": snapshot,
            "user_id": snapshot.user_id,
            "profile": snapshot.profile,
            "audit": AuditLogger(data, gate.store),
        }

    return access_context


SESSION_REQUIRED = require_access()
ADMIN_REQUIRED = require_access(Role.ADMIN)


def get_user_admin(
    context=Depends(ADMIN_REQUIRED),
    gate: AccessGate = Depends(get_gate),
    functions=Depends(get_user_functions),
) -> UserAdminService:
    return UserAdminService(context["data"], functions, gate.store)
