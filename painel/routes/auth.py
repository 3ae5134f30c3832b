from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from painel.dependencies.auth import SESSION_REQUIRED, get_gate
from painel.schemas.auth import LoginRequest
from painel.services.access_gate import AccessGate

router = APIRouter()
views_router = APIRouter()


def describe(snapshot):
    profile = snapshot.profile
    return {
        "status": snapshot.status.value,
        "user_id": snapshot.user_id,
        "email": snapshot.email,
        "nome": profile.nome if profile else None,
        "role": profile.role.value if profile else None,
        "is_admin": snapshot.is_admin,
        "is_funcionario": snapshot.is_funcionario,
    }


# -------- Sign in / sign out --------
@router.post("/login")
async def login(credentials: LoginRequest, gate: AccessGate = Depends(get_gate)):
    session = await gate.sign_in(credentials.email, credentials.password)
    await gate.settled()
    return {**describe(gate.snapshot), "expires_at": session.expires_at}


@router.post("/logout")
async def logout(gate: AccessGate = Depends(get_gate)):
    await gate.sign_out()
    return describe(gate.snapshot)


@router.get("/me")
def get_me(context=Depends(SESSION_REQUIRED)):
    return describe(context["snapshot"])


@router.get("/status")
def get_status(gate: AccessGate = Depends(get_gate)):
    decision = gate.resolve_access()
    return {"status": gate.snapshot.status.value, "decision": decision.value}


# -------- Redirect targets --------
@views_router.get("/login")
def login_view():
    return JSONResponse(status_code=401, content={"view": "login", "detail": "Sign in to continue"})


@views_router.get("/acesso-negado")
def forbidden_view():
    return JSONResponse(
        status_code=403,
        content={"view": "acesso-negado", "detail": "You do not have permission to access this page"},
    )
