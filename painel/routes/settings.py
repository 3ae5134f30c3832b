from fastapi import APIRouter, Depends
from datetime import datetime, timezone

from painel.dependencies.auth import ADMIN_REQUIRED
from painel.schemas.catalog import SettingUpdate

router = APIRouter()


@router.get("")
async def get_settings(context=Depends(ADMIN_REQUIRED)):
    rows = await context["data"].select("settings")
    return {row["chave"]: row.get("valor") or "" for row in rows}


@router.put("")
async def update_setting(setting: SettingUpdate, context=Depends(ADMIN_REQUIRED)):
    row = {
        "chave": setting.chave,
        "valor": setting.valor,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }
    saved = await context["data"].upsert("settings", row, on_conflict="chave")
    await context["audit"].record("settings", setting.chave, "update", {"valor": setting.valor})
    return saved
