from fastapi import APIRouter, Depends

from painel.dependencies.auth import ADMIN_REQUIRED
from painel.schemas.schedule_block import CreateScheduleBlock

router = APIRouter()


# -------- Schedule blocks (admin settings) --------
@router.get("")
async def get_schedule_blocks(context=Depends(ADMIN_REQUIRED)):
    return await context["data"].select("schedule_blocks", order="data_inicio")


@router.post("")
async def create_schedule_block(block: CreateScheduleBlock, context=Depends(ADMIN_REQUIRED)):
    row = block.model_dump(mode="json")
    created = await context["data"].insert("schedule_blocks", row)
    await context["audit"].record("schedule_blocks", created.get("id"), "create", row)
    return created


@router.delete("/{block_id}")
async def delete_schedule_block(block_id: int, context=Depends(ADMIN_REQUIRED)):
    await context["data"].delete("schedule_blocks", block_id)
    await context["audit"].record("schedule_blocks", block_id, "delete")
    return {"message": "Deleted"}
