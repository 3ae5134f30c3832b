from fastapi import APIRouter, Depends

from painel.dependencies.auth import ADMIN_REQUIRED, get_user_admin
from painel.schemas.auth import NewUser, RoleUpdate

router = APIRouter()


# -------- Users and roles (admin) --------
@router.get("")
async def get_users(admin=Depends(get_user_admin)):
    return await admin.list_profiles()


@router.post("")
async def create_user(new_user: NewUser, admin=Depends(get_user_admin), context=Depends(ADMIN_REQUIRED)):
    user = await admin.create_user(new_user)
    await context["audit"].record("profiles", user["id"], "create", {"email": user["email"], "role": new_user.role.value})
    return user


@router.put("/{user_id}/role")
async def update_user_role(user_id: str, update: RoleUpdate, admin=Depends(get_user_admin), context=Depends(ADMIN_REQUIRED)):
    updated = await admin.update_role(user_id, update.role)
    await context["audit"].record("profiles", user_id, "update", {"role": update.role.value})
    return updated


@router.delete("/{user_id}")
async def delete_user(user_id: str, admin=Depends(get_user_admin), context=Depends(ADMIN_REQUIRED)):
    await admin.delete_user(user_id)
    await context["audit"].record("profiles", user_id, "delete")
    return {"message": "User deleted"}
