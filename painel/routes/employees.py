from fastapi import APIRouter, Depends

from painel.dependencies.auth import ADMIN_REQUIRED, SESSION_REQUIRED
from painel.schemas.employee import CreateEmployee, UpdateEmployee

router = APIRouter()


# -------- Employees --------
# Listing stays open to every signed-in user: the appointment form picks assignees from it
@router.get("")
async def get_all_employees(context=Depends(SESSION_REQUIRED)):
    return await context["data"].select("employees", order="nome")


@router.post("")
async def create_employee(employee: CreateEmployee, context=Depends(ADMIN_REQUIRED)):
    row = employee.model_dump(exclude_none=True)
    created = await context["data"].insert("employees", row)
    await context["audit"].record("employees", created.get("id"), "create", row)
    return created


@router.put("/{employee_id}")
async def update_employee(employee_id: int, employee: UpdateEmployee, context=Depends(ADMIN_REQUIRED)):
    patch = employee.model_dump(exclude_unset=True)
    updated = await context["data"].update("employees", employee_id, patch)
    await context["audit"].record("employees", employee_id, "update", patch)
    return updated


@router.delete("/{employee_id}")
async def delete_employee(employee_id: int, context=Depends(ADMIN_REQUIRED)):
    await context["data"].delete("employees", employee_id)
    await context["audit"].record("employees", employee_id, "delete")
    return {"message": "Deleted"}
