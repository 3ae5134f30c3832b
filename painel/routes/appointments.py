from fastapi import APIRouter, Depends, HTTPException
from datetime import date

from painel.dependencies.auth import SESSION_REQUIRED, get_conflict_checker
from painel.schemas.appointment import CreateAppointment, UpdateAppointment
from painel.schemas.schedule_block import ConflictCheck
from painel.services.reports import month_range

router = APIRouter()


def reject_if_blocked(conflict):
    if conflict.blocked:
        raise HTTPException(status_code=409, detail={"title": "Time slot unavailable", "reason": conflict.reason})


# -------- Listings --------
@router.get("")
async def get_all_appointments(context=Depends(SESSION_REQUIRED)):
    return await context["data"].select("appointments", order=["data", "hora"])


@router.get("/today")
async def get_today_appointments(context=Depends(SESSION_REQUIRED)):
    today = date.today().isoformat()
    return await context["data"].select("appointments", eq={"data": today}, order="hora")


@router.get("/month/{year}/{month}")
async def get_appointments_by_month(year: int, month: int, context=Depends(SESSION_REQUIRED)):
    if not 1 <= month <= 12:
        raise HTTPException(status_code=422, detail="Month must be between 1 and 12")
    start, end = month_range(date(year, month, 1))
    return await context["data"].select(
        "appointments",
        gte={"data": start.isoformat()},
        lte={"data": end.isoformat()},
        order=["data", "hora"],
    )


# -------- Schedule check --------
@router.post("/check-conflict")
async def check_conflict(payload: ConflictCheck, checker=Depends(get_conflict_checker), context=Depends(SESSION_REQUIRED)):
    return await checker.check_conflict(payload.data, payload.hora, payload.funcionario_nome, payload.funcionario_id)


# -------- Create / edit / delete --------
@router.post("")
async def create_appointment(
    appointment: CreateAppointment,
    checker=Depends(get_conflict_checker),
    context=Depends(SESSION_REQUIRED),
):
    conflict = await checker.check_conflict(
        appointment.data, appointment.hora, appointment.funcionario_nome, appointment.funcionario_id
    )
    reject_if_blocked(conflict)

    row = appointment.model_dump(mode="json")
    created = await context["data"].insert("appointments", row)
    await context["audit"].record("appointments", created.get("id"), "create", row)
    return created


@router.put("/{appointment_id}")
async def update_appointment(
    appointment_id: int,
    appointment: UpdateAppointment,
    checker=Depends(get_conflict_checker),
    context=Depends(SESSION_REQUIRED),
):
    data = context["data"]
    existing = await data.select("appointments", eq={"id": appointment_id}, limit=1)
    if not existing:
        raise HTTPException(status_code=404, detail="Appointment not found")

    patch = appointment.model_dump(mode="json", exclude_unset=True)
    merged = {**existing[0], **patch}
    conflict = await checker.check_conflict(
        merged.get("data"), merged.get("hora"), merged.get("funcionario_nome"), appointment.funcionario_id
    )
    reject_if_blocked(conflict)

    updated = await data.update("appointments", appointment_id, patch)
    await context["audit"].record("appointments", appointment_id, "update", patch)
    return updated


@router.delete("/{appointment_id}")
async def delete_appointment(appointment_id: int, context=Depends(SESSION_REQUIRED)):
    await context["data"].delete("appointments", appointment_id)
    await context["audit"].record("appointments", appointment_id, "delete")
    return {"message": "Deleted"}
