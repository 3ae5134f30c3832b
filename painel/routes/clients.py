from fastapi import APIRouter, Depends
from typing import List

from painel.dependencies.auth import SESSION_REQUIRED
from painel.schemas.client import Client, CreateClient, UpdateClient

router = APIRouter()


# Get all clients
@router.get("", response_model=List[Client])
async def get_all_clients(context=Depends(SESSION_REQUIRED)):
    rows = await context["data"].select("clients", order="id")
    return [Client.model_validate(row) for row in rows]


# Create client
@router.post("")
async def create_client(client: CreateClient, context=Depends(SESSION_REQUIRED)):
    row = client.model_dump(exclude_none=True)
    created = await context["data"].insert("clients", row)
    await context["audit"].record("clients", created.get("id"), "create", row)
    return created


# Edit client
@router.put("/{client_id}")
async def update_client(client_id: int, client: UpdateClient, context=Depends(SESSION_REQUIRED)):
    patch = client.model_dump(exclude_unset=True)
    updated = await context["data"].update("clients", client_id, patch)
    await context["audit"].record("clients", client_id, "update", patch)
    return updated


# Delete client
@router.delete("/{client_id}")
async def delete_client(client_id: int, context=Depends(SESSION_REQUIRED)):
    await context["data"].delete("clients", client_id)
    await context["audit"].record("clients", client_id, "delete")
    return {"message": "Deleted"}
