from fastapi import APIRouter, Depends

from painel.dependencies.auth import ADMIN_REQUIRED, SESSION_REQUIRED
from painel.schemas.catalog import CreateProduct, CreateServiceType, UpdateProduct

router = APIRouter()


# -------- Products --------
@router.get("/products")
async def get_products(context=Depends(SESSION_REQUIRED)):
    return await context["data"].select("products", order="nome")


@router.post("/products")
async def create_product(product: CreateProduct, context=Depends(ADMIN_REQUIRED)):
    row = product.model_dump()
    created = await context["data"].insert("products", row)
    await context["audit"].record("products", created.get("id"), "create", row)
    return created


@router.put("/products/{product_id}")
async def update_product(product_id: int, product: UpdateProduct, context=Depends(ADMIN_REQUIRED)):
    patch = product.model_dump(exclude_unset=True)
    updated = await context["data"].update("products", product_id, patch)
    await context["audit"].record("products", product_id, "update", patch)
    return updated


@router.delete("/products/{product_id}")
async def delete_product(product_id: int, context=Depends(ADMIN_REQUIRED)):
    await context["data"].delete("products", product_id)
    await context["audit"].record("products", product_id, "delete")
    return {"message": "Deleted"}


# -------- Service types --------
@router.get("/service-types")
async def get_service_types(context=Depends(SESSION_REQUIRED)):
    return await context["data"].select("service_types", order="nome")


@router.post("/service-types")
async def create_service_type(service_type: CreateServiceType, context=Depends(ADMIN_REQUIRED)):
    row = service_type.model_dump(exclude_none=True)
    created = await context["data"].insert("service_types", row)
    await context["audit"].record("service_types", created.get("id"), "create", row)
    return created


@router.delete("/service-types/{service_type_id}")
async def delete_service_type(service_type_id: int, context=Depends(ADMIN_REQUIRED)):
    await context["data"].delete("service_types", service_type_id)
    await context["audit"].record("service_types", service_type_id, "delete")
    return {"message": "Deleted"}
