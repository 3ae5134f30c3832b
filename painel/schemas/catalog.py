from pydantic import BaseModel
from typing import Optional


# --- Products ---
class CreateProduct(BaseModel):
    nome: str


class UpdateProduct(BaseModel):
    ativo: Optional[bool] = None


# --- Service types ---
class CreateServiceType(BaseModel):
    nome: str
    valor_padrao: Optional[float] = None


# --- Settings (chave -> valor) ---
class SettingUpdate(BaseModel):
    chave: str
    valor: str
