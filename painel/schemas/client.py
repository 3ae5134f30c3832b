from pydantic import BaseModel, field_validator
from typing import Optional, List, Literal
import json

ClientKind = Literal["PF", "PJ"]
ClientTag = Literal["green", "blue", "red"]


# --- Clients ---
class Client(BaseModel):
    id: int
    nome: str = ""
    documento: str = ""
    tipo: ClientKind = "PF"
    telefone: str = ""
    etiqueta: ClientTag = "blue"
    produtos: List[str] = []

    @field_validator("nome", "documento", "telefone", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or ""

    @field_validator("tipo", mode="before")
    @classmethod
    def normalize_tipo(cls, v):
        return v if v in ("PF", "PJ") else "PF"

    @field_validator("etiqueta", mode="before")
    @classmethod
    def normalize_etiqueta(cls, v):
        return v if v in ("green", "blue", "red") else "blue"

    @field_validator("produtos", mode="before")
    @classmethod
    def normalize_produtos(cls, v):
        # Older rows store the product list as JSON text
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except ValueError:
                return []
            return parsed if isinstance(parsed, list) else []
        return []


class CreateClient(BaseModel):
    nome: str
    tipo: ClientKind
    documento: str
    telefone: Optional[str] = None
    etiqueta: Optional[ClientTag] = None
    produtos: Optional[List[str]] = None


class UpdateClient(BaseModel):
    nome: Optional[str] = None
    tipo: Optional[ClientKind] = None
    documento: Optional[str] = None
    telefone: Optional[str] = None
    etiqueta: Optional[ClientTag] = None
    produtos: Optional[List[str]] = None
