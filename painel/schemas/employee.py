from pydantic import BaseModel
from typing import Optional, List


# --- Employees (funcionarios) ---
class CreateEmployee(BaseModel):
    nome: str
    cpf: str
    funcao: Optional[str] = None
    status: Optional[str] = None
    servicos: Optional[List[str]] = None


class UpdateEmployee(BaseModel):
    nome: Optional[str] = None
    cpf: Optional[str] = None
    funcao: Optional[str] = None
    status: Optional[str] = None
    servicos: Optional[List[str]] = None
