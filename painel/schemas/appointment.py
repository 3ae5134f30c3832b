from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, time


# --- Appointments (agendamentos) ---
class CreateAppointment(BaseModel):
    cliente_nome: str = Field(..., min_length=1)
    funcionario_nome: str = Field(..., min_length=1)
    funcionario_id: Optional[int] = Field(None, exclude=True)
    data: date
    hora: time
    tipo: str = Field(..., min_length=1)
    urgencia: Optional[str] = None
    endereco: Optional[str] = None
    modalidade: Optional[str] = None
    valor: Optional[float] = 0


class UpdateAppointment(BaseModel):
    cliente_nome: Optional[str] = None
    funcionario_nome: Optional[str] = None
    funcionario_id: Optional[int] = Field(None, exclude=True)
    data: Optional[date] = None
    hora: Optional[time] = None
    tipo: Optional[str] = None
    urgencia: Optional[str] = None
    endereco: Optional[str] = None
    modalidade: Optional[str] = None
    valor: Optional[float] = None
