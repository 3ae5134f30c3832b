from enum import Enum
from pydantic import BaseModel, model_validator
from typing import Optional
from datetime import date, time, datetime


class BlockKind(str, Enum):
    GERAL = "geral"
    FUNCIONARIO = "funcionario"


# --- Schedule blocks (blackout intervals) ---
class ScheduleBlock(BaseModel):
    id: int
    descricao: str
    data_inicio: date
    data_fim: date
    hora_inicio: Optional[time] = None
    hora_fim: Optional[time] = None
    tipo: BlockKind = BlockKind.GERAL
    funcionario_id: Optional[int] = None
    created_at: Optional[datetime] = None


class CreateScheduleBlock(BaseModel):
    descricao: str
    data_inicio: date
    data_fim: date
    hora_inicio: Optional[time] = None
    hora_fim: Optional[time] = None
    tipo: BlockKind = BlockKind.GERAL
    funcionario_id: Optional[int] = None

    @model_validator(mode="after")
    def check_kind_and_range(self):
        if self.tipo == BlockKind.FUNCIONARIO and self.funcionario_id is None:
            raise ValueError("funcionario_id is required for employee blocks")
        if self.tipo == BlockKind.GERAL and self.funcionario_id is not None:
            raise ValueError("general blocks cannot reference an employee")
        start = (self.data_inicio, self.hora_inicio or time(0, 0))
        end = (self.data_fim, self.hora_fim or time(23, 59))
        if start > end:
            raise ValueError("block must not end before it starts")
        return self


class ConflictCheck(BaseModel):
    data: date
    hora: time
    funcionario_nome: Optional[str] = None
    funcionario_id: Optional[int] = None


class ConflictResult(BaseModel):
    blocked: bool
    reason: str = ""
