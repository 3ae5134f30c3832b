from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
import time


class Role(str, Enum):
    ADMIN = "admin"
    FUNCIONARIO = "funcionario"
    USER = "user"


# --- Session (issued by Supabase Auth, held in-process only) ---
class Session(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    user_id: str
    email: Optional[str] = None
    expires_at: Optional[int] = None  # epoch seconds

    def is_expired(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        now = time.time() if now is None else now
        return now >= self.expires_at


# --- Profiles (auth.users.id -> profiles.id) ---
class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    nome: Optional[str] = None
    role: Role = Role.USER

    @field_validator("role", mode="before")
    @classmethod
    def unknown_role_is_user(cls, v):
        # Missing or unrecognised roles never grant more than the lowest privilege
        try:
            return Role(v)
        except ValueError:
            return Role.USER


class LoginRequest(BaseModel):
    email: str
    password: str


class RoleUpdate(BaseModel):
    role: Role


class NewUser(BaseModel):
    email: str
    password: str
    nome: Optional[str] = None
    role: Role = Role.USER
