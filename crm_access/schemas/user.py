import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    nome: str
    email: str
    senha: str
    funcao: str = "vendedor"
    telefone: str | None = None
    # Flat capability list from the form; seeded from the role template when omitted
    permissoes: list[str] | None = None


class UserUpdate(BaseModel):
    nome: str | None = None
    email: str | None = None
    senha: str | None = None
    funcao: str | None = None
    telefone: str | None = None
    ativo: bool | None = None
    permissoes: list[str] | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    nome: str
    email: str
    funcao: str
    telefone: str | None = None
    ativo: bool
    permissoes: dict[str, dict[str, Any]] | list[str]
    ultimo_login: datetime | None = None
    created_at: datetime
    updated_at: datetime


class UserListResponse(BaseModel):
    items: list[UserResponse]
    total: int


class UserPermissionsForm(BaseModel):
    user_id: uuid.UUID
    funcao: str
    permissoes: list[str]


class LoginRequest(BaseModel):
    email: str
    senha: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
