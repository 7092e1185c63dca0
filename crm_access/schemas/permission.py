from typing import Any

from pydantic import BaseModel, Field

from crm_access.core.grants import Principal


class PrincipalPayload(BaseModel):
    """Principal as delivered by the authentication response."""

    id: str | int | None = None
    role: str | None = None
    # Legacy list or structured mapping; the shape is inferred, never validated
    permissions: Any = None

    def to_principal(self) -> Principal:
        return Principal.from_payload(
            {"id": self.id, "role": self.role, "permissions": self.permissions}
        )


class CheckRequest(BaseModel):
    principal: PrincipalPayload | None = None
    resource: str
    action: str
    owner_id: str | int | None = None


class CheckAnyRequest(BaseModel):
    principal: PrincipalPayload | None = None
    resource: str


class CheckResponse(BaseModel):
    allowed: bool


class GuardRequest(BaseModel):
    principal: PrincipalPayload | None = None
    resource: str
    action: str = "view"
    owner_id: str | int | None = None
    fallback: Any = None
    redirect_to: str | None = None
    redirect_home: bool = False


class GuardResponse(BaseModel):
    outcome: str  # allow | redirect | fallback | access_denied
    target: str | None = None
    node: Any = None
    home_path: str | None = None


class FlattenRequest(BaseModel):
    permissions: Any = None


class FlatPermissions(BaseModel):
    permissions: list[str]


class StructuredPermissions(BaseModel):
    permissions: dict[str, dict[str, Any]]


class PermissionInfoResponse(BaseModel):
    capability: str
    name: str
    description: str
    category: str


class CatalogCategory(BaseModel):
    category: str
    label: str
    permissions: list[PermissionInfoResponse]


class CatalogResponse(BaseModel):
    categories: list[CatalogCategory]
    total: int


class RoleTemplateResponse(BaseModel):
    role: str
    permissions: list[str] = Field(default_factory=list)


class RoleTemplateListResponse(BaseModel):
    items: list[RoleTemplateResponse]
