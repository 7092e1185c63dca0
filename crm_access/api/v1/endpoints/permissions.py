import logging

from fastapi import APIRouter, HTTPException

from crm_access.core.config import settings
from crm_access.core.grants import normalize_role
from crm_access.core.permissions import CATALOG, CATEGORY_LABELS, permissions_by_category
from crm_access.schemas.permission import (
    CatalogResponse,
    CheckAnyRequest,
    CheckRequest,
    CheckResponse,
    FlatPermissions,
    FlattenRequest,
    GuardRequest,
    GuardResponse,
    RoleTemplateListResponse,
    RoleTemplateResponse,
    StructuredPermissions,
)
from crm_access.services.access_gate import (
    HOME,
    AccessDenied,
    AccessGate,
    Allow,
    Redirect,
    RenderFallback,
)
from crm_access.services.permission_codec import encode_grant, flatten, unflatten
from crm_access.services.permission_evaluator import can, can_any
from crm_access.services.permission_templates import (
    ROLE_TEMPLATES,
    available_roles,
    defaults_for,
)

logger = logging.getLogger(__name__)
router = APIRouter()

gate = AccessGate(home_path=settings.HOME_PATH)


@router.get(
    "/permissions/catalog",
    response_model=CatalogResponse,
    summary="List every capability grouped by category",
)
def get_catalog() -> dict:
    categories = [
        {
            "category": category,
            "label": CATEGORY_LABELS.get(category, category),
            "permissions": [
                {
                    "capability": p.capability,
                    "name": p.name,
                    "description": p.description,
                    "category": p.category,
                }
                for p in items
            ],
        }
        for category, items in permissions_by_category().items()
    ]
    return {"categories": categories, "total": len(CATALOG)}


@router.get(
    "/permissions/templates",
    response_model=RoleTemplateListResponse,
    summary="Default permissions for every role",
)
def list_templates() -> dict:
    return {
        "items": [
            {"role": role, "permissions": sorted(defaults_for(role))}
            for role in available_roles()
        ]
    }


@router.get(
    "/permissions/templates/{role}",
    response_model=RoleTemplateResponse,
    summary="Default permissions for a role",
)
def get_template(role: str) -> dict:
    normalized = normalize_role(role)
    if normalized not in ROLE_TEMPLATES:
        raise HTTPException(status_code=404, detail=f"No permission template for role '{role}'")
    return {"role": normalized, "permissions": sorted(defaults_for(normalized))}


@router.post(
    "/permissions/flatten",
    response_model=FlatPermissions,
    summary="Convert a grant to the flat capability list",
)
def flatten_permissions(body: FlattenRequest) -> dict:
    return {"permissions": sorted(flatten(body.permissions))}


@router.post(
    "/permissions/unflatten",
    response_model=StructuredPermissions,
    summary="Convert a flat capability list to the structured grant",
)
def unflatten_permissions(body: FlatPermissions) -> dict:
    return {"permissions": encode_grant(unflatten(body.permissions))}


@router.post(
    "/permissions/check",
    response_model=CheckResponse,
    summary="Evaluate a (resource, action, owner) request for a principal",
)
def check_permission(body: CheckRequest) -> dict:
    principal = body.principal.to_principal() if body.principal else None
    allowed = can(principal, body.resource, body.action, body.owner_id)
    logger.debug("check %s.%s owner=%s -> %s", body.resource, body.action, body.owner_id, allowed)
    return {"allowed": allowed}


@router.post(
    "/permissions/check-any",
    response_model=CheckResponse,
    summary="Whether a principal holds any permission on a resource",
)
def check_any_permission(body: CheckAnyRequest) -> dict:
    principal = body.principal.to_principal() if body.principal else None
    return {"allowed": can_any(principal, body.resource)}


@router.post(
    "/permissions/guard",
    response_model=GuardResponse,
    summary="Resolve a route guard for a principal",
)
def guard_route(body: GuardRequest) -> dict:
    principal = body.principal.to_principal() if body.principal else None
    redirect_to = HOME if body.redirect_home else body.redirect_to
    outcome = gate.guard(
        principal,
        body.resource,
        body.action,
        owner_id=body.owner_id,
        fallback=body.fallback,
        redirect_to=redirect_to,
    )

    if isinstance(outcome, Allow):
        return {"outcome": "allow"}
    if isinstance(outcome, RenderFallback):
        return {"outcome": "fallback", "node": outcome.node}
    if isinstance(outcome, Redirect):
        return {"outcome": "redirect", "target": outcome.target}
    if isinstance(outcome, AccessDenied):
        return {"outcome": "access_denied", "home_path": outcome.home_path}
    raise HTTPException(status_code=500, detail="Unknown guard outcome")
