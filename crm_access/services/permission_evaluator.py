"""
Decides whether a principal may perform an action on a resource.

Precedence, first match wins:
    1. no principal / no grant   -> denied
    2. admin role                -> allowed
    3. legacy grant              -> "all" or exact "resource.action" membership
    4. structured grant          -> grant level, with the ownership qualifier

These checks drive UI affordances only. The server enforces the real boundary,
which is why an owned-only grant with no owner to compare against is allowed:
it is a list view and the listing endpoint filters by owner.
"""
import logging
from collections.abc import Callable
from typing import Any

from crm_access.core.grants import (
    ADMIN_ROLE,
    GrantLevel,
    LegacyGrant,
    Principal,
    StructuredGrant,
    normalize_role,
)

logger = logging.getLogger(__name__)

TeamResolver = Callable[[Principal, Any], bool]


def is_admin(principal: Principal | None) -> bool:
    return principal is not None and normalize_role(principal.role) == ADMIN_ROLE


def _same_identifier(a: Any, b: Any) -> bool:
    """Blank identifiers never match, not even each other."""
    left = "" if a is None else str(a).strip()
    right = "" if b is None else str(b).strip()
    return bool(left) and left == right


def can(
    principal: Principal | None,
    resource: str,
    action: str,
    owner_id: Any = None,
    *,
    team_resolver: TeamResolver | None = None,
) -> bool:
    if principal is None or principal.grant is None:
        return False

    if is_admin(principal):
        return True

    grant = principal.grant

    if isinstance(grant, LegacyGrant):
        if grant.is_unrestricted:
            return True
        return f"{resource}.{action}" in grant.capabilities

    if isinstance(grant, StructuredGrant):
        level = grant.level(resource, action)

        if level is GrantLevel.ALLOWED:
            return True
        if level is GrantLevel.OWNED_ONLY:
            if owner_id is None:
                return True
            return _same_identifier(owner_id, principal.id)
        if level is GrantLevel.TEAM_ONLY:
            # No team membership model on this side; allowed unless the
            # caller brings its own resolver.
            if team_resolver is not None and owner_id is not None:
                return bool(team_resolver(principal, owner_id))
            return True
        return False

    logger.debug("Unknown grant type %s for principal %s", type(grant).__name__, principal.id)
    return False


def can_any(principal: Principal | None, resource: str) -> bool:
    """True when the principal holds any grant on `resource` (used to show whole sections)."""
    if principal is None or principal.grant is None:
        return False

    if is_admin(principal):
        return True

    grant = principal.grant

    if isinstance(grant, LegacyGrant):
        if grant.is_unrestricted:
            return True
        prefix = f"{resource}."
        return any(cap.startswith(prefix) for cap in grant.capabilities)

    if isinstance(grant, StructuredGrant):
        return any(level.grants_something for level in grant.actions(resource).values())

    return False
