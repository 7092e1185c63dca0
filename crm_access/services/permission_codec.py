"""
Conversion between the flat capability list used by the user editing form and
the nested per-resource grant used for storage and tokens.

    flatten   {"leads": {"view": "own", "edit": True}}  ->  {"leads.view", "leads.edit"}
    unflatten {"leads.view", "leads.edit"}              ->  {"leads": {"view": True, "edit": True}}

The round trip is lossy: owned-only and team-only levels come back as plain
allowed (owned-only) or disappear (team-only). Both functions are total over
their input and skip entries that are not a lower-case snake_case
"resource.action" pair.
"""
from collections.abc import Iterable, Mapping
from typing import Any

from crm_access.core.grants import (
    GrantLevel,
    LegacyGrant,
    PermissionGrant,
    StructuredGrant,
    parse_grant,
)
from crm_access.core.permissions import CAPABILITY_PATTERN

_FLATTENED_LEVELS = (GrantLevel.ALLOWED, GrantLevel.OWNED_ONLY)


def split_capability(capability: Any) -> tuple[str, str] | None:
    """Return (resource, action) for a well-formed capability, else None."""
    if not isinstance(capability, str) or not CAPABILITY_PATTERN.fullmatch(capability):
        return None
    resource, action = capability.split(".")
    return resource, action


def flatten(grant: PermissionGrant | Mapping | Iterable | None) -> frozenset[str]:
    if not isinstance(grant, (LegacyGrant, StructuredGrant)):
        grant = parse_grant(grant)

    if grant is None:
        return frozenset()

    if isinstance(grant, LegacyGrant):
        return frozenset(cap for cap in grant.capabilities if split_capability(cap))

    flat = (
        f"{resource}.{action}"
        for resource, actions in grant.levels.items()
        for action, level in actions.items()
        if level in _FLATTENED_LEVELS
    )
    return frozenset(cap for cap in flat if split_capability(cap))


def unflatten(capabilities: Iterable[Any] | None) -> StructuredGrant:
    levels: dict[str, dict[str, GrantLevel]] = {}
    for capability in capabilities or ():
        pair = split_capability(capability)
        if pair is None:
            continue
        resource, action = pair
        levels.setdefault(resource, {})[action] = GrantLevel.ALLOWED
    return StructuredGrant(levels)


def encode_grant(grant: PermissionGrant | None) -> list[str] | dict[str, dict[str, Any]] | None:
    """Serialize a grant back to its wire shape (JSON column, token claim)."""
    if grant is None:
        return None
    if isinstance(grant, LegacyGrant):
        return sorted(grant.capabilities)
    return {
        resource: {action: level.to_wire() for action, level in actions.items()}
        for resource, actions in grant.levels.items()
    }
