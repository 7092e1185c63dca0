"""
Permission grant types and structural decoding of authentication payloads.

A principal's grant arrives in one of two shapes with no discriminant field:

    legacy      ["leads.view", "leads.edit"]   or   ["all"]
    structured  {"leads": {"view": "own", "edit": True, "delete": False}}

`parse_grant` infers the shape once, at the boundary, and everything past it
works with the `LegacyGrant | StructuredGrant` variants.
"""
import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from crm_access.core.permissions import ALL_SENTINEL

logger = logging.getLogger(__name__)


class GrantLevel(str, enum.Enum):
    DENIED = "denied"
    ALLOWED = "allowed"
    OWNED_ONLY = "own"
    TEAM_ONLY = "team"

    @classmethod
    def from_wire(cls, value: Any) -> "GrantLevel":
        """Decode a wire value (bool, "own", "team"). Anything else is DENIED."""
        if value is True:
            return cls.ALLOWED
        if value is False:
            return cls.DENIED
        if isinstance(value, str):
            if value == "own":
                return cls.OWNED_ONLY
            if value == "team":
                return cls.TEAM_ONLY
        return cls.DENIED

    def to_wire(self) -> bool | str:
        if self is GrantLevel.ALLOWED:
            return True
        if self is GrantLevel.DENIED:
            return False
        return self.value

    @property
    def grants_something(self) -> bool:
        return self is not GrantLevel.DENIED


@dataclass(frozen=True)
class LegacyGrant:
    capabilities: frozenset[str] = frozenset()

    @property
    def is_unrestricted(self) -> bool:
        return ALL_SENTINEL in self.capabilities


@dataclass(frozen=True)
class StructuredGrant:
    levels: Mapping[str, Mapping[str, GrantLevel]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        # Freeze the nested mappings so a grant can be shared between readers
        frozen = MappingProxyType(
            {res: MappingProxyType(dict(acts)) for res, acts in self.levels.items()}
        )
        object.__setattr__(self, "levels", frozen)

    def level(self, resource: str, action: str) -> GrantLevel:
        return self.levels.get(resource, {}).get(action, GrantLevel.DENIED)

    def actions(self, resource: str) -> Mapping[str, GrantLevel]:
        return self.levels.get(resource, MappingProxyType({}))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructuredGrant):
            return NotImplemented
        return _plain(self.levels) == _plain(other.levels)

    def __hash__(self) -> int:
        return hash(
            frozenset(
                (res, act, lvl)
                for res, acts in self.levels.items()
                for act, lvl in acts.items()
            )
        )


PermissionGrant = Union[LegacyGrant, StructuredGrant]


def _plain(levels: Mapping[str, Mapping[str, GrantLevel]]) -> dict:
    return {res: dict(acts) for res, acts in levels.items()}


def parse_grant(raw: Any) -> PermissionGrant | None:
    """
    Infer the grant variant from a raw payload value.

    Never raises; shapes that are neither a sequence of strings nor a
    mapping yield None, which the evaluator treats as "no grant".
    """
    if isinstance(raw, (LegacyGrant, StructuredGrant)):
        return raw

    if isinstance(raw, (list, tuple, set, frozenset)):
        capabilities = frozenset(
            item.strip() for item in raw if isinstance(item, str) and item.strip()
        )
        return LegacyGrant(capabilities)

    if isinstance(raw, Mapping):
        levels: dict[str, dict[str, GrantLevel]] = {}
        for resource, actions in raw.items():
            if not isinstance(resource, str) or not isinstance(actions, Mapping):
                logger.warning("Ignoring malformed grant entry for resource %r", resource)
                continue
            levels[resource] = {
                action: GrantLevel.from_wire(value)
                for action, value in actions.items()
                if isinstance(action, str)
            }
        return StructuredGrant(levels)

    if raw is not None:
        logger.warning("Unrecognised permission payload of type %s", type(raw).__name__)
    return None


# ── Roles ──────────────────────────────────────────────────────────────────

ADMIN_ROLE = "admin"

ROLE_ALIASES: dict[str, str] = {
    "admin": "admin",
    "administrador": "admin",
    "administrator": "admin",
    "gerente": "gerente",
    "manager": "gerente",
    "vendedor": "vendedor",
    "salesperson": "vendedor",
    "suporte": "suporte",
    "support": "suporte",
    "comercial": "comercial",
    "commercial": "comercial",
    "financeiro": "financeiro",
    "finance": "financeiro",
}


def normalize_role(role: Any) -> str:
    value = str(role or "").strip().lower()
    return ROLE_ALIASES.get(value, value)


# ── Principal ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Principal:
    id: str
    role: str
    grant: PermissionGrant | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Principal":
        """Build a principal from an authentication response or token claims."""
        raw_id = payload.get("id", payload.get("sub"))
        role = payload.get("role") or payload.get("funcao") or ""
        if "permissions" in payload:
            raw_grant = payload.get("permissions")
        else:
            raw_grant = payload.get("permissoes")
        return cls(
            id="" if raw_id is None else str(raw_id),
            role=normalize_role(role),
            grant=parse_grant(raw_grant),
        )
