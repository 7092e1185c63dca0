"""
Default capability sets per role.

Only consulted when a new user is provisioned: the template seeds the flat
permission list of the creation form, the admin edits it, and the result is
stored as a structured grant. Evaluation never looks at templates.
"""
from types import MappingProxyType

from crm_access.core.grants import normalize_role
from crm_access.core.permissions import ALL_PERMISSIONS

_VENDEDOR = frozenset({
    "dashboard.view",
    "leads.view", "leads.create", "leads.edit",
    "clients.view", "clients.create", "clients.edit",
    "proposals.view", "proposals.create", "proposals.edit",
    "tasks.view", "tasks.create", "tasks.edit",
    "kanban.view", "kanban.edit",
    "whatsapp.view", "whatsapp.send",
})

_GERENTE = _VENDEDOR | frozenset({
    "leads.delete", "leads.export", "leads.assign",
    "clients.delete",
    "proposals.delete", "proposals.approve",
    "tasks.delete",
    "campaigns.view", "campaigns.create", "campaigns.edit", "campaigns.delete",
    "reports.view", "reports.export",
    "users.view",
})

_SUPORTE = frozenset({
    "dashboard.view",
    "leads.view",
    "clients.view",
    "tasks.view", "tasks.create", "tasks.edit",
    "kanban.view",
    "whatsapp.view", "whatsapp.send",
    "settings.view",
})

_COMERCIAL = frozenset({
    "dashboard.view",
    "leads.view", "leads.create", "leads.edit", "leads.assign",
    "clients.view", "clients.create", "clients.edit",
    "proposals.view", "proposals.create", "proposals.edit",
    "campaigns.view", "campaigns.create", "campaigns.edit",
    "whatsapp.view", "whatsapp.send",
    "reports.view",
})

_FINANCEIRO = frozenset({
    "dashboard.view",
    "clients.view",
    "proposals.view", "proposals.approve",
    "reports.view", "reports.export",
})

ROLE_TEMPLATES = MappingProxyType({
    "admin": frozenset(ALL_PERMISSIONS),
    "gerente": _GERENTE,
    "vendedor": _VENDEDOR,
    "suporte": _SUPORTE,
    "comercial": _COMERCIAL,
    "financeiro": _FINANCEIRO,
})


def defaults_for(role: str | None) -> frozenset[str]:
    """Default capabilities for `role`; unknown roles get an empty set."""
    return ROLE_TEMPLATES.get(normalize_role(role), frozenset())


def available_roles() -> list[str]:
    return list(ROLE_TEMPLATES)
