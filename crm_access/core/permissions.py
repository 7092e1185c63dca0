"""
Capability catalog for the CRM admin client.

Each capability follows the pattern "resource.action" and maps onto one
(resource, action) cell of a structured permission grant. The catalog is what
the user editing form offers as checkboxes; templates and user permission
lists are validated against it.
"""
import re
from dataclasses import dataclass

CAPABILITY_PATTERN = re.compile(r"^[a-z_]+\.[a-z_]+$")

# Sentinel used by legacy grants to mean "everything"
ALL_SENTINEL = "all"


@dataclass(frozen=True)
class PermissionInfo:
    capability: str
    name: str
    description: str
    category: str


# ── Categories ─────────────────────────────────────────────────────────────

CATEGORY_LABELS: dict[str, str] = {
    "dashboard": "Dashboard",
    "leads": "Leads",
    "clients": "Clientes",
    "proposals": "Propostas",
    "tasks": "Tarefas",
    "kanban": "Kanban",
    "whatsapp": "WhatsApp",
    "campaigns": "Campanhas",
    "reports": "Relatórios",
    "settings": "Configurações",
    "users": "Usuários",
}


# ── All available capabilities ─────────────────────────────────────────────

CATALOG: list[PermissionInfo] = [
    # Dashboard
    PermissionInfo("dashboard.view", "Visualizar Dashboard", "Pode visualizar o painel inicial", "dashboard"),
    # Leads
    PermissionInfo("leads.view", "Visualizar Leads", "Pode visualizar a lista de leads", "leads"),
    PermissionInfo("leads.create", "Criar Leads", "Pode cadastrar novos leads", "leads"),
    PermissionInfo("leads.edit", "Editar Leads", "Pode editar leads existentes", "leads"),
    PermissionInfo("leads.delete", "Excluir Leads", "Pode excluir leads", "leads"),
    PermissionInfo("leads.export", "Exportar Leads", "Pode exportar a lista de leads", "leads"),
    PermissionInfo("leads.assign", "Atribuir Leads", "Pode atribuir leads a outros usuários", "leads"),
    # Clients
    PermissionInfo("clients.view", "Visualizar Clientes", "Pode visualizar clientes", "clients"),
    PermissionInfo("clients.create", "Criar Clientes", "Pode cadastrar clientes", "clients"),
    PermissionInfo("clients.edit", "Editar Clientes", "Pode editar clientes", "clients"),
    PermissionInfo("clients.delete", "Excluir Clientes", "Pode excluir clientes", "clients"),
    # Proposals
    PermissionInfo("proposals.view", "Visualizar Propostas", "Pode visualizar propostas", "proposals"),
    PermissionInfo("proposals.create", "Criar Propostas", "Pode criar propostas", "proposals"),
    PermissionInfo("proposals.edit", "Editar Propostas", "Pode editar propostas", "proposals"),
    PermissionInfo("proposals.delete", "Excluir Propostas", "Pode excluir propostas", "proposals"),
    PermissionInfo("proposals.approve", "Aprovar Propostas", "Pode aprovar ou rejeitar propostas", "proposals"),
    # Tasks
    PermissionInfo("tasks.view", "Visualizar Tarefas", "Pode visualizar tarefas", "tasks"),
    PermissionInfo("tasks.create", "Criar Tarefas", "Pode criar tarefas", "tasks"),
    PermissionInfo("tasks.edit", "Editar Tarefas", "Pode editar tarefas", "tasks"),
    PermissionInfo("tasks.delete", "Excluir Tarefas", "Pode excluir tarefas", "tasks"),
    # Kanban
    PermissionInfo("kanban.view", "Visualizar Kanban", "Pode visualizar o quadro kanban", "kanban"),
    PermissionInfo("kanban.edit", "Gerenciar Kanban", "Pode mover cards e gerenciar o kanban", "kanban"),
    # WhatsApp
    PermissionInfo("whatsapp.view", "Visualizar WhatsApp", "Pode visualizar conversas do WhatsApp", "whatsapp"),
    PermissionInfo("whatsapp.send", "Enviar WhatsApp", "Pode enviar mensagens via WhatsApp", "whatsapp"),
    # Campaigns
    PermissionInfo("campaigns.view", "Visualizar Campanhas", "Pode visualizar campanhas", "campaigns"),
    PermissionInfo("campaigns.create", "Criar Campanhas", "Pode criar campanhas", "campaigns"),
    PermissionInfo("campaigns.edit", "Editar Campanhas", "Pode editar campanhas", "campaigns"),
    PermissionInfo("campaigns.delete", "Excluir Campanhas", "Pode excluir campanhas", "campaigns"),
    # Reports
    PermissionInfo("reports.view", "Visualizar Relatórios", "Pode visualizar relatórios", "reports"),
    PermissionInfo("reports.export", "Exportar Relatórios", "Pode exportar relatórios", "reports"),
    # Settings
    PermissionInfo("settings.view", "Visualizar Configurações", "Pode visualizar configurações do sistema", "settings"),
    PermissionInfo("settings.edit", "Gerenciar Configurações", "Pode alterar configurações do sistema", "settings"),
    # Users
    PermissionInfo("users.view", "Visualizar Usuários", "Pode visualizar lista de usuários", "users"),
    PermissionInfo("users.create", "Criar Usuários", "Pode criar usuários", "users"),
    PermissionInfo("users.edit", "Editar Usuários", "Pode editar usuários e suas permissões", "users"),
    PermissionInfo("users.delete", "Excluir Usuários", "Pode excluir usuários", "users"),
]

ALL_PERMISSIONS: list[str] = [p.capability for p in CATALOG]

_BY_CAPABILITY: dict[str, PermissionInfo] = {p.capability: p for p in CATALOG}


def is_known_capability(capability: str) -> bool:
    return capability in _BY_CAPABILITY


def permissions_by_category() -> dict[str, list[PermissionInfo]]:
    """Group the catalog by category, preserving catalog order."""
    grouped: dict[str, list[PermissionInfo]] = {}
    for info in CATALOG:
        grouped.setdefault(info.category, []).append(info)
    return grouped
