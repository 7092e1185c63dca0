# tests/test_permission_templates.py

"""
Tests for the per-role default permission templates.
"""

import pytest

from crm_access.core.permissions import ALL_PERMISSIONS, CAPABILITY_PATTERN, is_known_capability
from crm_access.services.permission_templates import ROLE_TEMPLATES, available_roles, defaults_for


def test_vendedor_template_is_fixed_and_non_empty():
    defaults = defaults_for("vendedor")
    assert defaults
    assert "users.delete" not in defaults
    assert "leads.view" in defaults
    assert defaults_for("vendedor") == defaults


@pytest.mark.parametrize(
    "alias,canonical",
    [
        ("Vendedor", "vendedor"),
        ("salesperson", "vendedor"),
        ("Manager", "gerente"),
        ("support", "suporte"),
        ("commercial", "comercial"),
        ("finance", "financeiro"),
        ("Administrador", "admin"),
    ],
)
def test_role_aliases_share_a_template(alias, canonical):
    assert defaults_for(alias) == defaults_for(canonical)


@pytest.mark.parametrize("role", [None, "", "estagiario", "root"])
def test_unknown_roles_get_an_empty_set(role):
    assert defaults_for(role) == frozenset()


@pytest.mark.parametrize("role", list(ROLE_TEMPLATES))
def test_templates_only_use_catalog_capabilities(role):
    for capability in defaults_for(role):
        assert CAPABILITY_PATTERN.match(capability)
        assert is_known_capability(capability), capability


def test_admin_template_is_the_full_catalog():
    assert defaults_for("admin") == frozenset(ALL_PERMISSIONS)


def test_manager_extends_seller():
    assert defaults_for("vendedor") < defaults_for("gerente")


def test_only_admin_can_delete_users_by_default():
    holders = [role for role in available_roles() if "users.delete" in defaults_for(role)]
    assert holders == ["admin"]


def test_templates_cannot_be_mutated():
    with pytest.raises(TypeError):
        ROLE_TEMPLATES["vendedor"] = frozenset()
    with pytest.raises(AttributeError):
        defaults_for("vendedor").add("users.delete")
