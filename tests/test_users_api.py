# tests/test_users_api.py

"""
Tests for user provisioning and the permission edit form round trip.
"""

import pytest
from fastapi.testclient import TestClient

from crm_access.services.permission_templates import defaults_for


def _create(client: TestClient, headers=None, **overrides):
    body = {
        "nome": "Ana Souza",
        "email": "ana@example.com",
        "senha": "s3nha",
        "funcao": "vendedor",
        **overrides,
    }
    return client.post("/api/v1/admin/users", json=body, headers=headers or {})


def test_create_user_seeds_role_template(client: TestClient):
    response = _create(client)
    assert response.status_code == 201
    data = response.json()
    assert data["funcao"] == "vendedor"

    stored = data["permissoes"]
    flat = {f"{res}.{act}" for res, acts in stored.items() for act, value in acts.items() if value is True}
    assert flat == defaults_for("vendedor")
    assert "delete" not in stored.get("users", {})


def test_create_user_normalizes_role_alias(client: TestClient):
    response = _create(client, funcao="Salesperson")
    assert response.status_code == 201
    assert response.json()["funcao"] == "vendedor"


def test_create_user_with_explicit_permissions(client: TestClient):
    response = _create(client, permissoes=["leads.view", "tasks.create"])
    assert response.status_code == 201
    assert response.json()["permissoes"] == {
        "leads": {"view": True},
        "tasks": {"create": True},
    }


def test_create_user_rejects_unknown_capability(client: TestClient):
    response = _create(client, permissoes=["leads.view", "leads.teleport"])
    assert response.status_code == 400
    assert "leads.teleport" in response.json()["detail"]


def test_create_user_duplicate_email(client: TestClient):
    assert _create(client).status_code == 201
    assert _create(client, email="ANA@example.com").status_code == 409


def test_unknown_role_starts_without_permissions(client: TestClient):
    response = _create(client, funcao="estagiario")
    assert response.status_code == 201
    assert response.json()["permissoes"] == {}


def test_edit_form_flattens_structured_permissions(client: TestClient, make_user):
    user = make_user(permissoes={"leads": {"view": "own", "edit": "team", "delete": False}})
    response = client.get(f"/api/v1/admin/users/{user.id}/permissions")
    assert response.status_code == 200
    assert response.json()["permissoes"] == ["leads.view"]


def test_saving_the_form_loses_ownership_qualifiers(client: TestClient, make_user):
    """Owned-only comes back as allowed and team-only is dropped after an edit."""
    user = make_user(permissoes={"leads": {"view": "own", "edit": "team"}})
    flat = client.get(f"/api/v1/admin/users/{user.id}/permissions").json()["permissoes"]

    response = client.put(f"/api/v1/admin/users/{user.id}", json={"permissoes": flat})
    assert response.status_code == 200
    assert response.json()["permissoes"] == {"leads": {"view": True}}


def test_update_user_fields(client: TestClient, make_user):
    user = make_user()
    response = client.put(
        f"/api/v1/admin/users/{user.id}",
        json={"nome": "Novo Nome", "funcao": "Manager", "ativo": False},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["nome"] == "Novo Nome"
    assert data["funcao"] == "gerente"
    assert data["ativo"] is False


def test_list_and_get_users(client: TestClient):
    _create(client)
    _create(client, email="bia@example.com", funcao="suporte")

    listing = client.get("/api/v1/admin/users").json()
    assert listing["total"] == 2

    filtered = client.get("/api/v1/admin/users", params={"funcao": "support"}).json()
    assert filtered["total"] == 1
    user_id = filtered["items"][0]["id"]

    assert client.get(f"/api/v1/admin/users/{user_id}").json()["email"] == "bia@example.com"


def test_delete_user(client: TestClient, make_user):
    user = make_user()
    assert client.delete(f"/api/v1/admin/users/{user.id}").status_code == 204
    assert client.get(f"/api/v1/admin/users/{user.id}").status_code == 404


# ---------------------------------------------------------------------------
# Enforcement with auth enabled
# ---------------------------------------------------------------------------

@pytest.mark.usefixtures("auth_enabled")
class TestUserEndpointsEnforcePermissions:
    def test_anonymous_is_rejected(self, client: TestClient):
        assert client.get("/api/v1/admin/users").status_code == 401

    def test_admin_can_create(self, client: TestClient, admin_headers):
        assert _create(client, headers=admin_headers).status_code == 201

    def test_seller_cannot_create(self, client: TestClient, token_for):
        headers = token_for({"id": "42", "role": "vendedor", "permissions": sorted(defaults_for("vendedor"))})
        response = _create(client, headers=headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Missing permission: users.create"

    def test_manager_can_list_but_not_delete(self, client: TestClient, token_for, make_user):
        user = make_user()
        headers = token_for({"id": "7", "role": "gerente", "permissions": {"users": {"view": True}}})
        assert client.get("/api/v1/admin/users", headers=headers).status_code == 200
        assert client.delete(f"/api/v1/admin/users/{user.id}", headers=headers).status_code == 403

    def test_legacy_all_grant_passes(self, client: TestClient, token_for):
        headers = token_for({"id": "9", "role": "suporte", "permissions": ["all"]})
        assert client.get("/api/v1/admin/users", headers=headers).status_code == 200
