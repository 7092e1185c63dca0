# tests/test_session.py

"""
Tests for the single-owner authentication session.
"""

import dataclasses

import pytest

from crm_access.core.grants import Principal
from crm_access.core.session import AuthSession


def test_anonymous_session_denies_everything():
    session = AuthSession()
    assert not session.is_authenticated
    assert session.can("leads", "view") is False
    assert session.can_any("leads") is False
    assert session.is_admin() is False


def test_login_replaces_the_principal(seller_principal):
    session = AuthSession()
    session.login(seller_principal)
    assert session.principal is seller_principal
    assert session.can("leads", "view", "42")
    assert not session.can("leads", "view", "99")

    admin = Principal.from_payload({"id": "1", "role": "admin", "permissions": {}})
    session.login(admin)
    assert session.principal is admin
    assert session.is_admin()
    assert session.can("users", "delete")


def test_logout_clears_the_principal(seller_principal):
    session = AuthSession(seller_principal)
    session.logout()
    assert session.principal is None
    assert session.can("leads", "view") is False


def test_principal_is_immutable(seller_principal):
    with pytest.raises(dataclasses.FrozenInstanceError):
        seller_principal.role = "admin"
    with pytest.raises(TypeError):
        seller_principal.grant.levels["leads"] = {}
