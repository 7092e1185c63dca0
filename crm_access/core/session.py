"""
Single-owner holder for the authenticated principal.

The authentication flow is the only writer: `login` swaps in a new principal
and `logout` drops it. Readers (guards, endpoints) get the current principal
by reference and never edit it; `Principal` is immutable.
"""
import logging
from typing import Any

from crm_access.core.grants import Principal
from crm_access.services import permission_evaluator

logger = logging.getLogger(__name__)


class AuthSession:
    def __init__(self, principal: Principal | None = None) -> None:
        self._principal = principal

    @property
    def principal(self) -> Principal | None:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._principal is not None

    def login(self, principal: Principal) -> None:
        self._principal = principal
        logger.debug("Session bound to principal %s (%s)", principal.id, principal.role)

    def logout(self) -> None:
        self._principal = None

    def can(self, resource: str, action: str, owner_id: Any = None) -> bool:
        return permission_evaluator.can(self._principal, resource, action, owner_id)

    def can_any(self, resource: str) -> bool:
        return permission_evaluator.can_any(self._principal, resource)

    def is_admin(self) -> bool:
        return permission_evaluator.is_admin(self._principal)
