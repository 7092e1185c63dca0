"""
Route guard / conditional render adapter over the permission evaluator.

The gate carries no decision logic of its own: it asks `can` and maps a denial
to the fallback the caller supplied, a redirect, or the built-in access-denied
view, in that order.
"""
from dataclasses import dataclass
from typing import Any, Union

from crm_access.core.grants import Principal
from crm_access.services.permission_evaluator import can


class _Home:
    def __repr__(self) -> str:
        return "HOME"


# Pass as `redirect_to` to send denied users to the configured home path
HOME = _Home()


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Redirect:
    target: str


@dataclass(frozen=True)
class RenderFallback:
    node: Any


@dataclass(frozen=True)
class AccessDenied:
    home_path: str


GuardOutcome = Union[Allow, Redirect, RenderFallback, AccessDenied]


class AccessGate:
    def __init__(self, home_path: str) -> None:
        self.home_path = home_path

    def guard(
        self,
        principal: Principal | None,
        resource: str,
        action: str = "view",
        *,
        owner_id: Any = None,
        fallback: Any = None,
        redirect_to: str | _Home | None = None,
    ) -> GuardOutcome:
        if can(principal, resource, action, owner_id):
            return Allow()

        if fallback is not None:
            return RenderFallback(fallback)

        if redirect_to is HOME:
            return Redirect(self.home_path)
        if redirect_to:
            return Redirect(redirect_to)

        return AccessDenied(self.home_path)
