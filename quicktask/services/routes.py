from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

HOME = "/"
LOGIN = "/login"
REGISTER = "/register"
DASHBOARD = "/dashboard"
TASKS = "/tasks"
PROFILE = "/profile"
SETTINGS = "/settings"

PROTECTED_ROUTES = (DASHBOARD, TASKS, PROFILE, SETTINGS)
PUBLIC_ONLY_ROUTES = (LOGIN, REGISTER)


@dataclass(frozen=True)
class RouteDecision:
    path: str
    redirected: bool = False
    redirect_to: Optional[str] = None


def _under(path: str, route: str) -> bool:
    return path == route or path.startswith(route + "/")


def is_protected(path: str) -> bool:
    return any(_under(path, route) for route in PROTECTED_ROUTES)


def is_public_only(path: str) -> bool:
    return path == HOME or any(_under(path, route) for route in PUBLIC_ONLY_ROUTES)


def resolve_route(path: str, is_authenticated: bool) -> RouteDecision:
    """Decide which view a navigation to ``path`` ends on.

    Only the presence of a session token is considered; whether it is still
    valid is discovered later by the store.
    """
    path = path or HOME
    if is_protected(path) and not is_authenticated:
        logger.debug("Redirecting unauthenticated user to login from %s", path)
        return RouteDecision(path=LOGIN, redirected=True, redirect_to=path)
    if is_public_only(path) and is_authenticated:
        logger.debug("Redirecting authenticated user to dashboard from %s", path)
        return RouteDecision(path=DASHBOARD, redirected=True)
    return RouteDecision(path=path)
