from dataclasses import dataclass
from typing import Optional, Tuple

from api.models import Identity

LOGIN_ROUTE = "/login"
HOME_ROUTE = "/"

# (route pattern, role required). A trailing "/*" matches the prefix itself
# and anything below it. Routes not listed are public.
ROUTE_RULES: Tuple[Tuple[str, str], ...] = (
    ("/vendor/*", "VENDOR"),
    ("/admin/*", "ADMIN"),
    ("/cart", "CUSTOMER"),
    ("/checkout", "CUSTOMER"),
    ("/orders", "CUSTOMER"),
)

ROLE_HOME = {
    "VENDOR": "/vendor/dashboard",
    "ADMIN": "/admin",
    "CUSTOMER": HOME_ROUTE,
}


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    redirect: Optional[str] = None
    pending: bool = False


ALLOW = GateDecision(True)
WAIT = GateDecision(False, pending=True)


def _matches(pattern: str, route: str) -> bool:
    route = route.split("?", 1)[0].rstrip("/") or "/"
    if pattern.endswith("/*"):
        prefix = pattern[:-2]
        return route == prefix or route.startswith(prefix + "/")
    return route == pattern


def required_role(route: str) -> Optional[str]:
    """The role a route is gated on, or None for public routes."""
    for pattern, role in ROUTE_RULES:
        if _matches(pattern, route):
            return role
    return None


def can_access(identity: Optional[Identity], route: str) -> GateDecision:
    """
    Pure lookup over ROUTE_RULES.

    Denials never raise: an absent identity is sent to the login route,
    a role mismatch is sent home.
    """
    role = required_role(route)
    if role is None:
        return ALLOW
    if identity is None:
        return GateDecision(False, LOGIN_ROUTE)
    if identity.role != role:
        return GateDecision(False, HOME_ROUTE)
    return ALLOW


def evaluate(session, route: str) -> GateDecision:
    """
    can_access() against a SessionStore, holding every gated route until the
    identity has been resolved so nothing protected renders early.
    """
    if required_role(route) is not None and not session.resolved:
        return WAIT
    return can_access(session.identity, route)


def home_for(identity: Optional[Identity]) -> str:
    if identity is None:
        return HOME_ROUTE
    return ROLE_HOME.get(identity.role, HOME_ROUTE)
