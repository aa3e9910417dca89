from typing import Dict, FrozenSet, List, Optional

from app.core.access import RouteAccessRule, match_rule

ADMIN = "ADMIN"
ADMIN_VIEWER = "ADMIN_VIEWER"
TSMWA_EDITOR = "TSMWA_EDITOR"
TSMWA_VIEWER = "TSMWA_VIEWER"
TQMA_EDITOR = "TQMA_EDITOR"
TQMA_VIEWER = "TQMA_VIEWER"

ALL_ROLES = (
    ADMIN,
    ADMIN_VIEWER,
    TSMWA_EDITOR,
    TSMWA_VIEWER,
    TQMA_EDITOR,
    TQMA_VIEWER,
)

# =====================================================
# SURFACES
# =====================================================

SURFACES = ("admin", "tsmwa", "twwa")

ROUTE_RULES: List[RouteAccessRule] = [
    RouteAccessRule("/admin", {ADMIN, ADMIN_VIEWER}),
    RouteAccessRule("/tsmwa", {ADMIN, TSMWA_EDITOR, TSMWA_VIEWER}),
    RouteAccessRule("/twwa", {ADMIN, TQMA_EDITOR, TQMA_VIEWER}),
]

# roles allowed to delete records on each surface
EDITOR_ROLES: Dict[str, FrozenSet[str]] = {
    "/admin": frozenset({ADMIN}),
    "/tsmwa": frozenset({ADMIN, TSMWA_EDITOR}),
    "/twwa": frozenset({ADMIN, TQMA_EDITOR}),
}

HOME_SURFACE: Dict[str, str] = {
    ADMIN: "/admin",
    ADMIN_VIEWER: "/admin",
    TSMWA_EDITOR: "/tsmwa",
    TSMWA_VIEWER: "/tsmwa",
    TQMA_EDITOR: "/twwa",
    TQMA_VIEWER: "/twwa",
}


def can_edit(role: Optional[str], request_path: str) -> bool:
    rule = match_rule(request_path, ROUTE_RULES)
    if rule is None:
        return False
    return role in EDITOR_ROLES.get(rule.path_prefix, frozenset())


def home_for(role: Optional[str]) -> str:
    return HOME_SURFACE.get(role, "/")
