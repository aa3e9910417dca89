"""
Role-gated route access control.

`authorize` is a pure decision function; the middleware in
`app.middleware.route_guard` turns its result into an HTTP response.
"""
from dataclasses import dataclass
from typing import FrozenSet, Optional, Sequence, Union

from app.core.session import SessionContext


@dataclass(frozen=True)
class RouteAccessRule:
    path_prefix: str
    allowed_roles: FrozenSet[str] = frozenset()

    def __post_init__(self):
        object.__setattr__(self, "allowed_roles", frozenset(self.allowed_roles))

    def matches(self, request_path: str) -> bool:
        return request_path.startswith(self.path_prefix)


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class RedirectToLogin:
    original_path: str


@dataclass(frozen=True)
class RedirectToHome:
    pass


Decision = Union[Allow, RedirectToLogin, RedirectToHome]


def match_rule(request_path: str, rules: Sequence[RouteAccessRule]) -> Optional[RouteAccessRule]:
    """Longest matching prefix wins; ties keep the first declared rule."""
    best = None
    for rule in rules:
        if not rule.matches(request_path):
            continue
        if best is None or len(rule.path_prefix) > len(best.path_prefix):
            best = rule
    return best


def authorize(
    request_path: str,
    session: Optional[SessionContext],
    rules: Sequence[RouteAccessRule]
) -> Decision:
    if session is None:
        return RedirectToLogin(request_path)

    rule = match_rule(request_path, rules)

    # paths no rule mentions stay open
    if rule is None:
        return Allow()

    if session.role in rule.allowed_roles:
        return Allow()

    return RedirectToHome()


def is_guarded(request_path: str, rules: Sequence[RouteAccessRule]) -> bool:
    return match_rule(request_path, rules) is not None
