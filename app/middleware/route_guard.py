from typing import Optional, Sequence
from urllib.parse import urlencode

from fastapi import HTTPException, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from app.core.access import Allow, RedirectToLogin, RouteAccessRule, authorize, is_guarded
from app.core.auth_context import find_current_token
from app.core.config import settings
from app.core.logger import logger
from app.core.roles import ROUTE_RULES
from app.core.security import session_from_token
from app.core.session import SessionContext


def _login_redirect(original_path: str, expired: bool = False) -> RedirectResponse:
    params = {"callbackUrl": original_path}
    if expired:
        params["expired"] = "true"
    return RedirectResponse(f"{settings.LOGIN_PATH}?{urlencode(params)}")


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """
    Checks session presence and role before any guarded page handler runs.

    Only paths under a rule prefix are evaluated; everything else (login,
    health, docs) passes straight through.
    """

    def __init__(self, app, rules: Optional[Sequence[RouteAccessRule]] = None):
        super().__init__(app)
        self.rules = list(rules if rules is not None else ROUTE_RULES)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not is_guarded(path, self.rules):
            return await call_next(request)

        if request.method == "OPTIONS":
            return await call_next(request)

        session, expired, stale = self._read_session(request)

        try:
            decision = authorize(path, session, self.rules)
        except Exception:
            logger.exception(f"ROUTE GUARD FAILED | path={path}")
            return RedirectResponse("/")

        if isinstance(decision, RedirectToLogin):
            logger.info(f"GUARD LOGIN REDIRECT | path={path} | expired={expired}")
            response = _login_redirect(decision.original_path, expired=expired)
            if stale:
                response.delete_cookie(settings.SESSION_COOKIE_NAME)
            return response

        if not isinstance(decision, Allow):
            logger.info(f"GUARD ROLE DENIED | path={path} | role={session.role}")
            return RedirectResponse("/")

        request.state.session = session
        return await call_next(request)

    @staticmethod
    def _read_session(request: Request):
        """Returns (session, expired, stale); a stale token is dropped from the cookie."""
        token = find_current_token(request)
        if not token:
            return None, False, False

        try:
            session: SessionContext = session_from_token(token, verify_exp=False)
        except HTTPException:
            logger.info(f"INVALID SESSION TOKEN | path={request.url.path}")
            return None, False, True

        if session.is_expired():
            logger.info(f"SESSION EXPIRED | subject={session.subject}")
            return None, True, True

        return session, False, False
