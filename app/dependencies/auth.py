from fastapi import Depends, HTTPException, Request, status

from app.core.auth_context import get_current_token
from app.core.roles import can_edit
from app.core.security import session_from_token
from app.core.session import SessionContext


def get_current_session(
    request: Request,
    token: str = Depends(get_current_token)
) -> SessionContext:
    # the route guard already decoded it for guarded paths
    session = getattr(request.state, "session", None)
    if session is not None:
        return session

    return session_from_token(token)


def require_editor(
    request: Request,
    session: SessionContext = Depends(get_current_session)
) -> SessionContext:
    if not can_edit(session.role, request.url.path):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Editor access required"
        )
    return session
