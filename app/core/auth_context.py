from typing import Optional

from fastapi import HTTPException, Request

from app.core.config import settings


def find_current_token(request: Request) -> Optional[str]:
    # cookie (WEB)
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)

    # Authorization header (MOBILE / API)
    if not token:
        auth = request.headers.get("Authorization")
        if auth and auth.startswith("Bearer "):
            token = auth.split(" ", 1)[1].strip() or None

    return token


def get_current_token(request: Request) -> str:
    token = find_current_token(request)

    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    return token
