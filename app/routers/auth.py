from fastapi import APIRouter, HTTPException, Request, Response
from typing import Optional
from urllib.parse import urlsplit

from app.core.auth_context import find_current_token
from app.core.config import settings
from app.core.logger import logger
from app.core.roles import home_for
from app.core.security import issue_session_token, session_from_token
from app.core.session import SessionContext
from app.schemas.auth import OtpRequestSchema, OtpVerifySchema
from app.services.backend_api import BackendAPIClient, BackendAPIError

router = APIRouter(tags=["Auth"])


def _safe_callback(callback_url: Optional[str]) -> Optional[str]:
    # local paths only; browsers treat a backslash like a slash
    if not callback_url or not callback_url.startswith("/"):
        return None
    if "\\" in callback_url or any(ord(ch) < 32 or ord(ch) == 127 for ch in callback_url):
        return None

    parts = urlsplit(callback_url)
    if parts.scheme or parts.netloc:
        return None
    return callback_url


@router.get("/login")
def login_page(callbackUrl: Optional[str] = None, expired: bool = False):
    return {
        "steps": ["/auth/request-otp", "/auth/verify-otp"],
        "callbackUrl": _safe_callback(callbackUrl),
        "expired": expired,
        "message": "Your session has expired, please sign in again." if expired else None,
    }


@router.post("/auth/request-otp")
def request_otp(data: OtpRequestSchema):
    client = BackendAPIClient(token=None)

    try:
        result = client.post("/api/auth/request_otp", {"phone": data.phone})
    except BackendAPIError as e:
        logger.warning(f"OTP REQUEST FAILED | phone={data.phone} | error={e.message}")
        raise HTTPException(status_code=e.status_code or 502, detail=e.message or "Failed to send OTP")

    message = result.get("message") if isinstance(result, dict) else None
    return {"status": "otp_sent", "message": message or "OTP sent"}


@router.post("/auth/verify-otp")
def verify_otp(data: OtpVerifySchema, response: Response):
    client = BackendAPIClient(token=None)

    try:
        result = client.post("/api/auth/verify_otp", {"phone": data.phone, "otp": data.otp})
    except BackendAPIError as e:
        logger.warning(f"LOGIN FAILED | phone={data.phone} | error={e.message}")
        if e.status_code is None or e.status_code >= 500:
            raise HTTPException(status_code=502, detail=e.message or "Login service unavailable")
        raise HTTPException(status_code=401, detail=e.message or "Invalid OTP. Please try again.")

    user = result.get("user") if isinstance(result, dict) else None
    token = result.get("token") if isinstance(result, dict) else None
    if not token or not isinstance(user, dict) or not user.get("role"):
        raise HTTPException(status_code=502, detail="Malformed login response from backend")

    session = SessionContext(
        subject=str(user.get("userId") or data.phone),
        role=user["role"],
        token=token
    )

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=issue_session_token(session),
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE
    )

    logger.info(f"LOGIN SUCCESS | subject={session.subject} | role={session.role}")

    return {
        "status": "authenticated",
        "role": session.role,
        "redirect": _safe_callback(data.callbackUrl) or home_for(session.role),
    }


@router.post("/auth/logout")
def logout(request: Request, response: Response):
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    logger.info(f"LOGOUT | had_session={bool(find_current_token(request))}")
    return {"status": "unauthenticated"}


@router.get("/auth/session")
def current_session(request: Request):
    token = find_current_token(request)
    if not token:
        return {"status": "unauthenticated"}

    try:
        session = session_from_token(token)
    except HTTPException:
        return {"status": "unauthenticated"}

    return {
        "status": "authenticated",
        "subject": session.subject,
        "role": session.role,
        "expires_at": session.expires_at.isoformat() if session.expires_at else None,
    }
