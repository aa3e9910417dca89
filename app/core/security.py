from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import HTTPException, status
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import settings
from app.core.session import SessionContext


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.SESSION_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, verify_exp: bool = True) -> dict:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"verify_exp": verify_exp}
        )
        return payload

    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired"
        )

    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token"
        )


# =====================================================
# SESSION <-> TOKEN
# =====================================================

def issue_session_token(session: SessionContext, expires_delta: Optional[timedelta] = None) -> str:
    return create_access_token(
        {
            "sub": session.subject,
            "role": session.role,
            "token": session.token,
        },
        expires_delta=expires_delta
    )


def session_from_token(token: str, verify_exp: bool = True) -> SessionContext:
    payload = decode_access_token(token, verify_exp=verify_exp)

    if not payload.get("sub") or not payload.get("role"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session payload"
        )

    exp = payload.get("exp")
    expires_at = datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None

    return SessionContext(
        subject=str(payload["sub"]),
        role=payload["role"],
        token=payload.get("token", ""),
        expires_at=expires_at
    )
