from datetime import timedelta
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from app.core.security import issue_session_token
from app.core.session import SessionContext
from app.main import app


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> Callable[..., dict]:
    """Factory: bearer headers carrying a signed session for the given role."""

    def _headers(role: str = "ADMIN", expires_delta: timedelta = None, backend_token: str = "backend-token") -> dict:
        session = SessionContext(subject="1", role=role, token=backend_token)
        token = issue_session_token(session, expires_delta=expires_delta)
        return {"Authorization": f"Bearer {token}"}

    return _headers
