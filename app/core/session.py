from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class SessionContext:
    subject: str
    role: str                # "ADMIN" | "TSMWA_EDITOR" | ...
    token: str               # backend bearer token
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now

    @property
    def authorization_header(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}
