from fastapi import APIRouter

from app.core.config import settings
from app.core.logger import logger
from app.services.backend_api import BackendAPIClient, BackendAPIError

router = APIRouter(tags=["Health"])

DEFAULT_HEALTH = {
    "status": "ERROR",
    "uptime": 0,
    "timestamp": None,
    "memoryUsage": {"rss": 0, "heapTotal": 0, "heapUsed": 0, "external": 0},
    "cpuUsage": {"cpuPercent": 0, "loadavg": [0, 0, 0], "cpus": []},
    "disk": {"ok": False, "message": "unknown", "available": 0, "free": 0, "total": 0},
    "redis": {"ok": False, "message": "unknown"},
    "db": {"ok": False, "message": "unknown"},
    "environment": settings.ENV,
}


@router.get("/ping")
def ping():
    return {"status": "ok"}


@router.get("/health")
def health():
    client = BackendAPIClient(token=None)

    try:
        payload = client.request_json("GET", settings.HEALTH_CHECK_URL)
    except BackendAPIError as e:
        logger.warning(f"HEALTH CHECK FAILED | error={e.message}")
        return dict(DEFAULT_HEALTH)

    if not isinstance(payload, dict):
        return dict(DEFAULT_HEALTH)
    return payload
