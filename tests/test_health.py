from unittest.mock import patch

import requests

from tests.helpers import make_response

REQUEST = "app.services.backend_api.requests.request"


def test_ping(client):
    assert client.get("/ping").json() == {"status": "ok"}


def test_health_passes_backend_payload_through(client):
    payload = {"status": "OK", "uptime": 120, "db": {"ok": True, "message": "connected"}}

    with patch(REQUEST, return_value=make_response(payload)) as request:
        response = client.get("/health")

    assert response.json() == payload
    assert request.call_args.args[1].endswith("/api/health/check")


def test_health_falls_back_when_backend_is_down(client):
    with patch(REQUEST, side_effect=requests.ConnectionError("refused")):
        response = client.get("/health")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "ERROR"
    assert body["db"]["ok"] is False


def test_root_lists_surfaces(client):
    body = client.get("/").json()

    assert body["surfaces"] == ["/admin", "/tsmwa", "/twwa"]
    assert "notify-logs" in body["lists"]
