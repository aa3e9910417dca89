import json
import re
from typing import Any, Dict, List, Optional, Sequence

import requests

from app.core.config import settings
from app.core.logger import logger


class BackendAPIError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _error_message(response: requests.Response) -> str:
    message = f"API error: {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        return message

    if isinstance(body, dict):
        return body.get("message") or body.get("error") or message
    return message


def unwrap_collection(payload: Any, envelope_keys: Sequence[str] = ("data",)) -> List[Dict[str, Any]]:
    """
    Backend list endpoints answer either with a bare array or with an
    envelope such as {"data": [...]}; both are accepted. An envelope with no
    list in it (e.g. {"data": null, "message": "No members found"}) is empty.
    """
    if isinstance(payload, list):
        return payload

    if isinstance(payload, dict):
        for key in envelope_keys:
            value = payload.get(key)
            if isinstance(value, list):
                return value
        return []

    raise BackendAPIError("Malformed payload from backend")


LOG_TIMESTAMP = re.compile(r"\[(.*?)\]")


def parse_log_lines(text: str) -> List[Dict[str, Any]]:
    entries = []
    for line in text.split("\n"):
        if not line.strip():
            continue

        match = LOG_TIMESTAMP.search(line)
        if "ERROR" in line:
            level = "ERROR"
        elif "WARN" in line:
            level = "WARN"
        elif "INFO" in line:
            level = "INFO"
        else:
            level = None

        entries.append({
            "message": line,
            "raw": line,
            "timestamp": match.group(1) if match else "",
            "level": level,
        })
    return entries


# =====================================================
# CLIENT
# =====================================================

class BackendAPIClient:
    def __init__(
        self,
        token: Optional[str],
        base_url: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        self.token = token
        self.base_url = (base_url or settings.BACKEND_API_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT

    def _is_backend(self, url: str) -> bool:
        return url == self.base_url or url.startswith(f"{self.base_url}/")

    def _headers(self, url: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/json; charset=utf-8"}
        # the bearer token never leaves the backend origin
        if self.token and self._is_backend(url):
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def _send(self, method: str, endpoint: str, body: Optional[Dict[str, Any]] = None) -> requests.Response:
        url = self._url(endpoint)

        try:
            response = requests.request(
                method,
                url,
                data=json.dumps(body) if body is not None else None,
                headers=self._headers(url),
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning(f"BACKEND UNREACHABLE | method={method} | url={url} | error={e}")
            raise BackendAPIError(f"Backend request failed: {e}")

        if not response.ok:
            message = _error_message(response)
            logger.warning(
                f"BACKEND ERROR | method={method} | url={url} | status={response.status_code}"
            )
            raise BackendAPIError(message, status_code=response.status_code)

        return response

    def request_json(self, method: str, endpoint: str, body: Optional[Dict[str, Any]] = None) -> Any:
        response = self._send(method, endpoint, body)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            raise BackendAPIError("Malformed payload from backend", status_code=response.status_code)

    def get_collection(self, endpoint: str, envelope_keys: Sequence[str] = ("data",)) -> List[Dict[str, Any]]:
        return unwrap_collection(self.request_json("GET", endpoint), envelope_keys)

    def get_record(self, endpoint: str, envelope_keys: Sequence[str] = ("data",)) -> Dict[str, Any]:
        payload = self.request_json("GET", endpoint)
        if isinstance(payload, dict):
            for key in envelope_keys:
                if isinstance(payload.get(key), dict):
                    return payload[key]
            return payload
        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            return payload[0]
        raise BackendAPIError("Record not found", status_code=404)

    def get_text(self, endpoint: str) -> str:
        return self._send("GET", endpoint).text

    def post(self, endpoint: str, body: Dict[str, Any]) -> Any:
        return self.request_json("POST", endpoint, body)

    def delete(self, endpoint: str) -> Any:
        return self.request_json("DELETE", endpoint)

    def get_log_entries(self, endpoint: str) -> List[Dict[str, Any]]:
        """Log endpoints answer with JSON on the backend and plain text on notify."""
        text = self.get_text(endpoint)
        try:
            payload = json.loads(text)
        except ValueError:
            return parse_log_lines(text)

        if isinstance(payload, str):
            return parse_log_lines(payload)
        if isinstance(payload, dict):
            # one structured entry
            return [payload]
        return unwrap_collection(payload)
