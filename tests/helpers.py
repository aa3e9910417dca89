import json
from typing import Any

import requests


def make_response(payload: Any = None, status_code: int = 200, text: str = None) -> requests.Response:
    """Build a real requests.Response so `.ok`, `.json()` and `.text` behave."""
    response = requests.Response()
    response.status_code = status_code
    response.encoding = "utf-8"
    if text is not None:
        response._content = text.encode("utf-8")
    elif payload is not None:
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = b""
    return response
