"""Helpers that build JSON HTTP responses and check requests."""

from __future__ import annotations

import json
from typing import Any

from werkzeug.wrappers import Request, Response

from countrydash.config import (
    CONTENT_TYPE_JSON,
    ERR_METHOD_NOT_ALLOWED,
    ERR_MISSING_PATH_ID,
    KEY_ERROR,
    KEY_ID,
)

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _jsonable(data: Any) -> Any:
    to_dict = getattr(data, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(data, dict):
        return {key: _jsonable(value) for key, value in data.items()}
    if isinstance(data, (list, tuple)):
        return [_jsonable(item) for item in data]
    return data


def _escape_html(text: str) -> str:
    # These characters only occur inside JSON strings, so replacing them is safe.
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def _respond(body: str, status: int) -> Response:
    return Response(body, status=status, content_type=CONTENT_TYPE_JSON)


def json_response(data: Any, status: int = 200) -> Response:
    """Pretty-printed JSON response; objects with ``to_dict`` are converted."""
    body = json.dumps(_jsonable(data), indent=2, ensure_ascii=False)
    return _respond(_escape_html(body), status)


def error_response(message: str, status: int) -> Response:
    """Pretty-printed ``{"error": message}`` response."""
    return json_response({KEY_ERROR: message}, status)


def id_response(identifier: str, status: int = 200) -> Response:
    """Compact ``{"id": identifier}`` response ending in a newline."""
    body = json.dumps({KEY_ID: identifier}, separators=(",", ":"), ensure_ascii=False)
    return _respond(_escape_html(body) + "\n", status)


def enforce_method(request: Request, expected: str) -> Response | None:
    """Return a 405 response if the request method is not ``expected``, else None."""
    if request.method != expected:
        return error_response(ERR_METHOD_NOT_ALLOWED, 405)
    return None


def extract_id_from_path(path: str, expected_parts: int) -> str:
    """Return the last path segment; raises ValueError if the path is too short."""
    parts = path.split("/")
    if len(parts) < expected_parts:
        raise ValueError(ERR_MISSING_PATH_ID)
    return parts[-1]