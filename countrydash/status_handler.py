"""HTTP handler reporting the health of the service."""

from __future__ import annotations

from werkzeug.wrappers import Request, Response

from countrydash import status_service
from countrydash.replies import enforce_method, json_response


def handle_service_status(request: Request) -> Response:
    """GET: API availability, store health, webhook count, version and uptime."""
    refused = enforce_method(request, "GET")
    if refused is not None:
        return refused
    return json_response(status_service.get_system_status(), 200)