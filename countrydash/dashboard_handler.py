"""HTTP handler that returns a populated dashboard."""

from __future__ import annotations

from collections.abc import Callable

from werkzeug.wrappers import Request, Response

from countrydash.config import (
    DASHBOARD_ID_PATH_INDEX,
    ERR_MSG_DASHBOARD_FETCH_FAILED,
    ERR_MSG_MISSING_OR_INVALID_DASHBOARD_ID,
)
from countrydash.dashboard_service import DashboardService
from countrydash.replies import enforce_method, error_response, extract_id_from_path, json_response


def make_dashboard_handler(service: DashboardService) -> Callable[[Request], Response]:
    """Handler for GET /dashboard/v1/dashboards/{id} backed by ``service``."""

    def handle(request: Request) -> Response:
        refused = enforce_method(request, "GET")
        if refused is not None:
            return refused
        try:
            dashboard_id = extract_id_from_path(request.path, DASHBOARD_ID_PATH_INDEX)
        except ValueError:
            dashboard_id = ""
        if not dashboard_id:
            return error_response(ERR_MSG_MISSING_OR_INVALID_DASHBOARD_ID, 400)
        try:
            dashboard = service.get_populated_dashboard(dashboard_id)
        except Exception as exc:
            return error_response(ERR_MSG_DASHBOARD_FETCH_FAILED + str(exc), 500)
        return json_response(dashboard, 200)

    return handle