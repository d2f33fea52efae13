"""HTTP handlers for dashboard registrations."""

from __future__ import annotations

import json

from werkzeug.wrappers import Request, Response

from countrydash import registration_service, repository
from countrydash.config import (
    MSG_DASHBOARD_NOT_FOUND,
    MSG_DELETE_CONFIG_FAIL,
    MSG_INVALID_JSON,
    MSG_INVALID_REQUEST_BODY,
    MSG_PATCH_CONFIG_FAIL,
    MSG_REGISTER_DASHBOARD_FAIL,
    MSG_RETRIEVE_CONFIGS_FAIL,
    MSG_UPDATE_CONFIG_FAIL,
)
from countrydash.registration_service import RegistrationError
from countrydash.replies import enforce_method, error_response, json_response
from countrydash.store import StoreError


def _body(request: Request) -> bytes | None:
    try:
        return request.get_data()
    except OSError:
        return None


def handle_register_dashboard(request: Request) -> Response:
    """POST: register a new dashboard configuration."""
    refused = enforce_method(request, "POST")
    if refused is not None:
        return refused
    body = _body(request)
    if body is None:
        return error_response(MSG_INVALID_REQUEST_BODY, 400)
    try:
        result = registration_service.register_dashboard_config(body)
    except RegistrationError as exc:
        return error_response(MSG_REGISTER_DASHBOARD_FAIL + str(exc), 400)
    return json_response(result, 201)


def get_registration(request: Request, dashboard_id: str) -> Response:
    """GET: one dashboard configuration."""
    try:
        config = repository.get_dashboard_config(dashboard_id)
    except (StoreError, ValueError) as exc:
        return error_response(f"{MSG_DASHBOARD_NOT_FOUND}: {exc}", 404)
    return json_response(config, 200)


def get_all_registrations(request: Request) -> Response:
    """GET: every dashboard configuration, as a JSON array."""
    try:
        configs = repository.get_all_dashboard_configs()
    except (StoreError, ValueError) as exc:
        return error_response(MSG_RETRIEVE_CONFIGS_FAIL + str(exc), 500)
    return json_response(configs, 200)


def update_dashboard_registration(request: Request, dashboard_id: str) -> Response:
    """PUT: replace a dashboard configuration."""
    refused = enforce_method(request, "PUT")
    if refused is not None:
        return refused
    body = _body(request)
    if body is None:
        return error_response(MSG_INVALID_REQUEST_BODY, 400)
    try:
        parsed = json.loads(body)
    except ValueError as exc:
        return error_response(MSG_INVALID_JSON + str(exc), 400)
    if not isinstance(parsed, dict):
        return error_response(MSG_INVALID_JSON + "expected a JSON object", 400)
    try:
        result = registration_service.update_dashboard_config(dashboard_id, body)
    except RegistrationError as exc:
        return error_response(MSG_UPDATE_CONFIG_FAIL + str(exc), 500)
    return json_response(result, 200)


def head_check_dashboard(request: Request, dashboard_id: str) -> Response:
    """HEAD: 200 if the configuration exists, 404 otherwise."""
    refused = enforce_method(request, "HEAD")
    if refused is not None:
        return refused
    try:
        repository.get_dashboard_config(dashboard_id)
    except (StoreError, ValueError):
        return error_response(MSG_DASHBOARD_NOT_FOUND, 404)
    return Response(status=200)


def patch_dashboard_registration(request: Request, dashboard_id: str) -> Response:
    """PATCH: partially update a dashboard configuration."""
    refused = enforce_method(request, "PATCH")
    if refused is not None:
        return refused
    body = _body(request)
    if body is None:
        return error_response(MSG_INVALID_REQUEST_BODY, 400)
    try:
        patch = json.loads(body)
    except ValueError as exc:
        return error_response(MSG_INVALID_JSON + str(exc), 400)
    if patch is None:
        patch = {}
    if not isinstance(patch, dict):
        return error_response(MSG_INVALID_JSON + "expected a JSON object", 400)
    try:
        result = registration_service.patch_dashboard_config(dashboard_id, patch)
    except RegistrationError as exc:
        return error_response(MSG_PATCH_CONFIG_FAIL + str(exc), 500)
    return json_response(result, 200)


def delete_dashboard_registration(request: Request, dashboard_id: str) -> Response:
    """DELETE: remove a dashboard configuration."""
    refused = enforce_method(request, "DELETE")
    if refused is not None:
        return refused
    try:
        registration_service.delete_registration(dashboard_id)
    except RegistrationError as exc:
        return error_response(MSG_DELETE_CONFIG_FAIL + str(exc), 500)
    return Response(status=204)