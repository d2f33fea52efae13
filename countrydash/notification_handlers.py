"""HTTP handlers for registering, listing and removing webhooks."""

from __future__ import annotations

import json

from werkzeug.wrappers import Request, Response

from countrydash import notification_service, repository
from countrydash.config import (
    MSG_INVALID_REQUEST_BODY,
    MSG_MISSING_WEBHOOK_FIELDS,
    MSG_MISSING_WEBHOOK_ID,
    MSG_UNSUPPORTED_EVENT_TYPE,
    MSG_WEBHOOK_DELETE_FAIL,
    MSG_WEBHOOK_FETCH_FAIL,
    MSG_WEBHOOK_NOT_FOUND,
    MSG_WEBHOOK_SAVE_FAIL,
    is_allowed_event,
)
from countrydash.models import Webhook
from countrydash.replies import enforce_method, error_response, id_response, json_response
from countrydash.store import StoreError


def _decode_webhook(request: Request) -> Webhook | None:
    try:
        data = json.loads(request.get_data())
    except (OSError, ValueError):
        return None
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return None
    try:
        return Webhook.from_dict(data)
    except (ValueError, TypeError):
        return None


def register_webhook(request: Request) -> Response:
    """POST: validate and store a new webhook, answering with its ID."""
    refused = enforce_method(request, "POST")
    if refused is not None:
        return refused

    webhook = _decode_webhook(request)
    if webhook is None:
        return error_response(MSG_INVALID_REQUEST_BODY, 400)

    if not webhook.url or not webhook.event:
        return error_response(MSG_MISSING_WEBHOOK_FIELDS, 400)

    webhook.event = webhook.event.upper()
    webhook.country = webhook.country.upper()

    if not is_allowed_event(webhook.event):
        return error_response(MSG_UNSUPPORTED_EVENT_TYPE + webhook.event, 400)

    try:
        webhook_id = repository.save_webhook(webhook)
    except StoreError:
        return error_response(MSG_WEBHOOK_SAVE_FAIL, 500)
    return id_response(webhook_id, 200)


def handle_delete_webhook(request: Request, webhook_id: str) -> Response:
    """DELETE: remove the webhook with the given ID."""
    if not webhook_id:
        return error_response(MSG_MISSING_WEBHOOK_ID, 400)
    try:
        notification_service.delete_webhook(webhook_id)
    except StoreError as exc:
        return error_response(MSG_WEBHOOK_DELETE_FAIL + str(exc), 500)
    return Response(status=204)


def get_all_webhooks(request: Request) -> Response:
    """GET: every registered webhook, as a JSON array."""
    try:
        webhooks = repository.get_all_webhooks()
    except StoreError as exc:
        return error_response(MSG_WEBHOOK_FETCH_FAIL + str(exc), 500)
    return json_response(webhooks, 200)


def get_webhook(request: Request, webhook_id: str) -> Response:
    """GET: one webhook by ID."""
    if not webhook_id:
        return error_response(MSG_MISSING_WEBHOOK_ID, 400)
    try:
        webhook = repository.get_webhook(webhook_id)
    except (StoreError, ValueError) as exc:
        return error_response(MSG_WEBHOOK_NOT_FOUND + str(exc), 404)
    return json_response(webhook, 200)