"""Delivery of webhook notifications and removal of webhooks."""

from __future__ import annotations

import json
import logging

import requests

from countrydash import repository
from countrydash.config import (
    CONTENT_TYPE_JSON,
    ERR_FETCH_WEBHOOKS,
    ERR_MARSHAL_WEBHOOK,
    ERR_SEND_WEBHOOK,
    HEADER_CONTENT_TYPE,
    MSG_FOUND_WEBHOOKS,
    MSG_SENDING_WEBHOOK,
    MSG_WEBHOOK_STATUS,
)
from countrydash.store import StoreError
from countrydash.util import current_timestamp

logger = logging.getLogger(__name__)

WEBHOOK_TIMEOUT = 10.0


def trigger_webhooks(event: str, country: str) -> int:
    """POST a notification to every webhook for ``event`` and ``country``.

    Returns the number of webhooks that answered.
    """
    event = str(event)
    try:
        hooks = repository.get_matching_webhooks(event, country)
    except StoreError as exc:
        logger.error(ERR_FETCH_WEBHOOKS.format(exc))
        return 0

    logger.info(MSG_FOUND_WEBHOOKS.format(len(hooks), event, country))

    answered = 0
    for hook in hooks:
        payload = {"id": hook.id, "country": country, "event": event, "time": current_timestamp()}
        try:
            body = json.dumps(payload).encode("utf-8")
        except (TypeError, ValueError) as exc:
            logger.error(ERR_MARSHAL_WEBHOOK.format(hook.id, exc))
            continue

        logger.info(MSG_SENDING_WEBHOOK.format(hook.url))
        try:
            response = requests.post(
                hook.url,
                data=body,
                headers={HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON},
                timeout=WEBHOOK_TIMEOUT,
            )
        except requests.RequestException as exc:
            logger.error(ERR_SEND_WEBHOOK.format(hook.id, exc))
            continue
        with response:
            logger.info(
                MSG_WEBHOOK_STATUS.format(hook.id, f"{response.status_code} {response.reason}")
            )
        answered += 1
    return answered


def delete_webhook(webhook_id: str) -> None:
    """Remove the webhook with the given ID."""
    repository.delete_webhook(webhook_id)