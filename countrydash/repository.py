"""Storage of dashboard configurations and webhooks."""

from __future__ import annotations

import logging

from countrydash.config import DASHBOARD_COLLECTION, MSG_DASHBOARD_SAVED, WEBHOOK_COLLECTION
from countrydash.models import DashboardConfig, Webhook
from countrydash.store import StoreError, firestore_client

logger = logging.getLogger(__name__)


def _config_document(config: DashboardConfig) -> dict:
    data = config.to_dict()
    data.pop("id", None)
    return data


def save_dashboard_config(config: DashboardConfig) -> str:
    """Store a new dashboard configuration and return its generated ID."""
    ref = firestore_client().collection(DASHBOARD_COLLECTION).add(_config_document(config))
    logger.info(MSG_DASHBOARD_SAVED.format(ref.id))
    return ref.id


def get_dashboard_config(dashboard_id: str) -> DashboardConfig:
    """Return the configuration with the given ID; raises if it is missing."""
    snapshot = firestore_client().collection(DASHBOARD_COLLECTION).document(dashboard_id).get()
    config = DashboardConfig.from_dict(snapshot.to_dict())
    config.id = snapshot.id
    return config


def get_all_dashboard_configs() -> list[DashboardConfig]:
    """Return every stored dashboard configuration."""
    configs = []
    for snapshot in firestore_client().collection(DASHBOARD_COLLECTION).stream():
        config = DashboardConfig.from_dict(snapshot.to_dict())
        config.id = snapshot.id
        configs.append(config)
    return configs


def update_dashboard_config(config: DashboardConfig) -> None:
    """Overwrite the configuration stored under ``config.id``."""
    firestore_client().collection(DASHBOARD_COLLECTION).document(config.id).set(
        _config_document(config)
    )


def delete_dashboard_config(dashboard_id: str) -> None:
    firestore_client().collection(DASHBOARD_COLLECTION).document(dashboard_id).delete()


def ping_store() -> None:
    """Raise if the store cannot be reached."""
    firestore_client().collections()


def save_webhook(webhook: Webhook) -> str:
    """Store a new webhook and return its generated ID."""
    ref = firestore_client().collection(WEBHOOK_COLLECTION).add(webhook.to_document())
    return ref.id


def get_webhook(webhook_id: str) -> Webhook:
    """Return the webhook with the given ID; raises if it is missing."""
    snapshot = firestore_client().collection(WEBHOOK_COLLECTION).document(webhook_id).get()
    webhook = Webhook.from_dict(snapshot.to_dict())
    webhook.id = snapshot.id
    return webhook


def _decoded_webhooks(snapshots) -> list[Webhook]:
    hooks = []
    for snapshot in snapshots:
        try:
            hook = Webhook.from_dict(snapshot.to_dict())
        except ValueError:
            continue
        hook.id = snapshot.id
        hooks.append(hook)
    return hooks


def get_all_webhooks() -> list[Webhook]:
    """Return every webhook that can be decoded."""
    return _decoded_webhooks(firestore_client().collection(WEBHOOK_COLLECTION).stream())


def get_matching_webhooks(event: str, country: str) -> list[Webhook]:
    """Return the webhooks for ``event`` whose country is ``country`` or unrestricted."""
    query = firestore_client().collection(WEBHOOK_COLLECTION).where("event", "==", event)
    return [
        hook
        for hook in _decoded_webhooks(query.stream())
        if hook.country == country or hook.country == ""
    ]


def delete_webhook(webhook_id: str) -> None:
    firestore_client().collection(WEBHOOK_COLLECTION).document(webhook_id).delete()


def count_webhooks() -> int:
    """Number of stored webhooks, or 0 if the store cannot be read."""
    try:
        return sum(1 for _ in firestore_client().collection(WEBHOOK_COLLECTION).stream())
    except StoreError:
        return 0