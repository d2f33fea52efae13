import json

import pytest
from werkzeug.test import EnvironBuilder

from countrydash import repository
from countrydash.config import MSG_MISSING_WEBHOOK_FIELDS
from countrydash.notification_handlers import (
    get_all_webhooks,
    get_webhook,
    handle_delete_webhook,
    register_webhook,
)
from countrydash.store import DocumentStore, StoreError, set_client


@pytest.fixture(autouse=True)
def memory_store():
    store = DocumentStore()
    set_client(store)
    yield store
    set_client(None)


def _request(method, path="/dashboard/v1/notifications", body=None):
    return EnvironBuilder(
        method=method, path=path, data=body, content_type="application/json"
    ).get_request()


def _register(payload):
    response = register_webhook(_request("POST", body=json.dumps(payload)))
    return response, json.loads(response.get_data(as_text=True))


def test_register_webhook_success_normalises_fields():
    response, data = _register({"url": "http://example.com", "event": "invoke", "country": "no"})
    assert response.status_code == 200
    assert '"id"' in response.get_data(as_text=True)
    stored = repository.get_webhook(data["id"])
    assert stored.event == "INVOKE"
    assert stored.country == "NO"
    assert stored.url == "http://example.com"


def test_register_webhook_invalid_json():
    response = register_webhook(_request("POST", body="invalid-json"))
    assert response.status_code == 400


def test_register_webhook_missing_fields():
    response = register_webhook(
        _request("POST", body='{"url": "", "event": "", "country": "NO"}')
    )
    assert response.status_code == 400
    assert json.loads(response.get_data(as_text=True))["error"] == MSG_MISSING_WEBHOOK_FIELDS


def test_register_webhook_unsupported_event():
    response = register_webhook(
        _request("POST", body='{"url": "http://example.com", "event": "unknown", "country": "NO"}')
    )
    assert response.status_code == 400
    assert "UNKNOWN" in json.loads(response.get_data(as_text=True))["error"]


def test_register_webhook_wrong_method():
    response = register_webhook(_request("GET"))
    assert response.status_code == 405


def test_delete_webhook_success_removes_it():
    _, data = _register({"url": "http://example.com", "event": "DELETE", "country": "NO"})
    webhook_id = data["id"]
    response = handle_delete_webhook(
        _request("DELETE", "/dashboard/v1/notifications/" + webhook_id), webhook_id
    )
    assert response.status_code == 204
    with pytest.raises(StoreError):
        repository.get_webhook(webhook_id)


def test_delete_unknown_webhook_is_no_content():
    response = handle_delete_webhook(
        _request("DELETE", "/dashboard/v1/notifications/test-id"), "test-id"
    )
    assert response.status_code == 204


def test_delete_webhook_missing_id():
    response = handle_delete_webhook(_request("DELETE", "/dashboard/v1/notifications/"), "")
    assert response.status_code == 400


def test_get_all_webhooks_returns_array():
    response = get_all_webhooks(_request("GET"))
    assert response.status_code == 200
    assert "[" in response.get_data(as_text=True)
    assert json.loads(response.get_data(as_text=True)) == []


def test_get_all_webhooks_lists_registered():
    _register({"url": "http://example.com", "event": "INVOKE", "country": "NO"})
    response = get_all_webhooks(_request("GET"))
    hooks = json.loads(response.get_data(as_text=True))
    assert len(hooks) == 1
    assert hooks[0]["url"] == "http://example.com"


def test_get_webhook_success():
    _, data = _register({"url": "http://example.com", "event": "INVOKE", "country": "NO"})
    webhook_id = data["id"]
    response = get_webhook(_request("GET", "/dashboard/v1/notifications/" + webhook_id), webhook_id)
    assert response.status_code == 200
    assert '"url"' in response.get_data(as_text=True)


def test_get_webhook_missing_id():
    response = get_webhook(_request("GET", "/dashboard/v1/notifications/"), "")
    assert response.status_code == 400


def test_get_webhook_unknown_id():
    response = get_webhook(_request("GET", "/dashboard/v1/notifications/nope"), "nope")
    assert response.status_code == 404