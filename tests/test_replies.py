import json

import pytest
from werkzeug.wrappers import Request

from countrydash.config import (
    CONTENT_TYPE_JSON,
    DASHBOARD_ID_PATH_INDEX,
    ERR_METHOD_NOT_ALLOWED,
    ERR_MISSING_PATH_ID,
)
from countrydash.models import Webhook
from countrydash.replies import (
    enforce_method,
    error_response,
    extract_id_from_path,
    id_response,
    json_response,
)


def test_json_response_is_indented():
    response = json_response({"a": 1})
    assert response.status_code == 200
    assert response.get_data() == b'{\n  "a": 1\n}'
    assert response.headers["Content-Type"] == CONTENT_TYPE_JSON


def test_json_response_custom_status_round_trip():
    data = {"items": [1, 2], "name": "Ørland"}
    response = json_response(data, 201)
    assert response.status_code == 201
    assert json.loads(response.get_data(as_text=True)) == data


def test_json_response_escapes_html():
    response = json_response({"k": "<a&b>"})
    text = response.get_data(as_text=True)
    assert "\\u003c" in text
    assert "<" not in text and "&" not in text
    assert json.loads(text) == {"k": "<a&b>"}


def test_json_response_converts_models():
    hooks = [Webhook(id="x1", url="http://example.com", event="INVOKE", country="NO")]
    response = json_response(hooks)
    assert json.loads(response.get_data()) == [hooks[0].to_dict()]


def test_json_response_none_is_null():
    assert json.loads(json_response(None).get_data()) is None


def test_error_response():
    response = error_response("oops", 400)
    assert response.status_code == 400
    assert json.loads(response.get_data()) == {"error": "oops"}
    assert response.headers["Content-Type"] == CONTENT_TYPE_JSON


def test_id_response_is_compact():
    response = id_response("abc", 200)
    assert response.status_code == 200
    assert response.get_data() == b'{"id":"abc"}\n'


def test_enforce_method_accepts_matching():
    request = Request.from_values(method="GET", path="/x")
    assert enforce_method(request, "GET") is None


def test_enforce_method_rejects_other():
    request = Request.from_values(method="POST", path="/x")
    response = enforce_method(request, "GET")
    assert response.status_code == 405
    assert json.loads(response.get_data()) == {"error": ERR_METHOD_NOT_ALLOWED}


def test_extract_id_from_path():
    assert extract_id_from_path("/dashboard/v1/dashboards/abc", DASHBOARD_ID_PATH_INDEX) == "abc"


def test_extract_id_from_short_path_raises():
    with pytest.raises(ValueError, match=ERR_MISSING_PATH_ID):
        extract_id_from_path("/dashboard/v1", DASHBOARD_ID_PATH_INDEX)


def test_extract_id_trailing_slash_gives_empty():
    assert extract_id_from_path("/dashboard/v1/dashboards/", DASHBOARD_ID_PATH_INDEX) == ""