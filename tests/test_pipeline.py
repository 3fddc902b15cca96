import json

import pytest

from conftest import FIXED_NOW, FakeClient, make_prediction
from pricegw.serving.errors import Err, ErrorKind, Failure, Ok
from pricegw.serving.pipeline import CORS_HEADERS, handle_request
from pricegw.serving.schemas import ErrorEnvelope
from pricegw.utils.config import GatewayConfig, ValidationConfig

VALID_BODY = json.dumps({"specs": "Apple iPhone 13, 128GB, 1 year old"})


def _now() -> str:
    return FIXED_NOW


def test_success_returns_result_with_timestamp(config, ok_client) -> None:
    response = handle_request("POST", VALID_BODY, config, ok_client, now=_now)
    assert response.status_code == 200
    assert response.body == {**make_prediction(), "last_updated": FIXED_NOW}
    assert response.headers == CORS_HEADERS
    assert len(ok_client.payloads) == 1
    assert "Apple iPhone 13, 128GB, 1 year old" in ok_client.payloads[0]["contents"][0]["parts"][0]["text"]


def test_options_is_preflight_regardless_of_body(config, ok_client) -> None:
    for body in (None, "", "{garbage", VALID_BODY):
        response = handle_request("OPTIONS", body, config, ok_client)
        assert response.status_code == 200
        assert response.headers == CORS_HEADERS
    assert ok_client.payloads == []


@pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "HEAD", "TRACE", ""])
def test_other_methods_are_not_allowed(config, ok_client, method) -> None:
    response = handle_request(method, VALID_BODY, config, ok_client)
    assert response.status_code == 405
    assert response.body["code"] == "METHOD_NOT_ALLOWED"
    assert response.body["allowed_methods"] == ["POST", "OPTIONS"]
    assert response.headers == CORS_HEADERS
    assert ok_client.payloads == []


def test_method_is_case_insensitive(config, ok_client) -> None:
    assert handle_request("post", VALID_BODY, config, ok_client).status_code == 200
    assert handle_request("options", None, config, ok_client).status_code == 200


@pytest.mark.parametrize(
    "body, code",
    [
        ("{nope", "INVALID_JSON"),
        ('{"specs": "   "}', "MISSING_SPECS"),
        ('{"specs": 7}', "MISSING_SPECS"),
        ("{}", "MISSING_SPECS"),
        (json.dumps({"specs": "x" * 2001}), "SPECS_TOO_LONG"),
    ],
)
def test_bad_input_is_400_without_upstream_call(config, ok_client, body, code) -> None:
    response = handle_request("POST", body, config, ok_client)
    assert response.status_code == 400
    assert response.body["code"] == code
    assert "details" not in response.body
    assert response.headers == CORS_HEADERS
    assert ok_client.payloads == []


def test_configured_max_length_applies(ok_client) -> None:
    cfg = GatewayConfig(validation=ValidationConfig(max_specs_length=5))
    response = handle_request("POST", json.dumps({"specs": "abcdef"}), cfg, ok_client)
    assert response.body["code"] == "SPECS_TOO_LONG"


def test_upstream_failure_status_passes_through(config) -> None:
    failure = Failure(ErrorKind.UPSTREAM_ERROR, message="Too many requests to the AI service.", status=429)
    response = handle_request("POST", VALID_BODY, config, FakeClient(Err(failure)))
    assert response.status_code == 429
    assert "Too many requests" in response.body["error"]
    assert response.headers == CORS_HEADERS


def test_negative_price_is_invalid_price_value(config) -> None:
    client = FakeClient(Ok(json.dumps(make_prediction(predicted_price_inr=-100))))
    response = handle_request("POST", VALID_BODY, config, client)
    assert response.status_code == 500
    assert response.body["code"] == "INVALID_PRICE_VALUE"


def test_non_json_completion_has_short_excerpt(config) -> None:
    client = FakeClient(Ok("I think it costs about forty thousand rupees. " * 20))
    response = handle_request("POST", VALID_BODY, config, client)
    assert response.status_code == 500
    assert response.body["code"] == "MALFORMED_AI_JSON"
    assert 0 < len(response.body["raw_response"]) <= 200


def test_unexpected_exception_becomes_internal_error(config) -> None:
    class Exploding:
        def generate(self, payload):
            raise RuntimeError("secret internals")

    response = handle_request("POST", VALID_BODY, config, Exploding())
    assert response.status_code == 500
    assert response.body == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
    assert response.headers == CORS_HEADERS


def test_identical_inputs_give_identical_outputs(config) -> None:
    text = json.dumps(make_prediction())
    first = handle_request("POST", VALID_BODY, config, FakeClient(Ok(text)), now=_now)
    second = handle_request("POST", VALID_BODY, config, FakeClient(Ok(text)), now=_now)
    assert first == second


def test_response_headers_are_independent_copies(config, ok_client) -> None:
    response = handle_request("OPTIONS", None, config, ok_client)
    response.headers["X-Extra"] = "1"
    assert "X-Extra" not in CORS_HEADERS


@pytest.mark.parametrize(
    "method, body",
    [("GET", None), ("POST", "{bad"), ("POST", '{"specs": ""}')],
)
def test_error_bodies_match_envelope_schema(config, ok_client, method, body) -> None:
    response = handle_request(method, body, config, ok_client)
    envelope = ErrorEnvelope.model_validate(response.body)
    assert envelope.error
    assert envelope.code == response.body["code"]
