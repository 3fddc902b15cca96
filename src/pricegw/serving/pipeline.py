"""Single-pass request pipeline: route, validate, prompt, invoke, sanitize."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, Union

from pricegw.monitoring.metrics import observe_request
from pricegw.serving.errors import Err, ErrorKind, Failure, Result
from pricegw.serving.prompt import build_generation_request
from pricegw.serving.sanitizer import sanitize_completion
from pricegw.serving.validator import validate_request
from pricegw.utils.config import GatewayConfig
from pricegw.utils.logging import get_logger
from pricegw.utils.time import utc_timestamp

LOG = get_logger(__name__)

ALLOWED_METHODS = ["POST", "OPTIONS"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Content-Type": "application/json",
}


class CompletionClient(Protocol):
    def generate(self, payload: Dict[str, Any]) -> Result[str]: ...


@dataclass
class GatewayResponse:
    status_code: int
    body: Dict[str, Any]
    headers: Dict[str, str] = field(default_factory=lambda: dict(CORS_HEADERS))


def _failed(method: str, failure: Failure) -> GatewayResponse:
    response = GatewayResponse(failure.status_code, failure.envelope())
    observe_request(method, response.status_code, failure.kind.code)
    log = LOG.warning if response.status_code < 500 else LOG.error
    log(
        "Request failed",
        extra={"status": response.status_code, "code": failure.kind.code, "details": failure.details},
    )
    return response


def handle_request(
    method: str,
    body: Optional[Union[str, bytes]],
    config: GatewayConfig,
    client: CompletionClient,
    now: Callable[[], str] = utc_timestamp,
) -> GatewayResponse:
    """Serve one prediction request; never raises."""
    method = (method or "").upper()
    try:
        return _dispatch(method, body, config, client, now)
    except Exception:
        LOG.exception("Unhandled error while serving prediction")
        return _failed(method, Failure(ErrorKind.INTERNAL_ERROR))


def _dispatch(
    method: str,
    body: Optional[Union[str, bytes]],
    config: GatewayConfig,
    client: CompletionClient,
    now: Callable[[], str],
) -> GatewayResponse:
    if method == "OPTIONS":
        observe_request(method, 200)
        return GatewayResponse(200, {"message": "CORS preflight"})
    if method != "POST":
        return _failed(method, Failure(ErrorKind.METHOD_NOT_ALLOWED, allowed_methods=ALLOWED_METHODS))

    validated = validate_request(body, config.validation.max_specs_length)
    if isinstance(validated, Err):
        return _failed(method, validated.failure)

    payload = build_generation_request(validated.value, config.upstream)

    generated = client.generate(payload)
    if isinstance(generated, Err):
        return _failed(method, generated.failure)

    sanitized = sanitize_completion(generated.value, now=now)
    if isinstance(sanitized, Err):
        return _failed(method, sanitized.failure)

    result = sanitized.value
    observe_request(method, 200)
    LOG.info("Successful prediction", extra={"product": result.get("product")})
    return GatewayResponse(200, result)
