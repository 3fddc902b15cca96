"""Serverless entry point for platforms that invoke a handler per HTTP event."""

from __future__ import annotations

import base64
import json
from functools import lru_cache
from typing import Any, Dict, Optional

from pricegw.serving.client import GeminiClient
from pricegw.serving.pipeline import CompletionClient, handle_request
from pricegw.utils.config import GatewayConfig, load_gateway_config
from pricegw.utils.logging import configure_logging, get_logger

configure_logging()
LOG = get_logger(__name__)


@lru_cache(maxsize=1)
def _config() -> GatewayConfig:
    return load_gateway_config()


def _event_body(event: Dict[str, Any]) -> Optional[str | bytes]:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except ValueError:
            LOG.warning("Event body is not valid base64")
            return body
    return body


def handler(event: Dict[str, Any], context: Any = None, client: Optional[CompletionClient] = None) -> Dict[str, Any]:
    """Translate a platform HTTP event into a gateway response event."""
    cfg = _config()
    response = handle_request(
        event.get("httpMethod", ""),
        _event_body(event),
        cfg,
        client or GeminiClient(cfg.upstream),
    )
    return {
        "statusCode": response.status_code,
        "headers": response.headers,
        "body": json.dumps(response.body),
    }
