"""Client for the Gemini ``generateContent`` REST endpoint."""

from __future__ import annotations

import time
from typing import Any, Dict, Optional

import requests

from pricegw.monitoring.metrics import observe_upstream
from pricegw.serving.errors import ErrorKind, Ok, Result, fail
from pricegw.utils.config import UpstreamConfig
from pricegw.utils.logging import get_logger

LOG = get_logger(__name__)

UPSTREAM_MESSAGES = {
    429: "Too many requests to the AI service. Please try again in a moment.",
    403: "Access to the AI service is restricted. Please contact the site administrator.",
}
UNAVAILABLE_MESSAGE = ErrorKind.UPSTREAM_ERROR.default_message
TRANSPORT_FAILURE_STATUS = 503


class GeminiClient:
    def __init__(self, cfg: UpstreamConfig) -> None:
        self.cfg = cfg

    def generate(self, payload: Dict[str, Any]) -> Result[str]:
        api_key = self.cfg.api_key()
        if api_key is None:
            LOG.error("AI service credential is not set", extra={"env_var": self.cfg.api_key_env})
            return fail(ErrorKind.CONFIGURATION_ERROR)

        start = time.perf_counter()
        try:
            resp = requests.post(
                self.cfg.endpoint(),
                json=payload,
                headers={"Content-Type": "application/json", "x-goog-api-key": api_key},
                timeout=self.cfg.timeout_seconds,
            )
        except requests.RequestException as exc:
            observe_upstream(time.perf_counter() - start, "transport_error")
            LOG.error("AI service request failed", extra={"error_type": type(exc).__name__})
            return fail(
                ErrorKind.UPSTREAM_ERROR,
                message=UNAVAILABLE_MESSAGE,
                status=TRANSPORT_FAILURE_STATUS,
            )
        latency = time.perf_counter() - start
        observe_upstream(latency, str(resp.status_code))
        LOG.info(
            "AI service responded",
            extra={"status": resp.status_code, "latency_ms": round(latency * 1000.0, 1)},
        )

        if not resp.ok:
            return fail(
                ErrorKind.UPSTREAM_ERROR,
                message=UPSTREAM_MESSAGES.get(resp.status_code, UNAVAILABLE_MESSAGE),
                details=f"HTTP {resp.status_code}",
                status=resp.status_code,
            )

        text = extract_text(resp)
        if not text:
            LOG.error("AI service returned no generated text")
            return fail(ErrorKind.EMPTY_UPSTREAM_RESPONSE)
        return Ok(text)


def extract_text(resp: requests.Response) -> Optional[str]:
    """Join the text parts of the first candidate, or ``None`` when there are none."""
    try:
        data = resp.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return None
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return None
    text = "".join(p["text"] for p in parts if isinstance(p, dict) and isinstance(p.get("text"), str))
    return text if text.strip() else None
