import json
from typing import Any, Dict, List

import pytest
import requests

from pricegw.serving.errors import Ok, Result
from pricegw.utils.config import GatewayConfig

FIXED_NOW = "2026-01-15T10:30:00.000Z"


def make_prediction(**overrides: Any) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "predicted_price_inr": 42000,
        "range_inr": {"min": 38000, "max": 46000},
        "confidence": 0.78,
        "product": "Apple iPhone 13 128GB",
        "category": "Smartphones",
        "specs_extracted": {"brand": "Apple", "storage": "128GB", "condition": "used"},
        "explanation_bullets": [
            "Launch price has dropped after two newer models",
            "Battery health below 90% lowers resale value",
            "Strong demand for iPhones on Indian resale platforms",
        ],
        "anomalies": [],
        "market_sources": ["Cashify", "OLX India", "Amazon Renewed"],
    }
    result.update(overrides)
    return result


def gemini_envelope(text: str) -> Dict[str, Any]:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


def make_response(status: int, payload: Any = None, raw: bytes = b"") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = json.dumps(payload).encode() if payload is not None else raw
    resp.headers["Content-Type"] = "application/json"
    return resp


class FakeClient:
    """Completion client returning a canned result and recording payloads."""

    def __init__(self, result: Result[str]) -> None:
        self.result = result
        self.payloads: List[Dict[str, Any]] = []

    def generate(self, payload: Dict[str, Any]) -> Result[str]:
        self.payloads.append(payload)
        return self.result


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig()


@pytest.fixture
def ok_client() -> FakeClient:
    return FakeClient(Ok(json.dumps(make_prediction())))


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> str:
    key = "test-secret-key-123"
    monkeypatch.setenv("GEMINI_API_KEY", key)
    return key
