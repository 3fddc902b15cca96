"""Parsing and shape checks for the AI completion text."""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Dict

from pydantic import ValidationError

from pricegw.serving.errors import ErrorKind, Ok, Result, fail
from pricegw.serving.schemas import PriceRange
from pricegw.utils.time import utc_timestamp

RAW_EXCERPT_LIMIT = 200
REQUIRED_FIELDS = ("predicted_price_inr", "range_inr", "product")

_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL | re.IGNORECASE)


def strip_fence(text: str) -> str:
    text = text.strip()
    match = _FENCE.match(text)
    return match.group(1).strip() if match else text


def _is_non_negative(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value) and value >= 0


def sanitize_completion(text: str, now: Callable[[], str] = utc_timestamp) -> Result[Dict[str, Any]]:
    """Turn the generated text into the response body, or say why it is unusable."""
    try:
        result = json.loads(strip_fence(text))
    except ValueError as exc:
        return fail(
            ErrorKind.MALFORMED_AI_JSON,
            details=str(exc),
            raw_response=text[:RAW_EXCERPT_LIMIT],
        )
    if not isinstance(result, dict):
        return fail(
            ErrorKind.MALFORMED_AI_JSON,
            details=f"expected a JSON object, got {type(result).__name__}",
            raw_response=text[:RAW_EXCERPT_LIMIT],
        )

    if not result.get("last_updated"):
        result["last_updated"] = now()

    missing = [name for name in REQUIRED_FIELDS if name not in result]
    price_range = result.get("range_inr")
    if not missing and not (isinstance(price_range, dict) and "min" in price_range and "max" in price_range):
        missing.append("range_inr.min/max")
    if missing:
        return fail(ErrorKind.INCOMPLETE_AI_RESULT, details=f"missing: {', '.join(missing)}")

    prices = (result["predicted_price_inr"], price_range["min"], price_range["max"])
    if not all(_is_non_negative(p) for p in prices):
        return fail(ErrorKind.INVALID_PRICE_VALUE)
    try:
        PriceRange.model_validate(price_range)
    except ValidationError:
        return fail(ErrorKind.INVALID_PRICE_VALUE, details="range_inr.min exceeds range_inr.max")
    return Ok(result)
