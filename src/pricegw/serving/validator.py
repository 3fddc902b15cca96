"""Inbound payload validation."""

from __future__ import annotations

import json
from typing import Optional, Union

from pricegw.serving.errors import ErrorKind, Ok, Result, fail


def validate_request(body: Optional[Union[str, bytes]], max_length: int) -> Result[str]:
    """Parse the raw body and return the trimmed ``specs`` string.

    An absent or empty body is treated as ``{}`` and therefore reported as
    missing specs rather than invalid JSON.
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return fail(ErrorKind.INVALID_JSON)
    try:
        payload = json.loads(body or "{}")
    except ValueError:
        return fail(ErrorKind.INVALID_JSON)

    specs = payload.get("specs") if isinstance(payload, dict) else None
    if not isinstance(specs, str) or not specs.strip():
        return fail(ErrorKind.MISSING_SPECS)

    specs = specs.strip()
    if len(specs) > max_length:
        return fail(
            ErrorKind.SPECS_TOO_LONG,
            message=f"Product specifications must be at most {max_length} characters",
        )
    return Ok(specs)
