"""Outbound generation request for the AI service."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from pricegw.utils.config import UpstreamConfig

SYSTEM_INSTRUCTION = """You are an expert Indian market price analyst.
Estimate the current fair market price in India, in INR, for the product the user describes.
Account for every factor that moves Indian prices:
- condition (new, refurbished, used, wear and defects)
- brand reputation and resale value
- demand and supply in the Indian market
- seasonality, festive sales and launch cycles
- import duties and GST
- currency movements against the INR
- regional price variance across Indian cities
Extract the key specifications you relied on, list anything unusual or contradictory in the
description as anomalies, and name the marketplaces or sources your estimate reflects.
Give a confidence between 0 and 1 and never return negative prices."""

USER_TEMPLATE = 'Predict the current market price in India for: "{specs}"'

GROUNDED_SUFFIX = """

Respond with ONLY a JSON object, no prose and no Markdown, matching this schema:
{schema}"""

SPECS_EXTRACTED_KEYS = (
    "brand",
    "model",
    "variant",
    "condition",
    "age",
    "storage",
    "memory",
    "color",
    "location",
)

_STRING = {"type": "STRING"}
_STRING_LIST = {"type": "ARRAY", "items": _STRING}

PREDICTION_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "predicted_price_inr": {"type": "NUMBER", "minimum": 0},
        "range_inr": {
            "type": "OBJECT",
            "properties": {
                "min": {"type": "NUMBER", "minimum": 0},
                "max": {"type": "NUMBER", "minimum": 0},
            },
            "required": ["min", "max"],
        },
        "confidence": {"type": "NUMBER", "minimum": 0, "maximum": 1},
        "product": _STRING,
        "category": _STRING,
        "specs_extracted": {
            "type": "OBJECT",
            "properties": {key: _STRING for key in SPECS_EXTRACTED_KEYS},
        },
        "explanation_bullets": {**_STRING_LIST, "minItems": 3, "maxItems": 8},
        "anomalies": _STRING_LIST,
        "market_sources": _STRING_LIST,
        "last_updated": {"type": "STRING", "format": "date-time"},
    },
    "required": [
        "predicted_price_inr",
        "range_inr",
        "confidence",
        "product",
        "category",
        "specs_extracted",
        "explanation_bullets",
        "anomalies",
        "market_sources",
    ],
    "propertyOrdering": [
        "predicted_price_inr",
        "range_inr",
        "confidence",
        "product",
        "category",
        "specs_extracted",
        "explanation_bullets",
        "anomalies",
        "market_sources",
        "last_updated",
    ],
}


def build_generation_request(specs: str, cfg: UpstreamConfig) -> Dict[str, Any]:
    """Build a ``generateContent`` payload for the given specs.

    With search grounding enabled the service refuses a response schema, so the
    schema travels inside the prompt text instead.
    """
    user_text = USER_TEMPLATE.format(specs=specs)
    generation_config: Dict[str, Any] = {
        "temperature": cfg.temperature,
        "maxOutputTokens": cfg.max_output_tokens,
    }
    tools: List[Dict[str, Any]] = []
    if cfg.search_grounding:
        user_text += GROUNDED_SUFFIX.format(schema=json.dumps(PREDICTION_SCHEMA, indent=2))
        tools.append({"google_search": {}})
    else:
        generation_config["responseMimeType"] = "application/json"
        generation_config["responseSchema"] = PREDICTION_SCHEMA

    payload: Dict[str, Any] = {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": [{"text": user_text}]}],
        "generationConfig": generation_config,
    }
    if tools:
        payload["tools"] = tools
    return payload
