"""Typed configuration loading for the gateway."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = "configs/gateway.yaml"


class UpstreamConfig(BaseModel):
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.0-flash"
    api_key_env: str = "GEMINI_API_KEY"
    timeout_seconds: Optional[float] = None
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_output_tokens: int = Field(default=2048, gt=0)
    search_grounding: bool = False

    def api_key(self) -> Optional[str]:
        """Read the credential at call time so it never lives in the config dump."""
        value = os.environ.get(self.api_key_env, "").strip()
        return value or None

    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/models/{self.model}:generateContent"


class ValidationConfig(BaseModel):
    max_specs_length: int = Field(default=2000, gt=0)


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8888


class GatewayConfig(BaseModel):
    name: str = "price-prediction-gateway"
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    def redacted(self) -> Dict[str, Any]:
        data = self.model_dump()
        data["upstream"]["api_key_set"] = self.upstream.api_key() is not None
        return data


def load_yaml(path: str | Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_gateway_config(path: Optional[str] = None) -> GatewayConfig:
    explicit = path or os.environ.get("GATEWAY_CONFIG")
    config_path = explicit or DEFAULT_CONFIG_PATH
    if not explicit and not Path(config_path).exists():
        return GatewayConfig()
    data = load_yaml(config_path)
    if "gateway" not in data:
        raise ValueError(f"Invalid config file, expected 'gateway' root at {config_path}")
    return GatewayConfig(**(data["gateway"] or {}))
