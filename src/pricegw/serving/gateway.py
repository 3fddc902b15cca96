"""Prediction gateway in front of the AI service."""

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from pricegw.monitoring.metrics import render_metrics
from pricegw.serving.client import GeminiClient
from pricegw.serving.pipeline import handle_request
from pricegw.serving.schemas import ErrorEnvelope, PredictionRequest, PredictionResult
from pricegw.utils.config import GatewayConfig, load_gateway_config
from pricegw.utils.logging import configure_logging, get_logger

configure_logging()
LOG = get_logger(__name__)

app = FastAPI(title="Price Prediction Gateway", version="0.1.0")
gateway_cfg: GatewayConfig = load_gateway_config()
ai_client = GeminiClient(gateway_cfg.upstream)


@app.get("/healthz")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.api_route(
    "/predict",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": PredictionRequest.model_json_schema()}}
        }
    },
    responses={
        200: {"model": PredictionResult},
        400: {"model": ErrorEnvelope},
        405: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
    },
)
async def predict(request: Request) -> JSONResponse:
    body = await request.body()
    response = await run_in_threadpool(handle_request, request.method, body, gateway_cfg, ai_client)
    return JSONResponse(content=response.body, status_code=response.status_code, headers=response.headers)


@app.get("/metrics")
def metrics() -> PlainTextResponse:
    data, content_type = render_metrics()
    return PlainTextResponse(content=data.decode(), media_type=content_type)
