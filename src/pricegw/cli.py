"""Price prediction gateway command line interface."""

from __future__ import annotations

import json
import os
import subprocess
import sys
from typing import Optional

import typer

from pricegw.serving.client import GeminiClient
from pricegw.serving.pipeline import handle_request
from pricegw.utils.config import load_gateway_config
from pricegw.utils.logging import configure_logging, get_logger

configure_logging()
LOG = get_logger(__name__)

app = typer.Typer(add_completion=False)

ConfigOption = typer.Option(None, "--config", help="Path to gateway YAML config")


def run(cmd: list[str]) -> None:
    LOG.info("Running command", extra={"cmd": " ".join(cmd)})
    subprocess.run(cmd, check=True)


@app.command()
def predict(
    specs: str = typer.Argument(..., help="Free-text product description"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Run one prediction through the pipeline and print the JSON body."""
    cfg = load_gateway_config(config)
    response = handle_request("POST", json.dumps({"specs": specs}), cfg, GeminiClient(cfg.upstream))
    typer.echo(json.dumps(response.body, indent=2, ensure_ascii=False))
    if response.status_code != 200:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Bind port"),
    config: Optional[str] = ConfigOption,
) -> None:
    """Serve the HTTP gateway with uvicorn."""
    import uvicorn

    cfg = load_gateway_config(config)
    if config:
        os.environ["GATEWAY_CONFIG"] = config
    uvicorn.run(
        "pricegw.serving.gateway:app",
        host=host or cfg.server.host,
        port=port or cfg.server.port,
    )


@app.command("show-config")
def show_config(config: Optional[str] = ConfigOption) -> None:
    """Print the resolved configuration without secrets."""
    cfg = load_gateway_config(config)
    typer.echo(json.dumps(cfg.redacted(), indent=2))


@app.command()
def loadgen(
    rps: int = typer.Option(2, help="Requests per second"),
    duration: int = typer.Option(30, help="Duration in seconds"),
    gateway_url: str = typer.Option("http://localhost:8888"),
) -> None:
    cmd = [
        sys.executable,
        "scripts/send_load.py",
        "--rps",
        str(rps),
        "--duration",
        str(duration),
        "--gateway",
        gateway_url,
    ]
    run(cmd)


if __name__ == "__main__":
    app()
