"""Serve mode: run the FastAPI report and event server."""

import sys

import typer
import uvicorn

from stockline.api import create_app
from stockline.config import API_PORT

from .shared import console, logger


def serve(
    port: int = typer.Option(API_PORT, "--port", "-p", help="Port for the HTTP server"),
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Bind host"),
) -> None:
    """Start the HTTP server for the reporting UI and production events."""
    logger.bind(command="serve", port=port).info("serve.start")
    app = create_app()
    console.print(f"[green]Starting server on http://{host}:{port}[/green]")
    console.print("[dim]Endpoints: GET /health, /batches, /health/global; POST /events/zone-completion[/dim]")
    try:
        uvicorn.run(app, host=host, port=port, log_level="info", timeout_graceful_shutdown=15)
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
        sys.exit(0)
