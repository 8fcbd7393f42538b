"""Server CLI commands."""

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel

from user_service.runtime.context import get_config

console = Console()


def serve(
    host: str | None = typer.Option(None, help="Host to bind to (defaults to app.host)"),
    port: int | None = typer.Option(None, help="Port to bind to (defaults to app.port)"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """Start the HTTP API with uvicorn."""
    app_config = get_config().app
    host = host or app_config.host
    port = port or app_config.port

    console.print(
        Panel.fit(
            f"[bold green]Starting user service on http://{host}:{port}[/bold green]",
            border_style="green",
        )
    )

    uvicorn.run(
        "user_service.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )
