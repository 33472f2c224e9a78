"""Command: inkwell serve - Run the API server."""

import typer


def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port to bind (defaults to the PORT setting)"
    ),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Inkwell API with uvicorn."""
    import uvicorn

    from inkwell.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "inkwell.main:create_app",
        factory=True,
        host=host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )
