"""HTTP API server command."""

import click

from .base import echo_warning, ensure_initialized, get_settings


@click.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool):
    """Serve the fastwell JSON API with uvicorn.

    Examples:

        fastwell serve
        fastwell serve --host 0.0.0.0 --port 9000
    """
    ensure_initialized(ctx)
    settings = get_settings(ctx)

    import uvicorn

    from ..web import create_app

    base_url = f"http://{host}:{port}"
    click.echo()
    click.echo(click.style("fastwell API", fg="green", bold=True))
    click.echo(f"  API docs: {base_url}/docs")
    click.echo(f"  Health:   {base_url}/health")
    click.echo(f"  Data:     {settings.db_path}")
    if not settings.gemini_api_key:
        echo_warning("GEMINI_API_KEY is not set; AI requests will finish with an error.")
    click.echo()

    # uvicorn only reloads from an import string; the factory then reads the environment
    target = "fastwell.web:create_app" if reload else create_app(settings)
    uvicorn.run(
        target,
        host=host,
        port=port,
        reload=reload,
        factory=reload,
        log_level=settings.log_level.lower(),
    )
