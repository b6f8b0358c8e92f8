"""Shared CLI utilities."""

import asyncio
import json
from functools import wraps

import click

from ..auth import AuthSession, Identity, IdentityProvider
from ..config import Settings
from ..db.store import DocumentStore


def async_command(f):
    """Decorator to run async Click commands."""

    @wraps(f)
    def wrapper(*args, **kwargs):
        return asyncio.run(f(*args, **kwargs))

    return wrapper


def get_settings(ctx: click.Context) -> Settings:
    """Settings attached to the root command context."""
    root = ctx.find_root()
    if root.obj is None:
        root.obj = Settings.from_env()
    return root.obj


def get_store(ctx: click.Context) -> DocumentStore:
    return DocumentStore(get_settings(ctx).db_path)


def ensure_initialized(ctx: click.Context) -> None:
    """Ensure the database is initialized."""
    if not get_settings(ctx).db_path.exists():
        click.echo(
            click.style("Error: ", fg="red")
            + "Project not initialized. Run 'fastwell init' first."
        )
        ctx.exit(1)


def save_session(settings: Settings, session: AuthSession) -> None:
    """Remember the signed-in token for later commands."""
    settings.session_file.parent.mkdir(parents=True, exist_ok=True)
    settings.session_file.write_text(
        json.dumps(
            {
                "token": session.token,
                "userId": session.identity.id,
                "email": session.identity.email,
                "expiresAt": session.expires_at.isoformat(),
            },
            indent=2,
        )
    )


def load_token(settings: Settings) -> str | None:
    if not settings.session_file.exists():
        return None
    try:
        return json.loads(settings.session_file.read_text()).get("token")
    except json.JSONDecodeError:
        return None


def clear_session(settings: Settings) -> None:
    settings.session_file.unlink(missing_ok=True)


async def require_identity(ctx: click.Context, store: DocumentStore) -> Identity:
    """Resolve the saved session to a user, exiting when signed out."""
    settings = get_settings(ctx)
    identity = await IdentityProvider.from_settings(store, settings).current_user(
        load_token(settings)
    )
    if identity is None:
        echo_error("Not signed in. Run 'fastwell auth login' first.")
        ctx.exit(1)
    return identity


def echo_success(message: str) -> None:
    """Print a success message."""
    click.echo(click.style("[OK] ", fg="green") + message)


def echo_error(message: str) -> None:
    """Print an error message."""
    click.echo(click.style("[ERROR] ", fg="red") + message)


def echo_info(message: str) -> None:
    """Print an info message."""
    click.echo(click.style("[INFO] ", fg="blue") + message)


def echo_warning(message: str) -> None:
    """Print a warning message."""
    click.echo(click.style("[WARN] ", fg="yellow") + message)


def format_duration(seconds: float) -> str:
    """Render seconds as H:MM:SS."""
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_table(headers: list[str], rows: list[list[str]], padding: int = 2) -> str:
    """Format data as a simple table."""
    if not rows:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["".join(h.ljust(widths[i] + padding) for i, h in enumerate(headers))]
    lines.append("".join("-" * w + " " * padding for w in widths))
    for row in rows:
        lines.append("".join(str(cell).ljust(widths[i] + padding) for i, cell in enumerate(row)))

    return "\n".join(line.rstrip() for line in lines)
