"""Account commands."""

import click

from ..auth import IdentityProvider
from ..db.repositories import UserProfileRepository
from ..exceptions import AuthenticationError, InvalidInputError
from .base import (
    async_command,
    clear_session,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    get_settings,
    get_store,
    load_token,
    require_identity,
    save_session,
)


@click.group()
def auth():
    """Sign up, sign in and sign out."""
    pass


@auth.command("signup")
@click.option("--email", prompt=True, help="Account email")
@click.password_option(help="Account password (min 6 characters)")
@click.option("--name", "display_name", default=None, help="Display name")
@click.pass_context
@async_command
async def signup(ctx: click.Context, email: str, password: str, display_name: str | None):
    """Create an account and sign in."""
    ensure_initialized(ctx)
    settings = get_settings(ctx)
    store = get_store(ctx)

    try:
        session = await IdentityProvider.from_settings(store, settings).sign_up(
            email, password, display_name
        )
    except InvalidInputError as e:
        echo_error(str(e))
        ctx.exit(1)

    identity = session.identity
    await UserProfileRepository(store).ensure_profile(identity.id, identity.email, identity.display_name)
    save_session(settings, session)
    echo_success(f"Account created. Signed in as {identity.email}")


@auth.command("login")
@click.option("--email", prompt=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_context
@async_command
async def login(ctx: click.Context, email: str, password: str):
    """Sign in with email and password."""
    ensure_initialized(ctx)
    settings = get_settings(ctx)
    store = get_store(ctx)

    try:
        session = await IdentityProvider.from_settings(store, settings).sign_in(email, password)
    except (AuthenticationError, InvalidInputError) as e:
        echo_error(str(e))
        ctx.exit(1)

    identity = session.identity
    await UserProfileRepository(store).ensure_profile(identity.id, identity.email, identity.display_name)
    save_session(settings, session)
    echo_success(f"Signed in as {identity.email}")


@auth.command("logout")
@click.pass_context
@async_command
async def logout(ctx: click.Context):
    """Sign out and forget the saved session."""
    ensure_initialized(ctx)
    settings = get_settings(ctx)

    token = load_token(settings)
    if token is None:
        echo_info("Not signed in.")
        return

    try:
        await IdentityProvider.from_settings(get_store(ctx), settings).sign_out(token)
    except AuthenticationError:
        echo_info("Saved session had already expired.")
    clear_session(settings)
    echo_success("Signed out")


@auth.command("whoami")
@click.pass_context
@async_command
async def whoami(ctx: click.Context):
    """Show the signed-in user."""
    ensure_initialized(ctx)
    identity = await require_identity(ctx, get_store(ctx))
    name = f" ({identity.display_name})" if identity.display_name else ""
    click.echo(f"{identity.email}{name}")
    click.echo(f"User ID: {identity.id}")
