"""CLI entry point for fastwell."""

import click

from . import __version__
from .commands import ai, auth, challenges, fast, init, profile, score, serve, weight
from .config import Settings, configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="fastwell")
@click.option("--log-level", default=None, help="Logging level (default: FASTWELL_LOG_LEVEL or INFO)")
@click.pass_context
def main(ctx: click.Context, log_level: str | None):
    """fastwell: intermittent fasting tracker.

    Track fasts and weight, follow weekly challenges and get AI fasting
    suggestions and meal plans.

    Example usage:

        # Initialize the project
        fastwell init

        # Create an account
        fastwell auth signup --email you@example.com

        # Fast for 16 hours
        fastwell fast start --goal 16
        fastwell fast status
        fastwell fast end

        # See how you are doing
        fastwell challenges
        fastwell score
    """
    if ctx.obj is None:
        ctx.obj = Settings.from_env()
    if log_level:
        ctx.obj.log_level = log_level.upper()
    configure_logging(ctx.obj.log_level)


# Register commands
main.add_command(init)
main.add_command(auth)
main.add_command(fast)
main.add_command(weight)
main.add_command(profile)
main.add_command(challenges)
main.add_command(score)
main.add_command(ai)
main.add_command(serve)


def run():
    """Run the CLI."""
    main()


if __name__ == "__main__":
    run()
