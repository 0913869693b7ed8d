import logging
import os

import click

from repo_upload.cli.commands.upload import upload_cmd
from repo_upload.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV = "REPO_UPLOAD_DEBUG"


def configure_logging(verbose: bool) -> None:
    """Show debug traces with --verbose or REPO_UPLOAD_DEBUG, warnings otherwise."""
    if verbose or os.getenv(DEBUG_ENV):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="repo-upload")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Upload local branches of a workspace for code review."""
    configure_logging(verbose)
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context()
        except ValueError as e:
            raise click.ClickException(str(e)) from e


cli.add_command(upload_cmd)


def main() -> None:
    """CLI entry point used by the `repo-upload` console script."""
    cli()
