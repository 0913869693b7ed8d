"""Output utilities for CLI commands.

Everything the operator reads goes to stderr, leaving stdout free for git.
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    """Write a message for the operator to stderr."""
    click.echo(message, nl=nl, err=True)
