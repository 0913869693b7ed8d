"""CLI error handling utilities with styled output.

Every failure is printed with a red "Error:" prefix and exits with status 1.

Domain-Specific Methods:
- Workspace validation (command runs inside a git work tree)
- Upload outcome validation (every confirmed branch was pushed)
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, TypeVar

import click

from repo_upload.cli.output import user_output

if TYPE_CHECKING:
    from repo_upload.core.context import UploadContext
    from repo_upload.core.upload_runner import BranchResult
    from repo_upload.core.workspace import Workspace

T = TypeVar("T")


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit.

        Provides type narrowing from `T | None` to `T`.
        """
        if value is None:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)
        return value

    @staticmethod
    def in_workspace(ctx: "UploadContext") -> "Workspace":
        """Ensure the command runs inside a git work tree and return its workspace."""
        return Ensure.not_none(
            ctx.workspace,
            f"{ctx.cwd} is not inside a git repository; run repo-upload from a work tree",
        )

    @staticmethod
    def all_uploaded(results: Sequence["BranchResult"]) -> None:
        """Ensure every branch was uploaded, naming the failures otherwise."""
        failed = [result.branch.name for result in results if not result.uploaded]
        Ensure.invariant(
            not failed,
            f"some branches failed to upload: {', '.join(failed)}",
        )
