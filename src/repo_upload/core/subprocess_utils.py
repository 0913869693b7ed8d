"""Git subprocess helpers.

run_git() is for commands whose failure is an error; read_git() is for
queries where a non-zero exit simply means "not there" (unset config keys,
missing refs, detached HEAD).
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path


def run_git(
    args: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
) -> str:
    """Run a git command and return its stripped stdout.

    Args:
        args: Arguments after ``git``
        operation_context: Human-readable description, e.g. "list branches of app"
        cwd: Working directory for the command

    Raises:
        RuntimeError: If git fails or is not installed; the message carries the
            operation, command line, exit code and stderr
    """
    cmd = ["git", *args]
    cmd_str = " ".join(cmd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )
    except subprocess.CalledProcessError as e:
        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"
        if e.stderr and e.stderr.strip():
            error_msg += f"\nstderr: {e.stderr.strip()}"
        raise RuntimeError(error_msg) from e
    except FileNotFoundError as e:
        raise RuntimeError(
            f"git not found while trying to {operation_context}\nFull command: {cmd_str}"
        ) from e
    return result.stdout.strip()


def read_git(args: Sequence[str], cwd: Path | None = None) -> str | None:
    """Run a git query; None when git exits non-zero."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        check=False,
    )
    if result.returncode != 0:
        return None
    return result.stdout.rstrip("\n")
