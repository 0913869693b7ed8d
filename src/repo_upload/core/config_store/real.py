"""ConfigStore backed by ``git config`` of one repository."""

from pathlib import Path

from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.subprocess_utils import read_git, run_git


class GitConfigStore(ConfigStore):
    """Reads and writes the repository's git config.

    Writes are queued and applied by save(), so a failed run leaves the
    config untouched.
    """

    def __init__(self, repo_root: Path) -> None:
        self._repo_root = repo_root
        self._pending: dict[str, str | None] = {}

    def get(self, key: str) -> str | None:
        if key in self._pending:
            return self._pending[key]
        return read_git(["config", "--get", key], cwd=self._repo_root)

    def set(self, key: str, value: str) -> None:
        self._pending[key] = value

    def unset(self, key: str) -> None:
        self._pending[key] = None

    def save(self) -> None:
        for key, value in self._pending.items():
            if value is None:
                # Exit code 5 means the key was not set
                read_git(["config", "--unset-all", key], cwd=self._repo_root)
            else:
                run_git(["config", key, value], f"set git config {key}", cwd=self._repo_root)
        self._pending.clear()
