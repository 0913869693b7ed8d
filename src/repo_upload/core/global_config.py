"""User-level configuration loaded from ~/.repo-upload/config.toml.

Example file:

    assume_yes = false
    no_cert_checks = false
    ignore_ssh_info = false
"""

import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

_BOOL_KEYS = ("assume_yes", "assume_no", "no_cert_checks", "ignore_ssh_info")


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable user configuration.

    Loaded once at CLI entry point. All fields default to False.
    """

    assume_yes: bool = False
    assume_no: bool = False
    no_cert_checks: bool = False
    ignore_ssh_info: bool = False


class GlobalConfigOps(ABC):
    """Abstract interface for reading the user configuration."""

    @abstractmethod
    def exists(self) -> bool:
        """Check if the config file exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load the config, returning defaults when it does not exist.

        Raises:
            ValueError: If the config is malformed
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for messages)."""
        ...


class FilesystemGlobalConfigOps(GlobalConfigOps):
    """Production implementation reading ~/.repo-upload/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._config_path = config_path

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        config_path = self.path()
        if not config_path.exists():
            return GlobalConfig()

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {config_path}: {e}") from e

        values: dict[str, bool] = {}
        for key in _BOOL_KEYS:
            value = data.get(key, False)
            if not isinstance(value, bool):
                raise ValueError(f"'{key}' in {config_path} must be true or false")
            values[key] = value
        return GlobalConfig(**values)

    def path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        return Path.home() / ".repo-upload" / "config.toml"


class InMemoryGlobalConfigOps(GlobalConfigOps):
    """Test implementation holding config in memory."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            return GlobalConfig()
        return self._config

    def path(self) -> Path:
        return Path("/fake/repo-upload/config.toml")
