"""Key/value configuration storage interface."""

from abc import ABC, abstractmethod

from repo_upload.core.upload_options import parse_bool_token


class ConfigStore(ABC):
    """Abstract interface over git-style configuration.

    Keys use git config syntax (``section.subsection.name``). Writes made with
    set() and unset() may be buffered until save().
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Get the value of a key, or None if unset."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set a key."""
        ...

    @abstractmethod
    def unset(self, key: str) -> None:
        """Remove a key if present."""
        ...

    @abstractmethod
    def save(self) -> None:
        """Persist pending writes."""
        ...

    def has_key(self, key: str) -> bool:
        return self.get(key) is not None

    def get_bool(self, key: str, default: bool) -> bool:
        """Get a key as a boolean; unset or unparsable values give default."""
        value = self.get(key)
        if value is None:
            return default
        parsed = parse_bool_token(value.strip().lower())
        if parsed is None:
            return default
        return parsed
