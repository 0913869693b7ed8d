from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.config_store.real import GitConfigStore

__all__ = ["ConfigStore", "GitConfigStore"]
