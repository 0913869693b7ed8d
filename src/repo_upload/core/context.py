"""Application context with dependency injection."""

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.config_store.real import GitConfigStore
from repo_upload.core.editor.abc import Editor
from repo_upload.core.editor.real import RealEditor
from repo_upload.core.global_config import FilesystemGlobalConfigOps, GlobalConfig
from repo_upload.core.policy import UploadPolicy
from repo_upload.core.prompter.abc import Prompter
from repo_upload.core.prompter.real import RealPrompter
from repo_upload.core.remote.classifier import create_http_client
from repo_upload.core.repository.abc import Repository
from repo_upload.core.repository.real import RealRepository
from repo_upload.core.workspace import Workspace, discover_workspace


@dataclass(frozen=True)
class UploadContext:
    """Immutable context holding all dependencies for an upload.

    Created at CLI entry point and threaded through the application.
    workspace is None when the command runs outside a git work tree.
    """

    repository: Repository
    editor: Editor
    prompter: Prompter
    config_store: ConfigStore
    global_config: GlobalConfig
    workspace: Workspace | None
    cwd: Path
    environ: Mapping[str, str] = field(default_factory=dict)
    http_client_factory: Callable[[UploadPolicy], httpx.Client] = create_http_client

    @staticmethod
    def for_test(
        *,
        repository: Repository,
        workspace: Workspace | None,
        editor: Editor | None = None,
        prompter: Prompter | None = None,
        config_store: ConfigStore | None = None,
        global_config: GlobalConfig | None = None,
        cwd: Path | None = None,
        environ: Mapping[str, str] | None = None,
        http_client_factory: Callable[[UploadPolicy], httpx.Client] | None = None,
    ) -> "UploadContext":
        """Create a test context; unspecified collaborators are empty fakes.

        The default HTTP client answers every request with 404, so remotes
        classify as Unknown without touching the network.
        """
        from tests.fakes.config_store import FakeConfigStore
        from tests.fakes.editor import FakeEditor
        from tests.fakes.prompter import FakePrompter

        def _not_found_client(policy: UploadPolicy) -> httpx.Client:
            return httpx.Client(transport=httpx.MockTransport(lambda _: httpx.Response(404)))

        return UploadContext(
            repository=repository,
            editor=editor if editor is not None else FakeEditor(),
            prompter=prompter if prompter is not None else FakePrompter(),
            config_store=config_store if config_store is not None else FakeConfigStore(),
            global_config=global_config if global_config is not None else GlobalConfig(),
            workspace=workspace,
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
            environ=environ if environ is not None else {},
            http_client_factory=(
                http_client_factory if http_client_factory is not None else _not_found_client
            ),
        )


def create_context(cwd: Path | None = None) -> UploadContext:
    """Create the production context.

    Raises:
        ValueError: If the user config file is malformed
    """
    if cwd is None:
        cwd = Path.cwd()

    config_store = GitConfigStore(cwd)
    try:
        workspace: Workspace | None = discover_workspace(cwd, config_store)
    except RuntimeError:
        workspace = None

    return UploadContext(
        repository=RealRepository(),
        editor=RealEditor(),
        prompter=RealPrompter(),
        config_store=config_store,
        global_config=FilesystemGlobalConfigOps().load(),
        workspace=workspace,
        cwd=cwd,
        environ=dict(os.environ),
    )
