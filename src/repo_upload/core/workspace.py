"""Discover the workspace an upload runs in.

Only single-repository workspaces are discovered here: the enclosing git work
tree is the one project, at path ".". Its admin directory, where upload
options are persisted, is ``<git-common-dir>/repo``.
"""

from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.remote.types import ReviewRemote
from repo_upload.core.repository.abc import REFS_HEADS, Project
from repo_upload.core.subprocess_utils import read_git, run_git

DEFAULT_REMOTE = "origin"


@dataclass(frozen=True)
class Workspace:
    """Projects taking part in an upload and where to keep state."""

    root: Path
    admin_dir: Path
    projects: list[Project]


def repository_name(url: str) -> str:
    """Derive a repository name from a remote URL.

    Example:
        >>> repository_name("ssh://git@example.com:29418/platform/app.git")
        'platform/app'
        >>> repository_name("git@example.com:platform/app.git")
        'platform/app'
    """
    if "://" in url:
        path = urlparse(url).path
    elif ":" in url:
        path = url.split(":", 1)[1]
    else:
        path = url
    return path.strip("/").removesuffix(".git")


def default_review_url(url: str) -> str:
    """Guess the review endpoint of a remote from its fetch URL.

    HTTP(S) and SSH URLs map to their host; scp-style URLs map to the bare
    host, which classification treats as HTTP. Local paths have no review
    server.
    """
    if "://" in url:
        parsed = urlparse(url)
        if parsed.scheme in ("http", "https") and parsed.hostname:
            return f"{parsed.scheme}://{parsed.netloc}"
        if parsed.scheme == "ssh" and parsed.hostname:
            return f"ssh://{parsed.hostname}"
        return ""
    if ":" in url and not url.startswith("/"):
        host = url.split(":", 1)[0]
        return host.split("@", 1)[-1]
    return ""


def discover_workspace(cwd: Path, config_store: ConfigStore) -> Workspace:
    """Discover the single-repository workspace around cwd.

    Raises:
        RuntimeError: If cwd is not inside a git work tree
    """
    root = Path(run_git(["rev-parse", "--show-toplevel"], "find repository root", cwd=cwd))
    common_dir = Path(run_git(["rev-parse", "--git-common-dir"], "find git directory", cwd=root))
    if not common_dir.is_absolute():
        common_dir = (root / common_dir).resolve()

    head = read_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=root) or "HEAD"

    remote_name = DEFAULT_REMOTE
    revision = ""
    if head != "HEAD":
        remote_name = config_store.get(f"branch.{head}.remote") or DEFAULT_REMOTE
        revision = (config_store.get(f"branch.{head}.merge") or "").removeprefix(REFS_HEADS)

    url = config_store.get(f"remote.{remote_name}.url") or ""
    review = config_store.get(f"remote.{remote_name}.review") or default_review_url(url)
    remote = ReviewRemote(name=remote_name, review=review, url=url) if url else None

    project = Project(
        name=repository_name(url) or root.name,
        path=".",
        worktree=root,
        remote=remote,
        revision=revision,
    )
    return Workspace(root=root, admin_dir=common_dir / "repo", projects=[project])


def select_projects(projects: list[Project], names: tuple[str, ...]) -> list[Project]:
    """Restrict projects to those named by name or path; all when names is empty.

    Raises:
        ValueError: If a name matches no project
    """
    if not names:
        return list(projects)
    selected: list[Project] = []
    for name in names:
        wanted = name.rstrip("/") or name
        matches = [p for p in projects if wanted in (p.name, p.path)]
        if not matches:
            raise ValueError(f"project {name} not found")
        for match in matches:
            if match not in selected:
                selected.append(match)
    return selected
