"""Repository operations needed to upload branches for review.

Architecture:
- Repository: Abstract interface over version control operations
- RealRepository: Production implementation running git
- Data types: Project, PendingBranch, PushRequest
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from repo_upload.core.remote.types import RemoteClassification, ReviewRemote
from repo_upload.core.upload_options import UploadOptions

REFS_HEADS = "refs/heads/"


@dataclass(frozen=True)
class Project:
    """A repository checkout taking part in the upload.

    Attributes:
        name: Repository name on the server; keys branch lookups
        path: Checkout path relative to the workspace root ("." for single repo)
        worktree: Absolute path of the checkout
        remote: Remote used for review, or None if the project has none
        revision: Branch the project tracks on the remote
        dest_branch: Review destination when it differs from revision
    """

    name: str
    path: str
    worktree: Path
    remote: ReviewRemote | None
    revision: str = ""
    dest_branch: str = ""

    @property
    def review_url(self) -> str:
        if self.remote is None:
            return ""
        return self.remote.review


@dataclass(frozen=True)
class PendingBranch:
    """A local branch with commits not yet on its remote branch.

    Attributes:
        project: Project the branch lives in
        name: Local branch name, without refs/heads/
        commits: One-line commit summaries, newest first
        published: True if a review was already created for this branch
        tracking_branch: Remote branch the local branch merges from, if any
    """

    project: Project
    name: str
    commits: tuple[str, ...]
    published: bool = False
    tracking_branch: str = ""


@dataclass(frozen=True)
class PushRequest:
    """Everything needed to push one branch for review."""

    branch: PendingBranch
    revision: str
    dest_branch: str
    classification: RemoteClassification
    options: UploadOptions
    reviewers: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)


def resolve_dest_branch(branch: PendingBranch, options: UploadOptions) -> str:
    """Get the review destination of a branch.

    Tries --dest, the project's destination, the remote branch the local
    branch tracks, then the project revision.

    Returns:
        Destination branch name, or "" when none is known
    """
    if options.dest_branch:
        return options.dest_branch
    if branch.project.dest_branch:
        return branch.project.dest_branch
    if branch.tracking_branch:
        return branch.tracking_branch.removeprefix(REFS_HEADS)
    return branch.project.revision


# ============================================================================
# Abstract Interface
# ============================================================================


class Repository(ABC):
    """Abstract interface for version control operations.

    All implementations (real and fake) must implement this interface.
    """

    @abstractmethod
    def resolve_revision(self, project: Project, rev: str) -> str:
        """Resolve a revision to a commit id.

        Raises:
            RuntimeError: If the revision does not exist
        """
        ...

    @abstractmethod
    def pending_branches_for(
        self, project: Project, branch_filter: str | None
    ) -> list[PendingBranch]:
        """List branches with commits waiting for review.

        Args:
            project: Project to inspect
            branch_filter: Only consider this branch name; None for all

        Returns:
            Pending branches sorted by name
        """
        ...

    @abstractmethod
    def current_branch(self, project: Project) -> str | None:
        """Get the checked-out branch, or None when HEAD is detached."""
        ...

    @abstractmethod
    def is_clean(self, project: Project) -> bool:
        """Check that the work tree has no uncommitted changes."""
        ...

    @abstractmethod
    def push(self, request: PushRequest) -> None:
        """Push a branch for review.

        Raises:
            PushError: If the push fails
        """
        ...
