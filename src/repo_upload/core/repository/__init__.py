from repo_upload.core.repository.abc import (
    PendingBranch,
    Project,
    PushRequest,
    Repository,
    resolve_dest_branch,
)
from repo_upload.core.repository.real import RealRepository

__all__ = [
    "PendingBranch",
    "Project",
    "PushRequest",
    "RealRepository",
    "Repository",
    "resolve_dest_branch",
]
