"""Production Repository implementation using git subprocesses."""

import logging

from repo_upload.cli.output import user_output
from repo_upload.core.errors import PushError
from repo_upload.core.push import build_push_command
from repo_upload.core.repository.abc import (
    REFS_HEADS,
    PendingBranch,
    Project,
    PushRequest,
    Repository,
)
from repo_upload.core.subprocess_utils import read_git, run_git

logger = logging.getLogger(__name__)

REFS_PUBLISHED = "refs/published/"


class RealRepository(Repository):
    """Production implementation running git in each project's work tree.

    A branch counts as published once a previous upload recorded its head
    under refs/published/.
    """

    def resolve_revision(self, project: Project, rev: str) -> str:
        return run_git(
            ["rev-parse", "--verify", f"{rev}^{{commit}}"],
            f"resolve {rev} in {project.name}",
            cwd=project.worktree,
        )

    def pending_branches_for(
        self, project: Project, branch_filter: str | None
    ) -> list[PendingBranch]:
        output = run_git(
            ["for-each-ref", "--format=%(refname:short)", REFS_HEADS],
            f"list branches of {project.name}",
            cwd=project.worktree,
        )
        names = sorted(line.strip() for line in output.splitlines() if line.strip())
        if branch_filter is not None:
            wanted = branch_filter.removeprefix(REFS_HEADS)
            names = [name for name in names if name == wanted]

        branches: list[PendingBranch] = []
        for name in names:
            base = self._upload_base(project, name)
            if base is None:
                logger.debug("branch %s in %s has no upstream, skipping", name, project.name)
                continue
            commits = self._commits_between(project, base, name)
            if not commits:
                continue
            branches.append(
                PendingBranch(
                    project=project,
                    name=name,
                    commits=tuple(commits),
                    published=self._ref_exists(project, REFS_PUBLISHED + name),
                    tracking_branch=(
                        read_git(["config", "--get", f"branch.{name}.merge"], project.worktree)
                        or ""
                    ),
                )
            )
        return branches

    def current_branch(self, project: Project) -> str | None:
        branch = read_git(["rev-parse", "--abbrev-ref", "HEAD"], project.worktree)
        if branch is None or branch == "HEAD":
            return None
        return branch

    def is_clean(self, project: Project) -> bool:
        status = run_git(
            ["status", "--porcelain"], f"check status of {project.name}", cwd=project.worktree
        )
        return status == ""

    def push(self, request: PushRequest) -> None:
        project = request.branch.project
        cmd = build_push_command(request)
        if request.options.mock_git_push:
            user_output("mock: " + " ".join(cmd))
            return

        logger.debug("pushing %s: %s", request.branch.name, " ".join(cmd))
        try:
            run_git(
                cmd[1:],
                f"push {request.branch.name} of {project.name}",
                cwd=project.worktree,
            )
            run_git(
                ["update-ref", REFS_PUBLISHED + request.branch.name, request.revision],
                f"record published {request.branch.name}",
                cwd=project.worktree,
            )
        except RuntimeError as e:
            raise PushError(str(e)) from e

    def _upload_base(self, project: Project, branch: str) -> str | None:
        upstream = f"{branch}@{{upstream}}"
        if self._ref_exists(project, upstream):
            return upstream
        if project.remote is not None and project.revision:
            tracking = (
                f"refs/remotes/{project.remote.name}/{project.revision.removeprefix(REFS_HEADS)}"
            )
            if self._ref_exists(project, tracking):
                return tracking
        return None

    def _commits_between(self, project: Project, base: str, branch: str) -> list[str]:
        output = run_git(
            ["log", "--format=%h %s", f"{base}..{branch}", "--"],
            f"list commits of {branch}",
            cwd=project.worktree,
        )
        return [line for line in output.splitlines() if line.strip()]

    def _ref_exists(self, project: Project, ref: str) -> bool:
        return read_git(["rev-parse", "--verify", "--quiet", ref], project.worktree) is not None
