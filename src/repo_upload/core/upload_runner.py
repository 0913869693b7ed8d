"""Push confirmed branches for review and report the outcome per branch.

Branches are pushed one after another in confirmation order. A failing branch
is recorded and the remaining branches are still attempted.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from repo_upload.cli.output import user_output
from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.confirm import ConfirmedUpload, autoupload_key
from repo_upload.core.errors import PushError, RemoteClassificationError
from repo_upload.core.prompter.abc import Prompter, answer_is_true
from repo_upload.core.remote.classifier import RemoteClassifier
from repo_upload.core.repository.abc import (
    REFS_HEADS,
    PendingBranch,
    PushRequest,
    Repository,
    resolve_dest_branch,
)
from repo_upload.core.upload_options import UploadOptions, split_people

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BranchResult:
    """Outcome of uploading one branch."""

    branch: PendingBranch
    uploaded: bool
    error: str | None = None


def _full_ref(branch: str) -> str:
    if branch.startswith(REFS_HEADS):
        return branch
    return REFS_HEADS + branch


class UploadRunner:
    """Push each confirmed branch to its review server."""

    def __init__(
        self,
        repository: Repository,
        classifier: RemoteClassifier,
        config_store: ConfigStore,
        prompter: Prompter,
    ) -> None:
        self._repository = repository
        self._classifier = classifier
        self._config_store = config_store
        self._prompter = prompter

    def upload_all(self, confirmed: ConfirmedUpload) -> list[BranchResult]:
        options = confirmed.options
        reviewers = split_people(options.reviewers)
        cc = split_people(options.cc)
        return [
            self._upload_branch(branch, options, reviewers, cc) for branch in confirmed.branches
        ]

    def _upload_branch(
        self,
        branch: PendingBranch,
        options: UploadOptions,
        reviewers: list[str],
        cc: list[str],
    ) -> BranchResult:
        project = branch.project
        review_url = project.review_url

        branch_reviewers = reviewers + self._configured_people(review_url, "autoreviewer")
        branch_cc = cc + self._configured_people(review_url, "autocopy")

        if not self._repository.is_clean(project):
            if not self._config_store.has_key(autoupload_key(review_url)):
                user_output(f"Uncommitted changes in {project.name} (did you forget to amend?):")
                answer = self._prompter.ask("Continue uploading? (y/N) ", "N")
                if not answer_is_true(answer):
                    user_output("skipping upload")
                    return BranchResult(branch=branch, uploaded=False, error="User aborted")

        auto_topic = options.auto_topic or self._config_store.get_bool(
            f"review.{review_url}.uploadtopic", False
        )

        dest = resolve_dest_branch(branch, options)
        if not dest:
            return BranchResult(
                branch=branch,
                uploaded=False,
                error=(
                    f"cannot find tracking branch for {branch.name}; "
                    "use `--dest <branch>` to choose the review destination"
                ),
            )
        if not options.dest_branch and branch.tracking_branch:
            merge_branch = _full_ref(branch.tracking_branch)
            if merge_branch != _full_ref(dest):
                logger.error(
                    "merge branch %s does not match destination branch %s", merge_branch, dest
                )
                return BranchResult(
                    branch=branch,
                    uploaded=False,
                    error=(
                        f"merge branch {merge_branch} does not match destination branch "
                        f"{_full_ref(dest)}; use `--dest {dest}` if this is intentional"
                    ),
                )

        if project.remote is None:
            return BranchResult(
                branch=branch, uploaded=False, error=f"no remote defined for {project.name}"
            )

        try:
            classification = self._classifier.classify(project.remote)
            revision = self._repository.resolve_revision(project, REFS_HEADS + branch.name)
            self._repository.push(
                PushRequest(
                    branch=branch,
                    revision=revision,
                    dest_branch=dest,
                    classification=classification,
                    options=replace(options, auto_topic=auto_topic),
                    reviewers=branch_reviewers,
                    cc=branch_cc,
                )
            )
        except (RemoteClassificationError, PushError, RuntimeError) as e:
            logger.debug("upload of %s failed", branch.name, exc_info=True)
            return BranchResult(branch=branch, uploaded=False, error=str(e))

        return BranchResult(branch=branch, uploaded=True)

    def _configured_people(self, review_url: str, name: str) -> list[str]:
        value = self._config_store.get(f"review.{review_url}.{name}")
        if not value:
            return []
        return split_people([value])


def report_results(results: Sequence[BranchResult]) -> bool:
    """Print one line per branch.

    Returns:
        True if every branch was uploaded
    """
    user_output("")
    user_output("-" * 70)
    for result in results:
        project_path = result.branch.project.path + "/"
        if result.uploaded:
            user_output(f"[OK    ] {project_path:<15} {result.branch.name}")
            continue
        error = result.error or "not uploaded"
        if len(error) <= 30:
            detail = f" ({error})"
        else:
            detail = f"\n       ({error})"
        user_output(f"[FAILED] {project_path:<15} {result.branch.name:<15}{detail}")
    user_output("")
    return all(result.uploaded for result in results)
