"""Confirm which branches to upload and with which options.

Two strategies share one interface, BranchCollector:

- ConfirmCollector: a single branch confirmed with yes/no questions
- EditorCollector: every candidate listed in an editable upload script

Both return a ConfirmedUpload, so pushing and reporting are written once.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from repo_upload.cli.output import user_output
from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.edit_script import build_script, options_section, parse_selection
from repo_upload.core.editor.abc import Editor
from repo_upload.core.errors import PolicyBlockedError, UserAbortedError
from repo_upload.core.options_store import OptionStore
from repo_upload.core.policy import UploadPolicy
from repo_upload.core.prompter.abc import Prompter, answer_is_true
from repo_upload.core.repository.abc import PendingBranch, resolve_dest_branch
from repo_upload.core.upload_options import UploadOptions

logger = logging.getLogger(__name__)

UNUSUAL_COMMIT_THRESHOLD = 5


def autoupload_key(review_url: str) -> str:
    return f"review.{review_url}.autoupload"


@dataclass(frozen=True)
class ConfirmedUpload:
    """Options and branches the operator agreed to upload."""

    options: UploadOptions
    branches: list[PendingBranch]


class UploadConfirmer:
    """Confirm a single branch upload on the console.

    A ``review.<url>.autoupload`` switch answers the first question without
    prompting. Branches with more than UNUSUAL_COMMIT_THRESHOLD commits always
    need a second, explicit confirmation.
    """

    def __init__(self, prompter: Prompter, config_store: ConfigStore) -> None:
        self._prompter = prompter
        self._config_store = config_store

    def confirm(self, branch: PendingBranch, options: UploadOptions) -> None:
        """Ask the operator to confirm an upload.

        Raises:
            PolicyBlockedError: If the autoupload switch is false
            UserAbortedError: If the operator declines either question
        """
        project = branch.project
        review_url = project.review_url
        key = autoupload_key(review_url)

        if self._config_store.has_key(key):
            if not self._config_store.get_bool(key, False):
                raise PolicyBlockedError(key)
        else:
            dest = resolve_dest_branch(branch, options)
            draft = " (draft)" if options.draft else ""
            if project.path == ".":
                user_output(f"Upload project ({project.name}) to remote branch {dest}{draft}:")
            else:
                user_output(f"Upload project {project.path}/ to remote branch {dest}{draft}:")
            user_output(f"  branch {branch.name} ({len(branch.commits):2d} commit(s)):")
            for commit in branch.commits:
                user_output(f"         {commit}")

            answer = self._prompter.ask(f"to {review_url} (y/N)? ", "N")
            if not answer_is_true(answer):
                raise UserAbortedError()

        if len(branch.commits) > UNUSUAL_COMMIT_THRESHOLD:
            user_output("ATTENTION: You are uploading an unusually high number of commits.")
            user_output("YOU PROBABLY DO NOT MEAN TO DO THIS. (Did you rebase across branches?)")
            answer = self._prompter.ask(
                "If you are sure you intend to do this, type 'yes': ", "N"
            )
            if not answer_is_true(answer):
                raise UserAbortedError()


class BranchCollector(ABC):
    """Turn upload candidates into the confirmed set of branches."""

    @abstractmethod
    def collect(
        self,
        candidates: Mapping[str, Sequence[PendingBranch]],
        options: UploadOptions,
    ) -> ConfirmedUpload:
        """Confirm candidates, grouped by project path.

        Raises:
            UploadError: If the operator aborts or the selection is invalid
        """
        ...


class ConfirmCollector(BranchCollector):
    """Confirm exactly one candidate branch with console questions."""

    def __init__(self, confirmer: UploadConfirmer) -> None:
        self._confirmer = confirmer

    def collect(
        self,
        candidates: Mapping[str, Sequence[PendingBranch]],
        options: UploadOptions,
    ) -> ConfirmedUpload:
        branches = [branch for group in candidates.values() for branch in group]
        if len(branches) != 1:
            raise ValueError(f"expected a single branch to confirm, got {len(branches)}")
        self._confirmer.confirm(branches[0], options)
        return ConfirmedUpload(options=options, branches=branches)


class EditorCollector(BranchCollector):
    """Let the operator edit options and pick branches in an upload script.

    Edited options are saved for the next session; failing to save them is
    only a warning.
    """

    def __init__(self, editor: Editor, store: OptionStore, policy: UploadPolicy) -> None:
        self._editor = editor
        self._store = store
        self._policy = policy

    def collect(
        self,
        candidates: Mapping[str, Sequence[PendingBranch]],
        options: UploadOptions,
    ) -> ConfirmedUpload:
        script = build_script(candidates, options, self._store, self._policy)
        edited = self._editor.edit(script.text)

        options.load_from_text(options_section(edited))
        try:
            self._store.save(script.options_file, options)
        except OSError as e:
            logger.warning("cannot save upload options to %s: %s", script.options_file, e)

        branches = parse_selection(edited, script)
        return ConfirmedUpload(options=options, branches=branches)


def choose_collector(
    candidates: Mapping[str, Sequence[PendingBranch]],
    *,
    no_edit: bool,
    confirm: ConfirmCollector,
    editor: EditorCollector,
) -> BranchCollector:
    """Use console confirmation for one branch with --no-edit, else the editor."""
    if no_edit and len(candidates) == 1:
        (only,) = candidates.values()
        if len(only) == 1:
            return confirm
    return editor
