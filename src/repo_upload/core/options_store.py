"""Persist upload options between upload sessions.

Options are stored per destination branch under the workspace admin directory:

    <admin-dir>/UPLOAD_OPTIONS.d/<sanitized-destination-branch>

with <admin-dir>/UPLOAD_OPTIONS as a shared fallback. Writes are staged in a
sibling ``.lock`` file and renamed over the target, so readers only ever see a
complete document.
"""

import logging
import os
from pathlib import Path

from repo_upload.core.upload_options import UploadOptions

logger = logging.getLogger(__name__)

UPLOAD_OPTIONS_FILE = "UPLOAD_OPTIONS"
UPLOAD_OPTIONS_DIR = "UPLOAD_OPTIONS.d"
REFS_HEADS = "refs/heads/"


def sanitize_branch_name(dest_branch: str) -> str:
    """Turn a destination branch into a file name.

    Example:
        >>> sanitize_branch_name("refs/heads/release/2.0")
        'release.2.0'
    """
    name = dest_branch.removeprefix(REFS_HEADS)
    return name.replace("/", ".")


class OptionStore:
    """Load and save UploadOptions under a workspace admin directory."""

    def __init__(self, admin_dir: Path) -> None:
        self._admin_dir = admin_dir

    @property
    def options_dir(self) -> Path:
        return self._admin_dir / UPLOAD_OPTIONS_DIR

    @property
    def shared_file(self) -> Path:
        return self._admin_dir / UPLOAD_OPTIONS_FILE

    def path_for(self, dest_branch: str) -> Path:
        """Get the option file for a destination branch.

        An unknown (empty) destination uses the shared file.
        """
        name = sanitize_branch_name(dest_branch)
        if not name:
            return self.shared_file
        return self.options_dir / name

    def resolve_source(self, path: Path) -> Path | None:
        """Find the file to inherit options from when preparing a script.

        Tries the per-branch file, then the shared file, then the first file
        directly inside the options directory.

        Returns:
            Path of the file to read, or None if no previous session exists
        """
        if path.exists():
            return path
        if self.shared_file.exists():
            return self.shared_file
        if not self.options_dir.is_dir():
            return None
        for entry in sorted(self.options_dir.iterdir()):
            if entry.is_file():
                return entry
        return None

    def load(self, path: Path) -> UploadOptions:
        """Load options saved by a previous session.

        Missing files yield empty options rather than an error.
        """
        options = UploadOptions()
        source = self.resolve_source(path)
        if source is None:
            return options
        logger.debug("loading upload options from %s", source)
        options.load_from_file(source)
        return options

    def save(self, path: Path, options: UploadOptions) -> None:
        """Write options for the next session.

        A title or description already in the file is kept in preference to
        the in-memory one, so hand-edited values survive batch uploads.

        Raises:
            OSError: If the file cannot be written or renamed into place
        """
        to_write = UploadOptions(
            title=options.title,
            description=options.description,
            issue=options.issue,
            reviewers=list(options.reviewers),
            cc=list(options.cc),
            draft=options.draft,
            private=options.private,
            wip=options.wip,
        )

        if path.exists():
            previous = UploadOptions()
            previous.load_from_file(path)
            if previous.title:
                to_write.title = previous.title
            if previous.description:
                to_write.description = previous.description
        else:
            path.parent.mkdir(parents=True, exist_ok=True)

        lock_file = path.with_name(path.name + ".lock")
        lock_file.write_text("\n".join(to_write.export(published=False)), encoding="utf-8")
        os.replace(lock_file, path)
