"""Editor implementations: the operator's editor, or a canned result file."""

from pathlib import Path

import click

from repo_upload.core.editor.abc import Editor


class RealEditor(Editor):
    """Opens the text in $GIT_EDITOR / $VISUAL / $EDITOR via click."""

    def edit(self, text: str) -> str:
        edited = click.edit(text, require_save=False, extension=".txt")
        if edited is None:
            return text
        return edited


class FileEditor(Editor):
    """Returns a prepared file's content instead of starting an editor.

    Used by the hidden --mock-edit-script option for scripted runs.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    def edit(self, text: str) -> str:
        return self._path.read_text(encoding="utf-8")
