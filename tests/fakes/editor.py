"""Fake editor for testing.

FakeEditor records the documents it was asked to edit and returns either a
fixed result, the output of an edit function, or the text unchanged.
"""

from collections.abc import Callable

from repo_upload.core.editor.abc import Editor


class FakeEditor(Editor):
    """In-memory fake editor.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(
        self,
        result: str | None = None,
        edit_fn: Callable[[str], str] | None = None,
    ) -> None:
        self._result = result
        self._edit_fn = edit_fn
        self._edited_texts: list[str] = []

    @property
    def edited_texts(self) -> list[str]:
        """Documents passed to edit(). This property is for test assertions only."""
        return self._edited_texts

    def edit(self, text: str) -> str:
        self._edited_texts.append(text)
        if self._result is not None:
            return self._result
        if self._edit_fn is not None:
            return self._edit_fn(text)
        return text


def uncomment_branches(*names: str) -> Callable[[str], str]:
    """Build an edit function that uncomments the branch lines for names."""

    def _edit(text: str) -> str:
        lines = []
        for line in text.split("\n"):
            for name in names:
                if line.startswith(f"#  branch {name} ("):
                    line = " " + line[1:]
            lines.append(line)
        return "\n".join(lines)

    return _edit


def set_section(name: str, value: str) -> Callable[[str], str]:
    """Build an edit function that replaces the value of the [name] section.

    An empty value leaves the section blank.
    """

    def _edit(text: str) -> str:
        lines = text.split("\n")
        start = next(i for i, line in enumerate(lines) if line.startswith(f"# [{name}]")) + 1
        end = start
        while end < len(lines) and not lines[end].startswith(("# [", "####")):
            end += 1
        body = ["", value, ""] if value else [""]
        lines[start:end] = body
        return "\n".join(lines)

    return _edit
