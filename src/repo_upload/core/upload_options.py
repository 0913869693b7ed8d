"""Review metadata for an upload and its editable text form.

UploadOptions carries two kinds of fields:

- Review metadata (title, description, issue, reviewers, cc, draft, private,
  wip) which is exported to and parsed back from the commented option script.
- Upload mechanics (dest_branch, push_options, auto_topic, ...) which are only
  ever supplied per invocation and never written to the option file.

The text form is a sequence of sections, each opened by a marker line:

    # [Title]       : one line message below as the title of code review

    Fix crash on empty manifest

Parsing is a small state machine over the current section and a line buffer.
A section is flushed into its field when the next known marker opens and once
more at end of input. Flushing blank text never clears a field, so a short
file layered over a fuller one only overrides what it actually specifies.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

SECTION_PATTERN = re.compile(r"^#\s*\[(\S+?)\](\s*:.*)?$")

TRUE_TOKENS = frozenset({"y", "yes", "on", "t", "true", "1"})
FALSE_TOKENS = frozenset({"n", "no", "off", "f", "false", "0"})

_MARKER_WIDTH = 13


class Section(Enum):
    """Sections of the option script, keyed by lowercase marker name."""

    TITLE = "title"
    DESCRIPTION = "description"
    ISSUE = "issue"
    REVIEWER = "reviewer"
    CC = "cc"
    DRAFT = "draft"
    PRIVATE = "private"


_SECTION_BY_NAME = {section.value: section for section in Section}


def parse_bool_token(text: str) -> bool | None:
    """Interpret a yes/no style token. Returns None when it is neither."""
    if text in TRUE_TOKENS:
        return True
    if text in FALSE_TOKENS:
        return False
    return None


def _marker(name: str, help_text: str) -> str:
    return f"# {'[' + name + ']':<{_MARKER_WIDTH}} : {help_text}"


@dataclass
class UploadOptions:
    """Options for one upload round.

    Mutated in three passes: command-line flags, values inherited from the
    previous session, then the operator's edits. Fixed once the round ends.
    """

    title: str = ""
    description: str = ""
    issue: str = ""
    reviewers: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    draft: bool = False
    private: bool = False
    wip: bool = False

    # Upload mechanics, never persisted
    dest_branch: str = ""
    push_options: list[str] = field(default_factory=list)
    auto_topic: bool = False
    no_emails: bool = False
    no_cert_checks: bool = False
    mock_git_push: bool = False

    def export(self, published: bool) -> list[str]:
        """Render the option script as lines.

        Args:
            published: True if every branch already has a review. Title and
                description cannot change for an existing review, so their
                sections are left out.

        Returns:
            Lines of the script, without trailing newlines
        """
        script: list[str] = []
        if not published:
            script.append(
                _marker("Title", "one line message below as the title of code review")
            )
            if self.title:
                script.extend(["", self.title])
            script.append("")

            script.append(
                _marker(
                    "Description",
                    "multiple lines of text as the description of code review",
                )
            )
            if self.description:
                script.append("")
                script.extend(self.description.split("\n"))
            script.append("")

        script.append(_marker("Issue", "multiple lines of issue IDs for cross references"))
        if self.issue:
            script.extend(["", self.issue])
        script.append("")

        script.append(
            _marker("Reviewer", "multiple lines of user names as the reviewers for code review")
        )
        if self.reviewers:
            script.append("")
            script.extend(self.reviewers)
        script.append("")

        script.append(
            _marker("Cc", "multiple lines of user names as the watchers for code review")
        )
        if self.cc:
            script.append("")
            script.extend(self.cc)
        script.append("")

        script.append(
            _marker("Draft", "a boolean (yes/no, or true/false) to turn on/off draft mode")
        )
        if self.draft:
            script.extend(["", "yes"])
        script.append("")

        script.append(
            _marker("Private", "a boolean (yes/no, or true/false) to turn on/off private mode")
        )
        if self.private:
            script.extend(["", "yes"])
        script.append("")

        return script

    def load_from_text(self, data: str) -> None:
        """Parse an option script and apply every section it sets."""
        section: Section | None = None
        buffer: list[str] = []

        for raw_line in data.split("\n"):
            line = raw_line.rstrip(" \t\r")
            match = SECTION_PATTERN.match(line)
            if match is not None:
                name = match.group(1).lower()
                next_section = _SECTION_BY_NAME.get(name)
                if next_section is not None:
                    if section is not None:
                        self._apply_section(section, "".join(buffer))
                    section = next_section
                    buffer = []
                    continue
                # The open section keeps accumulating past unknown markers
                logger.warning("unknown section '%s' in script", name)

            if line.startswith("#"):
                continue

            if section is not None:
                buffer.append(line + "\n")

        if section is not None:
            self._apply_section(section, "".join(buffer))

    def load_from_file(self, path: Path) -> None:
        """Parse an option file if it can be read; unreadable files are ignored."""
        try:
            data = path.read_text(encoding="utf-8")
        except OSError:
            return
        self.load_from_text(data)

    def fill_from(self, previous: "UploadOptions") -> None:
        """Inherit metadata from a previous session where none was given.

        Only empty or false fields are filled; values already present (from
        the command line) win.
        """
        if not self.title:
            self.title = previous.title
        if not self.description:
            self.description = previous.description
        if not self.issue:
            self.issue = previous.issue
        if not self.reviewers:
            self.reviewers = list(previous.reviewers)
        if not self.cc:
            self.cc = list(previous.cc)
        if not self.draft:
            self.draft = previous.draft
        if not self.wip:
            self.wip = previous.wip
        if not self.private:
            self.private = previous.private

    def _apply_section(self, section: Section, text: str) -> None:
        text = text.strip()
        if not text:
            return

        if section is Section.TITLE:
            self.title = text.split("\n")[0]
        elif section is Section.DESCRIPTION:
            self.description = text
        elif section is Section.ISSUE:
            self.issue = ",".join(text.split("\n"))
        elif section is Section.REVIEWER:
            self.reviewers = _people_lines(text)
        elif section is Section.CC:
            self.cc = _people_lines(text)
        elif section is Section.DRAFT or section is Section.PRIVATE:
            value = parse_bool_token(text)
            if value is None:
                logger.warning("cannot turn '%s' to boolean", text)
                return
            if section is Section.DRAFT:
                self.draft = value
            else:
                self.private = value


def _people_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def split_people(values: list[str]) -> list[str]:
    """Split comma-separated user lists into trimmed, non-empty names.

    Order and duplicates are preserved.

    Example:
        >>> split_people(["alice, bob", " ", "carol"])
        ['alice', 'bob', 'carol']
    """
    people: list[str] = []
    for value in values:
        for name in value.split(","):
            name = name.strip()
            if name:
                people.append(name)
    return people
