"""The upload script presented to the operator in an editor.

The script has two steps separated by a fixed marker line:

    ##############################################################################
    # Step 1: Input your options for code review
    ...option sections (see upload_options)...

    ##############################################################################
    # Step 2: Select project and branches for upload
    ...
    # project src/app/:
    #  branch fix-crash ( 2 commit(s)) to remote branch main:
    #         1a2b3c4 Fix crash on empty manifest
    #         5d6e7f8 Add regression test

Everything before the marker is parsed as options. After it, project lines set
the current project and every uncommented branch line selects that branch.
Unknown projects or branches mean the operator changed structural lines, which
aborts the whole upload.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from repo_upload.core.errors import ScriptCorruptionError
from repo_upload.core.options_store import OptionStore
from repo_upload.core.policy import UploadPolicy
from repo_upload.core.repository.abc import PendingBranch, Project, resolve_dest_branch
from repo_upload.core.upload_options import UploadOptions

BRANCH_SELECTION_MARKER = "# Step 2: Select project and branches for upload"
MAX_LISTED_COMMITS = 10

PROJECT_PATTERN = re.compile(r"^#?\s*project\s*([^\s]+)/:$")
BRANCH_PATTERN = re.compile(r"^\s*branch\s*([^\s(]+)\s*\(.*")

_RULE = "#" * 78

_OPTIONS_HEADER = [
    _RULE,
    "# Step 1: Input your options for code review",
    "#",
    "# Note: Input your options below the comments and keep the comments unchanged",
    _RULE,
    "",
]

_OPTIONS_HEADER_PUBLISHED = [
    _RULE,
    "# Step 1: Input your options for code review",
    "#",
    "# Note: Input your options below the comments and keep the comments unchanged,",
    "#       and options which work only for new created code review are hidden.",
    _RULE,
    "",
]

_SELECTION_HEADER = [
    "",
    _RULE,
    BRANCH_SELECTION_MARKER,
    "#",
    "# Note: Uncomment the branches to upload, and not touch the project lines",
    _RULE,
    "",
]


@dataclass(frozen=True)
class EditScript:
    """A rendered upload script and what is needed to read it back.

    Attributes:
        text: Document shown to the operator
        options_file: Where options for this destination branch are persisted
        published: True if every offered branch already has a review
        projects: Offered projects keyed by path
        branches: Offered branches keyed by project name, then branch name
    """

    text: str
    options_file: Path
    published: bool
    projects: Mapping[str, Project]
    branches: Mapping[str, Mapping[str, PendingBranch]]


def group_by_project(branches: Sequence[PendingBranch]) -> dict[str, list[PendingBranch]]:
    """Group branches by project path, keeping their order within a project."""
    grouped: dict[str, list[PendingBranch]] = {}
    for branch in branches:
        grouped.setdefault(branch.project.path, []).append(branch)
    return grouped


def branch_line_prefix(
    branches_by_project: Mapping[str, Sequence[PendingBranch]], policy: UploadPolicy
) -> str:
    """Choose whether branches start selected (" ") or commented out ("#")."""
    if policy.assume_yes:
        return " "
    if policy.assume_no:
        return "#"
    if len(branches_by_project) == 1:
        (only,) = branches_by_project.values()
        if len(only) == 1:
            return " "
    return "#"


def build_script(
    branches_by_project: Mapping[str, Sequence[PendingBranch]],
    options: UploadOptions,
    store: OptionStore,
    policy: UploadPolicy,
) -> EditScript:
    """Render the upload script.

    Options from the previous session fill in whatever the command line left
    empty; this mutates options.
    """
    prefix = branch_line_prefix(branches_by_project, policy)
    selection = list(_SELECTION_HEADER)
    published = True
    first_dest: str | None = None
    projects: dict[str, Project] = {}
    branches_index: dict[str, dict[str, PendingBranch]] = {}

    for path in sorted(branches_by_project):
        branches = branches_by_project[path]
        project = branches[0].project
        selection.append("#")
        selection.append(f"# project {project.path}/:")

        by_name: dict[str, PendingBranch] = {}
        for branch in branches:
            if by_name:
                selection.append("#")
            dest = resolve_dest_branch(branch, options)
            if first_dest is None:
                first_dest = dest
            selection.append(
                f"{prefix}  branch {branch.name} ({len(branch.commits):2d} commit(s))"
                f" to remote branch {dest}:"
            )
            for commit in branch.commits[:MAX_LISTED_COMMITS]:
                selection.append(f"#         {commit}")
            if len(branch.commits) > MAX_LISTED_COMMITS:
                selection.append("#         ... ...")
            if not branch.published:
                published = False
            by_name[branch.name] = branch

        projects[project.path] = project
        branches_index[project.name] = by_name
    selection.append("")

    options_file = store.path_for(first_dest or "")
    options.fill_from(store.load(options_file))

    header = _OPTIONS_HEADER_PUBLISHED if published else _OPTIONS_HEADER
    lines = [*header, *options.export(published), *selection]
    return EditScript(
        text="\n".join(lines),
        options_file=options_file,
        published=published,
        projects=projects,
        branches=branches_index,
    )


def options_section(edited: str) -> str:
    """Get the part of an edited script before the branch selection marker."""
    return edited.split(BRANCH_SELECTION_MARKER, 1)[0]


def parse_selection(edited: str, script: EditScript) -> list[PendingBranch]:
    """Read the selected branches back from an edited script.

    Raises:
        ScriptCorruptionError: If a project or branch is unknown, a branch
            precedes any project line, or nothing is selected
    """
    selected: list[PendingBranch] = []
    project: Project | None = None
    in_selection = False

    for raw_line in edited.split("\n"):
        line = raw_line.rstrip("\r")
        if not in_selection:
            if line == BRANCH_SELECTION_MARKER:
                in_selection = True
            continue

        project_match = PROJECT_PATTERN.match(line)
        if project_match is not None:
            path = project_match.group(1)
            if path not in script.projects:
                raise ScriptCorruptionError(f"project {path} not available for upload")
            project = script.projects[path]
            continue

        branch_match = BRANCH_PATTERN.match(line)
        if branch_match is not None:
            name = branch_match.group(1)
            if project is None:
                raise ScriptCorruptionError(f"project for branch {name} not in script")
            branch = script.branches[project.name].get(name)
            if branch is None:
                raise ScriptCorruptionError(f"branch {name} not in {project.path}")
            selected.append(branch)

    if not selected:
        raise ScriptCorruptionError("nothing uncommented for upload")
    return selected
