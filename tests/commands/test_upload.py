"""Tests for the upload command."""

from pathlib import Path

from click.testing import CliRunner

from repo_upload.cli.cli import cli
from repo_upload.core.confirm import autoupload_key
from repo_upload.core.context import UploadContext
from repo_upload.core.edit_script import BRANCH_SELECTION_MARKER
from repo_upload.core.options_store import OptionStore
from repo_upload.core.remote.classifier import remote_type_key
from repo_upload.core.remote.types import RemoteType
from repo_upload.core.repository.abc import Project
from repo_upload.core.workspace import Workspace
from tests.fakes.config_store import FakeConfigStore
from tests.fakes.editor import FakeEditor, set_section, uncomment_branches
from tests.fakes.prompter import FakePrompter
from tests.fakes.repository import FakeRepository
from tests.test_utils.builders import REVIEW_URL, make_branch, make_project


def _workspace(tmp_path: Path, *projects: Project) -> Workspace:
    return Workspace(root=tmp_path, admin_dir=tmp_path / "admin", projects=list(projects))


def _gerrit_store(values: dict[str, str] | None = None) -> FakeConfigStore:
    return FakeConfigStore({remote_type_key("origin"): "gerrit", **(values or {})})


def test_outside_repository_fails(tmp_path: Path) -> None:
    ctx = UploadContext.for_test(repository=FakeRepository(), workspace=None)

    result = CliRunner().invoke(cli, ["upload"], obj=ctx)

    assert result.exit_code == 1
    assert "not inside a git repository" in result.stderr


def test_nothing_pending(tmp_path: Path) -> None:
    project = make_project("app")
    ctx = UploadContext.for_test(
        repository=FakeRepository(), workspace=_workspace(tmp_path, project)
    )

    result = CliRunner().invoke(cli, ["upload"], obj=ctx)

    assert result.exit_code == 0
    assert "no branches ready for upload" in result.stderr


def test_no_edit_confirms_single_branch(tmp_path: Path) -> None:
    project = make_project("app")
    branch = make_branch(project, "fix")
    repository = FakeRepository(pending={"app": [branch]})
    prompter = FakePrompter(["y"])
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        prompter=prompter,
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(cli, ["upload", "--no-edit", "--re", "alice,bob"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert prompter.questions == [f"to {REVIEW_URL} (y/N)? "]
    (request,) = repository.pushed
    assert request.reviewers == ["alice", "bob"]
    assert request.classification.type is RemoteType.GERRIT
    assert "[OK    ] app/            fix" in result.stderr


def test_no_edit_decline_aborts(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(pending={"app": [make_branch(project)]})
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        prompter=FakePrompter(["n"]),
    )

    result = CliRunner().invoke(cli, ["upload", "--no-edit"], obj=ctx)

    assert result.exit_code == 1
    assert "upload aborted by user" in result.stderr
    assert repository.pushed == []


def test_no_edit_blocked_by_autoupload(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(pending={"app": [make_branch(project)]})
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        config_store=FakeConfigStore({autoupload_key(REVIEW_URL): "false"}),
    )

    result = CliRunner().invoke(cli, ["upload", "--no-edit"], obj=ctx)

    assert result.exit_code == 1
    assert f"upload blocked by review.{REVIEW_URL}.autoupload = false" in result.stderr


def test_editor_selects_branches_and_saves_options(tmp_path: Path) -> None:
    project = make_project("app")
    b1 = make_branch(project, "b1")
    b2 = make_branch(project, "b2")
    repository = FakeRepository(pending={"app": [b1, b2]})

    def _edit(text: str) -> str:
        return set_section("Title", "Edited title")(uncomment_branches("b2")(text))

    editor = FakeEditor(edit_fn=_edit)
    workspace = _workspace(tmp_path, project)
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=workspace,
        editor=editor,
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(cli, ["upload", "--title", "From flag"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert [request.branch.name for request in repository.pushed] == ["b2"]
    assert repository.pushed[0].options.title == "Edited title"
    assert "From flag" in editor.edited_texts[0]
    saved = OptionStore(workspace.admin_dir).load(OptionStore(workspace.admin_dir).path_for("main"))
    assert saved.title == "Edited title"


def test_editor_with_nothing_selected_fails(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(
        pending={"app": [make_branch(project, "b1"), make_branch(project, "b2")]}
    )
    ctx = UploadContext.for_test(repository=repository, workspace=_workspace(tmp_path, project))

    result = CliRunner().invoke(cli, ["upload"], obj=ctx)

    assert result.exit_code == 1
    assert "nothing uncommented for upload" in result.stderr
    assert repository.pushed == []


def test_assume_yes_selects_every_branch(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(
        pending={"app": [make_branch(project, "b1"), make_branch(project, "b2")]}
    )
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(cli, ["upload", "-y"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert [request.branch.name for request in repository.pushed] == ["b1", "b2"]


def test_assume_yes_and_no_conflict(tmp_path: Path) -> None:
    project = make_project("app")
    ctx = UploadContext.for_test(
        repository=FakeRepository(pending={"app": [make_branch(project)]}),
        workspace=_workspace(tmp_path, project),
    )

    result = CliRunner().invoke(cli, ["upload", "--assume-yes", "--assume-no"], obj=ctx)

    assert result.exit_code == 2
    assert "cannot be used together" in result.stderr


def test_push_failure_reports_and_exits_nonzero(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(
        pending={"app": [make_branch(project, "b1"), make_branch(project, "b2")]},
        push_errors={"b1": "rejected"},
    )
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(cli, ["upload", "--assume-yes"], obj=ctx)

    assert result.exit_code == 1
    assert "[FAILED] app/            b1              (rejected)" in result.stderr
    assert "[OK    ] app/            b2" in result.stderr
    assert "some branches failed to upload" in result.stderr


def test_mock_edit_script_replaces_editor(tmp_path: Path) -> None:
    project = make_project("app")
    b1 = make_branch(project, "b1")
    repository = FakeRepository(pending={"app": [b1, make_branch(project, "b2")]})
    script = tmp_path / "edited.txt"
    script.write_text(
        "# [Title]\nScripted\n"
        f"{BRANCH_SELECTION_MARKER}\n"
        "# project app/:\n"
        "  branch b1 ( 1 commit(s)) to remote branch main:\n",
        encoding="utf-8",
    )
    editor = FakeEditor()
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        editor=editor,
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(cli, ["upload", "--mock-edit-script", str(script)], obj=ctx)

    assert result.exit_code == 0, result.output
    assert editor.edited_texts == []
    assert [request.branch.name for request in repository.pushed] == ["b1"]
    assert repository.pushed[0].options.title == "Scripted"


def test_current_branch_only(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(
        pending={"app": [make_branch(project, "b1"), make_branch(project, "b2")]},
        current_branches={"app": "b2"},
    )
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        prompter=FakePrompter(["y"]),
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(cli, ["upload", "--cbr", "--no-edit"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert [request.branch.name for request in repository.pushed] == ["b2"]


def test_dest_and_push_options_reach_push(tmp_path: Path) -> None:
    project = make_project("app")
    repository = FakeRepository(pending={"app": [make_branch(project, "b1")]})
    ctx = UploadContext.for_test(
        repository=repository,
        workspace=_workspace(tmp_path, project),
        config_store=_gerrit_store(),
    )

    result = CliRunner().invoke(
        cli, ["upload", "-D", "stable", "-o", "ci.skip", "--wip"], obj=ctx
    )

    assert result.exit_code == 0, result.output
    (request,) = repository.pushed
    assert request.dest_branch == "stable"
    assert request.options.push_options == ["ci.skip"]
    assert request.options.wip is True


def test_unknown_project_argument(tmp_path: Path) -> None:
    project = make_project("app")
    ctx = UploadContext.for_test(
        repository=FakeRepository(pending={"app": [make_branch(project)]}),
        workspace=_workspace(tmp_path, project),
    )

    result = CliRunner().invoke(cli, ["upload", "nowhere"], obj=ctx)

    assert result.exit_code == 1
    assert "project nowhere not found" in result.stderr
