"""Upload local branches for code review."""

import logging
from pathlib import Path

import click

from repo_upload.cli.ensure import Ensure
from repo_upload.cli.output import user_output
from repo_upload.core.confirm import (
    ConfirmCollector,
    EditorCollector,
    UploadConfirmer,
    choose_collector,
)
from repo_upload.core.context import UploadContext
from repo_upload.core.editor.abc import Editor
from repo_upload.core.editor.real import FileEditor
from repo_upload.core.errors import UploadError
from repo_upload.core.options_store import OptionStore
from repo_upload.core.policy import UploadPolicy
from repo_upload.core.remote.classifier import RemoteClassifier
from repo_upload.core.repository.abc import PendingBranch, Project, Repository
from repo_upload.core.upload_options import UploadOptions
from repo_upload.core.upload_runner import UploadRunner, report_results
from repo_upload.core.workspace import select_projects

logger = logging.getLogger(__name__)


def collect_candidates(
    repository: Repository,
    projects: list[Project],
    *,
    branch: str | None,
    current_branch: bool,
) -> dict[str, list[PendingBranch]]:
    """Find branches waiting for review, keyed by project path."""
    candidates: dict[str, list[PendingBranch]] = {}
    for project in projects:
        if current_branch:
            head = repository.current_branch(project)
            if head is None:
                logger.debug("%s is not on a branch, skipping", project.name)
                continue
            pending = repository.pending_branches_for(project, head)
        else:
            pending = repository.pending_branches_for(project, branch)
        if pending:
            candidates[project.path] = pending
    return candidates


@click.command("upload")
@click.argument("projects", nargs=-1)
@click.option(
    "--reviewers",
    "--re",
    "--reviewer",
    "reviewers",
    multiple=True,
    help="Request reviews from these people.",
)
@click.option("--cc", multiple=True, help="Also send email to these email addresses.")
@click.option("--br", "branch", default=None, help="Branch to upload.")
@click.option(
    "--cbr", "--current-branch", "current_branch", is_flag=True, help="Upload current git branch."
)
@click.option("-d", "--draft", is_flag=True, help="If specified, upload as a draft.")
@click.option("-p", "--private", is_flag=True, help="If specified, upload as a private change.")
@click.option(
    "-w", "--wip", is_flag=True, help="If specified, upload as a work-in-progress change."
)
@click.option("--no-emails", is_flag=True, help="If specified, do not send emails on upload.")
@click.option("--title", default="", help="Title for review.")
@click.option("--description", default="", help="Description for review.")
@click.option("--issue", default="", help="Related issues for review.")
@click.option(
    "-o",
    "--push-option",
    "push_options",
    multiple=True,
    help="Additional push options to transmit.",
)
@click.option("-D", "--dest", "dest", default="", help="Submit for review on this target branch.")
@click.option("--no-cert-checks", is_flag=True, help="Disable verifying ssl certs (unsafe).")
@click.option("--no-cache", is_flag=True, help="Ignore ssh-info cache, and recheck ssh-info API.")
@click.option("--no-edit", is_flag=True, help="If specified, do not open editor to confirm.")
@click.option("-y", "--assume-yes", is_flag=True, help="Select every branch for upload.")
@click.option("--assume-no", is_flag=True, help="Leave every branch unselected.")
@click.option(
    "-t", "--auto-topic", is_flag=True, hidden=True, help="Send local branch name for review."
)
@click.option("--mock-git-push", is_flag=True, hidden=True, help="Mock git-push for test.")
@click.option(
    "--mock-edit-script",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    hidden=True,
    help="Mock edit script result file.",
)
@click.pass_obj
def upload_cmd(
    ctx: UploadContext,
    projects: tuple[str, ...],
    reviewers: tuple[str, ...],
    cc: tuple[str, ...],
    branch: str | None,
    current_branch: bool,
    draft: bool,
    private: bool,
    wip: bool,
    no_emails: bool,
    title: str,
    description: str,
    issue: str,
    push_options: tuple[str, ...],
    dest: str,
    no_cert_checks: bool,
    no_cache: bool,
    no_edit: bool,
    assume_yes: bool,
    assume_no: bool,
    auto_topic: bool,
    mock_git_push: bool,
    mock_edit_script: Path | None,
) -> None:
    """Upload changes for code review.

    Lists every local branch with commits not yet on its remote branch in an
    editor. Fill in review options, uncomment the branches to upload, then
    save and quit.

    Examples:

    \b
      # Pick branches and options in the editor
      repo-upload upload

    \b
      # Upload the current branch after a yes/no confirmation
      repo-upload upload --cbr --no-edit --re alice
    """
    workspace = Ensure.in_workspace(ctx)

    try:
        policy = UploadPolicy.from_sources(
            ctx.global_config,
            ctx.environ,
            assume_yes=assume_yes,
            assume_no=assume_no,
            no_cert_checks=no_cert_checks,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    options = UploadOptions(
        title=title,
        description=description,
        issue=issue,
        reviewers=list(reviewers),
        cc=list(cc),
        draft=draft,
        private=private,
        wip=wip,
        dest_branch=dest,
        push_options=list(push_options),
        auto_topic=auto_topic,
        no_emails=no_emails,
        no_cert_checks=policy.no_cert_checks,
        mock_git_push=mock_git_push,
    )

    try:
        selected_projects = select_projects(workspace.projects, projects)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    candidates = collect_candidates(
        ctx.repository, selected_projects, branch=branch, current_branch=current_branch
    )
    if not candidates:
        user_output("no branches ready for upload")
        return

    editor: Editor = ctx.editor
    if mock_edit_script is not None:
        editor = FileEditor(mock_edit_script)

    collector = choose_collector(
        candidates,
        no_edit=no_edit,
        confirm=ConfirmCollector(UploadConfirmer(ctx.prompter, ctx.config_store)),
        editor=EditorCollector(editor, OptionStore(workspace.admin_dir), policy),
    )
    try:
        confirmed = collector.collect(candidates, options)
    except UploadError as e:
        raise click.ClickException(str(e)) from e

    with ctx.http_client_factory(policy) as client:
        classifier = RemoteClassifier(client, policy, ctx.config_store, no_cache=no_cache)
        runner = UploadRunner(ctx.repository, classifier, ctx.config_store, ctx.prompter)
        results = runner.upload_all(confirmed)

    report_results(results)
    Ensure.all_uploaded(results)
