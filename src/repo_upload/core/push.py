"""Translate a push request into the git push command for its review server.

- Gerrit: ``<rev>:refs/for/<dest>%<params>`` with reviewers and flags as
  Gerrit ref parameters
- AGit: ``<rev>:refs/for/<dest>/<local-branch>`` with review metadata as push
  options
- Unknown: ``<rev>:refs/heads/<dest>``, a plain push
"""

import base64

from repo_upload.core.remote.types import RemoteType
from repo_upload.core.repository.abc import REFS_HEADS, PushRequest


def _gerrit_refspec(request: PushRequest, dest: str) -> str:
    options = request.options
    params: list[str] = []
    if options.auto_topic:
        params.append(f"topic={request.branch.name}")
    params.extend(f"r={name}" for name in request.reviewers)
    params.extend(f"cc={name}" for name in request.cc)
    # Gerrit replaced drafts with work-in-progress changes
    if options.wip or options.draft:
        params.append("wip")
    if options.private:
        params.append("private")
    if options.no_emails:
        params.append("notify=NONE")

    refspec = f"{request.revision}:refs/for/{dest}"
    if params:
        refspec += "%" + ",".join(params)
    return refspec


def _agit_push_options(request: PushRequest) -> list[str]:
    options = request.options
    push_options: list[str] = []
    if options.title:
        push_options.append(f"title={options.title}")
    if options.description:
        # Push options cannot carry newlines
        encoded = base64.b64encode(options.description.encode("utf-8")).decode("ascii")
        push_options.append(f"description={{base64}}{encoded}")
    if options.issue:
        push_options.append(f"issue={options.issue}")
    if request.reviewers:
        push_options.append("reviewers=" + ",".join(request.reviewers))
    if request.cc:
        push_options.append("cc=" + ",".join(request.cc))
    if options.draft:
        push_options.append("draft=yes")
    if options.private:
        push_options.append("private=yes")
    if options.wip:
        push_options.append("wip=yes")
    if options.no_emails:
        push_options.append("notify=no")
    return push_options


def build_push_command(request: PushRequest) -> list[str]:
    """Build the git command that pushes a branch for review."""
    project = request.branch.project
    remote = project.remote.name if project.remote is not None else "origin"
    dest = request.dest_branch.removeprefix(REFS_HEADS)
    remote_type = request.classification.type

    push_options: list[str] = []
    if remote_type is RemoteType.GERRIT:
        refspec = _gerrit_refspec(request, dest)
    elif remote_type is RemoteType.AGIT:
        refspec = f"{request.revision}:refs/for/{dest}/{request.branch.name}"
        push_options.extend(_agit_push_options(request))
    else:
        refspec = f"{request.revision}:{REFS_HEADS}{dest}"
    push_options.extend(request.options.push_options)

    cmd = ["git"]
    if request.options.no_cert_checks:
        cmd.extend(["-c", "http.sslVerify=false"])
    cmd.append("push")
    for option in push_options:
        cmd.extend(["-o", option])
    cmd.extend([remote, refspec])
    return cmd
