"""Console prompter using click."""

import click

from repo_upload.core.prompter.abc import Prompter


class RealPrompter(Prompter):
    def ask(self, question: str, default: str) -> str:
        return click.prompt(
            question,
            default=default,
            show_default=False,
            prompt_suffix="",
            err=True,
        )
