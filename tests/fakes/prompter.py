"""Fake console prompter for testing."""

from repo_upload.core.prompter.abc import Prompter


class FakePrompter(Prompter):
    """Answers questions from a scripted list and records every question.

    Asking more questions than there are answers fails the test.
    """

    def __init__(self, answers: list[str] | None = None) -> None:
        self._answers = list(answers) if answers is not None else []
        self._questions: list[str] = []

    @property
    def questions(self) -> list[str]:
        """Questions asked so far. This property is for test assertions only."""
        return self._questions

    def ask(self, question: str, default: str) -> str:
        self._questions.append(question)
        if not self._answers:
            raise AssertionError(f"unexpected prompt: {question!r}")
        return self._answers.pop(0)
