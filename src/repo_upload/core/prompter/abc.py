"""Console question/answer interface."""

from abc import ABC, abstractmethod

from repo_upload.core.upload_options import parse_bool_token


def answer_is_true(answer: str) -> bool:
    """Check whether a console answer is affirmative (y, yes, true, ...)."""
    return parse_bool_token(answer.strip().lower()) is True


class Prompter(ABC):
    """Ask the operator a question on the console."""

    @abstractmethod
    def ask(self, question: str, default: str) -> str:
        """Ask a question.

        Args:
            question: Prompt text, printed as is
            default: Answer used when the operator just presses enter

        Returns:
            The answer text
        """
        ...
