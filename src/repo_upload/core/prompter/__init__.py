from repo_upload.core.prompter.abc import Prompter, answer_is_true
from repo_upload.core.prompter.real import RealPrompter

__all__ = ["Prompter", "RealPrompter", "answer_is_true"]
