"""Text editing interface used for the upload script."""

from abc import ABC, abstractmethod


class Editor(ABC):
    """Let the operator edit a text document."""

    @abstractmethod
    def edit(self, text: str) -> str:
        """Present text for editing and return the edited result."""
        ...
