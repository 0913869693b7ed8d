"""Remote and classification data types."""

from dataclasses import dataclass
from enum import Enum


class RemoteType(Enum):
    """Kind of code review server behind a remote."""

    UNKNOWN = "unknown"
    GERRIT = "gerrit"
    AGIT = "agit"

    @staticmethod
    def parse(value: str) -> "RemoteType | None":
        """Parse a configured type name (case-insensitive).

        Returns None for empty or unrecognized names.
        """
        try:
            return RemoteType(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ReviewRemote:
    """A git remote and the review endpoint associated with it."""

    name: str
    review: str
    url: str = ""


@dataclass(frozen=True)
class RemoteClassification:
    """Result of classifying a review endpoint."""

    type: RemoteType
    connection_info: str = ""
