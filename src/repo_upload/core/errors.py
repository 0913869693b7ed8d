"""Error taxonomy for the upload workflow.

All errors raised by core code derive from UploadError so the CLI boundary can
convert them into a single styled failure. Which errors are fatal to a whole
batch and which only fail one branch is decided by the caller:

- UserAbortedError: the operator declined a confirmation (one branch)
- PolicyBlockedError: a config switch forbids the upload (one branch)
- ScriptCorruptionError: the edited script references unknown projects or
  branches, or selects nothing (whole batch)
- RemoteClassificationError: the ssh_info request could not be transmitted
- PushError: the push itself failed (one branch)
"""


class UploadError(Exception):
    """Base class for upload workflow failures."""


class UserAbortedError(UploadError):
    """Raised when the operator declines an upload confirmation."""

    def __init__(self, message: str = "upload aborted by user") -> None:
        super().__init__(message)


class PolicyBlockedError(UploadError):
    """Raised when a configuration switch explicitly blocks an upload."""

    def __init__(self, key: str) -> None:
        super().__init__(f"upload blocked by {key} = false")
        self.key = key


class ScriptCorruptionError(UploadError):
    """Raised when the edited upload script cannot be mapped back to branches."""


class RemoteClassificationError(UploadError):
    """Raised when the review server could not be reached for classification."""


class PushError(UploadError):
    """Raised when pushing a branch for review fails."""
