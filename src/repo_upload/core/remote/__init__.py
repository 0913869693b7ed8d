"""Review server classification.

Decides how a push reaches a remote's review server: direct push, Gerrit
style ``refs/for/`` or AGit.
"""

from repo_upload.core.remote.classifier import RemoteClassifier, classify_review_url
from repo_upload.core.remote.types import RemoteClassification, RemoteType, ReviewRemote

__all__ = [
    "RemoteClassification",
    "RemoteClassifier",
    "RemoteType",
    "ReviewRemote",
    "classify_review_url",
]
