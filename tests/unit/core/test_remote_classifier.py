"""Tests for review server classification."""

import logging
import threading

import httpx
import pytest

from repo_upload.core.errors import RemoteClassificationError
from repo_upload.core.policy import UploadPolicy
from repo_upload.core.remote.classifier import (
    RemoteClassifier,
    classify_review_url,
    normalize_review_url,
    remote_ssh_info_key,
    remote_type_key,
)
from repo_upload.core.remote.types import RemoteClassification, RemoteType, ReviewRemote
from tests.fakes.config_store import FakeConfigStore


class RecordingTransport(httpx.MockTransport):
    """Mock transport that answers with a fixed response and records URLs."""

    def __init__(self, status_code: int = 200, body: str = "") -> None:
        self.requested: list[str] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requested.append(str(request.url))
            return httpx.Response(status_code, text=body)

        super().__init__(_handler)


def _client(transport: httpx.BaseTransport) -> httpx.Client:
    return httpx.Client(transport=transport)


def _failing_client() -> httpx.Client:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.Client(transport=httpx.MockTransport(_handler))


@pytest.mark.parametrize(
    ("review", "expected"),
    [
        ("https://review.example.com/", ("https://review.example.com", None)),
        ("review.example.com", ("http://review.example.com", None)),
        ("persistent-https://review.example.com", ("https://review.example.com", None)),
        ("https://review.example.com/Gerrit", ("https://review.example.com", RemoteType.GERRIT)),
        ("https://review.example.com/agit/", ("https://review.example.com", RemoteType.AGIT)),
        ("https://review.example.com/ssh_info", ("https://review.example.com", None)),
    ],
)
def test_normalize_review_url(review: str, expected: tuple) -> None:
    assert normalize_review_url(review) == expected


def test_empty_review_url_is_unknown_without_request() -> None:
    transport = RecordingTransport()

    result = classify_review_url("", client=_client(transport), policy=UploadPolicy())

    assert result == RemoteClassification(type=RemoteType.UNKNOWN)
    assert transport.requested == []


def test_gerrit_suffix_still_queries_for_connection_info() -> None:
    transport = RecordingTransport(body="review.example.com 29418\n")

    result = classify_review_url(
        "https://review.example.com/gerrit", client=_client(transport), policy=UploadPolicy()
    )

    assert result.type is RemoteType.GERRIT
    assert result.connection_info == "review.example.com 29418"
    assert transport.requested == ["https://review.example.com/ssh_info"]


def test_not_available_means_gerrit() -> None:
    transport = RecordingTransport(body="NOT_AVAILABLE")

    result = classify_review_url(
        "https://review.example.com", client=_client(transport), policy=UploadPolicy()
    )

    assert result == RemoteClassification(type=RemoteType.GERRIT)


def test_not_available_keeps_suffix_type() -> None:
    transport = RecordingTransport(body="NOT_AVAILABLE\n")

    result = classify_review_url(
        "https://review.example.com/agit", client=_client(transport), policy=UploadPolicy()
    )

    assert result.type is RemoteType.AGIT


def test_html_page_means_unknown() -> None:
    transport = RecordingTransport(body="<html><body>Sign in</body></html>\n")

    result = classify_review_url(
        "https://review.example.com", client=_client(transport), policy=UploadPolicy()
    )

    assert result == RemoteClassification(type=RemoteType.UNKNOWN)


def test_error_status_means_unknown() -> None:
    transport = RecordingTransport(status_code=404, body="not found")

    result = classify_review_url(
        "https://review.example.com", client=_client(transport), policy=UploadPolicy()
    )

    assert result == RemoteClassification(type=RemoteType.UNKNOWN)


def test_connection_info_is_capped() -> None:
    body = "\n".join(f"line {i}" for i in range(20)) + "\n"
    transport = RecordingTransport(body=body)

    result = classify_review_url(
        "https://review.example.com", client=_client(transport), policy=UploadPolicy()
    )

    assert result.type is RemoteType.UNKNOWN
    assert result.connection_info.split("\n") == [f"line {i}" for i in range(11)]


def test_host_port_info_skips_ssh_info() -> None:
    transport = RecordingTransport()
    policy = UploadPolicy(host_port_info="review.example.com 29418")

    result = classify_review_url(
        "https://review.example.com", client=_client(transport), policy=policy
    )

    assert result == RemoteClassification(
        type=RemoteType.GERRIT, connection_info="review.example.com 29418"
    )
    assert transport.requested == []


@pytest.mark.parametrize("review", ["ssh://review.example.com", "sso://review.example.com"])
def test_ssh_and_sso_urls_skip_ssh_info(review: str) -> None:
    transport = RecordingTransport()

    result = classify_review_url(
        review, client=_client(transport), policy=UploadPolicy(), ssh_info_hint="cached"
    )

    assert result == RemoteClassification(type=RemoteType.GERRIT, connection_info="cached")
    assert transport.requested == []


def test_ignore_ssh_info_skips_ssh_info() -> None:
    transport = RecordingTransport()

    result = classify_review_url(
        "https://review.example.com/agit",
        client=_client(transport),
        policy=UploadPolicy(ignore_ssh_info=True),
    )

    assert result.type is RemoteType.AGIT
    assert transport.requested == []


def test_transport_failure_raises() -> None:
    with pytest.raises(RemoteClassificationError, match="cannot get ssh_info"):
        classify_review_url(
            "https://review.example.com", client=_failing_client(), policy=UploadPolicy()
        )


class TestRemoteClassifier:
    """Tests for RemoteClassifier caching and configured types."""

    def test_reuses_result_for_same_remote(self) -> None:
        transport = RecordingTransport(body="NOT_AVAILABLE")
        classifier = RemoteClassifier(_client(transport), UploadPolicy(), FakeConfigStore())
        remote = ReviewRemote(name="origin", review="https://review.example.com")

        first = classifier.classify(remote)
        second = classifier.classify(remote)

        assert first == second
        assert len(transport.requested) == 1

    def test_configured_type_skips_ssh_info(self) -> None:
        transport = RecordingTransport()
        store = FakeConfigStore(
            {remote_type_key("origin"): "agit", remote_ssh_info_key("origin"): "host 22"}
        )
        classifier = RemoteClassifier(_client(transport), UploadPolicy(), store)

        result = classifier.classify(ReviewRemote(name="origin", review="https://x.example.com"))

        assert result == RemoteClassification(type=RemoteType.AGIT, connection_info="host 22")
        assert transport.requested == []

    def test_no_cache_ignores_configured_type(self) -> None:
        transport = RecordingTransport(body="NOT_AVAILABLE")
        store = FakeConfigStore({remote_type_key("origin"): "agit"})
        classifier = RemoteClassifier(_client(transport), UploadPolicy(), store, no_cache=True)

        result = classifier.classify(ReviewRemote(name="origin", review="https://x.example.com"))

        assert result.type is RemoteType.GERRIT
        assert len(transport.requested) == 1

    def test_unrecognized_configured_type_queries_ssh_info(self) -> None:
        transport = RecordingTransport(body="NOT_AVAILABLE")
        store = FakeConfigStore({remote_type_key("origin"): "svn"})
        classifier = RemoteClassifier(_client(transport), UploadPolicy(), store)

        result = classifier.classify(ReviewRemote(name="origin", review="https://x.example.com"))

        assert result.type is RemoteType.GERRIT

    def test_classification_is_not_written_back(self) -> None:
        transport = RecordingTransport(body="NOT_AVAILABLE")
        store = FakeConfigStore()
        classifier = RemoteClassifier(_client(transport), UploadPolicy(), store)

        classifier.classify(ReviewRemote(name="origin", review="https://x.example.com"))

        assert store.values == {}
        assert store.save_count == 0


def test_redirect_loop_raises() -> None:
    def _redirect_to_self(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": str(request.url)})

    client = httpx.Client(transport=httpx.MockTransport(_redirect_to_self), follow_redirects=True)

    with pytest.raises(RemoteClassificationError, match="cannot get ssh_info"):
        classify_review_url("http://review.example.com", client=client, policy=UploadPolicy())


def test_untyped_connection_info_warns(caplog: pytest.LogCaptureFixture) -> None:
    transport = RecordingTransport(body='{"host": "review.example.com", "port": 29418}\n')

    with caplog.at_level(logging.WARNING):
        result = classify_review_url(
            "https://review.example.com", client=_client(transport), policy=UploadPolicy()
        )

    assert result.type is RemoteType.UNKNOWN
    assert result.connection_info == '{"host": "review.example.com", "port": 29418}'
    assert "names no review type" in caplog.text


def test_slow_remote_does_not_block_other_remotes() -> None:
    entered = threading.Event()
    released = threading.Event()
    waited: list[bool] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "slow.example.com":
            entered.set()
            waited.append(released.wait(timeout=5))
        else:
            released.set()
        return httpx.Response(200, text="NOT_AVAILABLE")

    classifier = RemoteClassifier(
        httpx.Client(transport=httpx.MockTransport(_handler)), UploadPolicy(), FakeConfigStore()
    )
    slow = threading.Thread(
        target=classifier.classify,
        args=(ReviewRemote(name="slow", review="https://slow.example.com"),),
    )
    slow.start()
    assert entered.wait(timeout=5)

    fast = classifier.classify(ReviewRemote(name="fast", review="https://fast.example.com"))
    slow.join(timeout=10)

    assert fast.type is RemoteType.GERRIT
    assert waited == [True]
