"""Classify a remote's review server from its review URL.

The classification decides the push transport: Gerrit servers take
``refs/for/<branch>`` pushes, AGit servers take ``refs/for/<branch>/<topic>``
with push options, and anything unknown gets a direct push.

Classification is resolved in order, stopping at the first rule that applies:

1. No review URL: Unknown.
2. URL suffixes ``/gerrit`` and ``/agit`` name the type explicitly.
3. Externally supplied host/port info, ``ssh:``/``sso:`` URLs, or an ignore
   switch: Gerrit unless otherwise known, with no network call.
4. Query ``<url>/ssh_info`` over HTTP and interpret the first line.
"""

import logging
import threading

import httpx

from repo_upload.core.config_store.abc import ConfigStore
from repo_upload.core.errors import RemoteClassificationError
from repo_upload.core.policy import UploadPolicy
from repo_upload.core.remote.types import RemoteClassification, RemoteType, ReviewRemote

logger = logging.getLogger(__name__)

REMOTE_CALL_TIMEOUT = 10.0
SSH_INFO_MAX_LINES = 11
NOT_AVAILABLE = "NOT_AVAILABLE"

_PERSISTENT_PREFIX = "persistent-"
_KNOWN_SCHEMES = ("http", "https", "sso", "ssh")


def create_http_client(policy: UploadPolicy) -> httpx.Client:
    """Create the client shared by all ssh_info requests of one run."""
    return httpx.Client(
        timeout=httpx.Timeout(REMOTE_CALL_TIMEOUT),
        limits=httpx.Limits(max_keepalive_connections=1, keepalive_expiry=REMOTE_CALL_TIMEOUT),
        verify=not policy.no_cert_checks,
        follow_redirects=True,
    )


def normalize_review_url(review: str) -> tuple[str, RemoteType | None]:
    """Strip decorations from a review URL.

    Returns:
        Tuple of (base URL, type named by a suffix or None)

    Example:
        >>> normalize_review_url("review.example.com/Gerrit")
        ('http://review.example.com', <RemoteType.GERRIT: 'gerrit'>)
    """
    url = review.rstrip("/")
    remote_type: RemoteType | None = None

    url = url.removeprefix(_PERSISTENT_PREFIX)
    scheme = url.split(":", 1)[0]
    if scheme not in _KNOWN_SCHEMES:
        url = "http://" + url

    if url.lower().endswith("/gerrit"):
        url = url[: -len("/gerrit")]
        remote_type = RemoteType.GERRIT
    if url.lower().endswith("/agit"):
        url = url[: -len("/agit")]
        remote_type = RemoteType.AGIT
    url = url.removesuffix("/ssh_info")

    return url, remote_type


def classify_review_url(
    review: str,
    *,
    client: httpx.Client,
    policy: UploadPolicy,
    type_hint: RemoteType | None = None,
    ssh_info_hint: str = "",
) -> RemoteClassification:
    """Classify the review server at a URL.

    Args:
        review: Review URL from the remote definition; empty means no review
            server
        client: HTTP client used for the ssh_info request
        policy: Switches for host/port info and ssh_info probing
        type_hint: Type known up front, kept unless a URL suffix overrides it
        ssh_info_hint: Connection info known up front

    Returns:
        The classification; an unreachable type degrades to Unknown

    Raises:
        RemoteClassificationError: If the ssh_info request cannot be transmitted
    """
    if review == "":
        return RemoteClassification(type=RemoteType.UNKNOWN)

    url, suffix_type = normalize_review_url(review)
    remote_type = suffix_type if suffix_type is not None else type_hint

    if policy.host_port_info:
        return RemoteClassification(
            type=remote_type or RemoteType.GERRIT,
            connection_info=policy.host_port_info,
        )

    if url.startswith(("sso:", "ssh:")) or policy.ignore_ssh_info:
        return RemoteClassification(
            type=remote_type or RemoteType.GERRIT,
            connection_info=ssh_info_hint,
        )

    info_url = url + "/ssh_info"
    logger.debug("start checking ssh_info from %s", info_url)

    try:
        with client.stream("GET", info_url, headers={"Accept": "application/json"}) as response:
            if response.status_code >= 300:
                logger.error("bad ssh_info response, status: %d", response.status_code)
                return RemoteClassification(type=remote_type or RemoteType.UNKNOWN)

            lines = response.iter_lines()
            first = next(lines, "")

            # A leading '<' is most likely an HTML login page, not ssh_info
            if first == NOT_AVAILABLE or first.startswith("<"):
                if remote_type is None:
                    if first == NOT_AVAILABLE:
                        remote_type = RemoteType.GERRIT
                    else:
                        remote_type = RemoteType.UNKNOWN
                return RemoteClassification(type=remote_type)

            collected = [first]
            for line in lines:
                collected.append(line)
                if len(collected) >= SSH_INFO_MAX_LINES:
                    break
    except (httpx.RequestError, httpx.InvalidURL) as e:
        raise RemoteClassificationError(f"cannot get ssh_info from {info_url}: {e}") from e

    connection_info = "\n".join(collected)
    if remote_type is None:
        # Without a type the push goes straight to refs/heads, bypassing review
        logger.warning(
            "%s answered ssh_info but names no review type; set manifest.remote.<name>.type"
            " to upload for review",
            info_url,
        )
        remote_type = RemoteType.UNKNOWN
    return RemoteClassification(type=remote_type, connection_info=connection_info)


def remote_type_key(remote_name: str) -> str:
    return f"manifest.remote.{remote_name}.type"


def remote_ssh_info_key(remote_name: str) -> str:
    return f"manifest.remote.{remote_name}.sshinfo"


class RemoteClassifier:
    """Classify remotes, caching one result per remote name for a run.

    A type configured under ``manifest.remote.<name>.type`` is used without
    probing unless no_cache is set. The cache is never written back.
    """

    def __init__(
        self,
        client: httpx.Client,
        policy: UploadPolicy,
        config_store: ConfigStore,
        *,
        no_cache: bool = False,
    ) -> None:
        self._client = client
        self._policy = policy
        self._config_store = config_store
        self._no_cache = no_cache
        self._cache: dict[str, RemoteClassification] = {}
        self._remote_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def classify(self, remote: ReviewRemote) -> RemoteClassification:
        """Classify a remote, reusing an earlier result for the same name.

        Raises:
            RemoteClassificationError: If the ssh_info request cannot be transmitted
        """
        with self._lock:
            cached = self._cache.get(remote.name)
            if cached is not None:
                return cached
            remote_lock = self._remote_locks.setdefault(remote.name, threading.Lock())

        # Different remotes are classified concurrently; one remote is classified once
        with remote_lock:
            with self._lock:
                cached = self._cache.get(remote.name)
            if cached is not None:
                return cached
            result = self._load(remote)
            with self._lock:
                self._cache[remote.name] = result
            return result

    def _load(self, remote: ReviewRemote) -> RemoteClassification:
        ssh_info = ""
        if not self._no_cache:
            ssh_info = self._config_store.get(remote_ssh_info_key(remote.name)) or ""
            configured = self._config_store.get(remote_type_key(remote.name))
            configured_type = RemoteType.parse(configured) if configured else None
            if configured_type is not None:
                logger.debug("remote %s configured as %s", remote.name, configured_type.value)
                return RemoteClassification(type=configured_type, connection_info=ssh_info)

        result = classify_review_url(
            remote.review,
            client=self._client,
            policy=self._policy,
            ssh_info_hint=ssh_info,
        )
        logger.debug("remote %s classified as %s", remote.name, result.type.value)
        return result
