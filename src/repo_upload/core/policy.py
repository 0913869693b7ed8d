"""Global policy switches for one upload run.

Collected once at the CLI entry point and passed explicitly to the confirmer
and the remote classifier; core code never reads the environment itself.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from repo_upload.core.global_config import GlobalConfig
from repo_upload.core.upload_options import FALSE_TOKENS

ENV_HOST_PORT_INFO = "REPO_HOST_PORT_INFO"
ENV_IGNORE_SSH_INFO = "REPO_IGNORE_SSH_INFO"
ENV_SSL_NO_VERIFY = "GIT_SSL_NO_VERIFY"


def _env_flag(value: str | None) -> bool:
    if value is None:
        return False
    value = value.strip().lower()
    return value != "" and value not in FALSE_TOKENS


@dataclass(frozen=True)
class UploadPolicy:
    """Switches that change how prompts and remote probing behave.

    Attributes:
        assume_yes: Pre-select every branch in the upload script
        assume_no: Comment out every branch in the upload script
        no_cert_checks: Skip TLS certificate verification when probing
        ignore_ssh_info: Never query ssh_info; assume Gerrit
        host_port_info: Externally supplied connection info; skips probing
    """

    assume_yes: bool = False
    assume_no: bool = False
    no_cert_checks: bool = False
    ignore_ssh_info: bool = False
    host_port_info: str = ""

    @staticmethod
    def from_sources(
        config: GlobalConfig,
        environ: Mapping[str, str],
        *,
        assume_yes: bool = False,
        assume_no: bool = False,
        no_cert_checks: bool = False,
    ) -> "UploadPolicy":
        """Build a policy from config file, environment and command-line flags.

        Later sources win: flags over environment over config file. Giving
        either assume flag on the command line replaces both config values.

        Raises:
            ValueError: If assume-yes and assume-no are both in effect
        """
        if assume_yes or assume_no:
            effective_yes, effective_no = assume_yes, assume_no
        else:
            effective_yes, effective_no = config.assume_yes, config.assume_no
        if effective_yes and effective_no:
            raise ValueError("--assume-yes and --assume-no cannot be used together")

        return UploadPolicy(
            assume_yes=effective_yes,
            assume_no=effective_no,
            no_cert_checks=(
                no_cert_checks
                or _env_flag(environ.get(ENV_SSL_NO_VERIFY))
                or config.no_cert_checks
            ),
            ignore_ssh_info=(
                environ.get(ENV_IGNORE_SSH_INFO, "") != "" or config.ignore_ssh_info
            ),
            host_port_info=environ.get(ENV_HOST_PORT_INFO, ""),
        )
