"""Probe configuration model for check-tl-sg108e."""

from __future__ import annotations

import logging
import math
import pathlib
from collections.abc import Mapping
from dataclasses import dataclass, field

from check_tl_sg108e.client.errors import TPLinkConfigError
from check_tl_sg108e.client.http import DEFAULT_TIMEOUT_S

logger = logging.getLogger(__name__)

DEFAULT_USERNAME: str = "admin"

# Environment variables consulted when the matching flag is absent.
ENV_HOSTNAME: str = "TPLINK_HOST"
ENV_USERNAME: str = "TPLINK_USERNAME"
ENV_PASSWORD: str = "TPLINK_PASSWORD"
ENV_TIMEOUT: str = "TPLINK_TIMEOUT"

# Shared password file, tried after the per-host ``.<hostname>_password``.
SHARED_PASSWORD_FILE: str = ".tplink"


@dataclass(frozen=True)
class ProbeConfig:
    """Everything one probe run needs to reach and log in to a switch.

    Attributes:
        hostname: Switch host name, IP address or base URL.
        username: Login username.
        password: Login password (may be empty).
        timeout_s: Request timeout in seconds.
        send_cpassword: Send the empty ``cpassword`` login field.
        verify_tls: Verify the certificate of an ``https://`` hostname.
    """

    hostname: str
    username: str = DEFAULT_USERNAME
    password: str = field(default="", repr=False)
    timeout_s: float = DEFAULT_TIMEOUT_S
    send_cpassword: bool = False
    verify_tls: bool = True

    @classmethod
    def from_sources(
        cls,
        hostname: str | None = None,
        username: str | None = None,
        password: str | None = None,
        timeout_s: float | None = None,
        send_cpassword: bool = False,
        verify_tls: bool = True,
        environ: Mapping[str, str] | None = None,
        search_dir: pathlib.Path | None = None,
    ) -> ProbeConfig:
        """Build a :class:`ProbeConfig` from flags, environment and files.

        Explicit arguments win over environment variables.  The password
        falls back to :func:`resolve_password`.

        Args:
            hostname: ``--hostname`` value, or ``None``.
            username: ``--username`` value, or ``None``.
            password: ``--password`` value, or ``None``.
            timeout_s: ``--timeout`` value, or ``None``.
            send_cpassword: ``--cpassword`` flag.
            verify_tls: Cleared by ``--insecure``.
            environ: Environment mapping (default: empty).
            search_dir: Directory holding password files (default: cwd).

        Returns:
            A fully-populated :class:`ProbeConfig`.

        Raises:
            TPLinkConfigError: If no hostname is given or the timeout is invalid.
        """
        env: Mapping[str, str] = environ if environ is not None else {}

        host = hostname or env.get(ENV_HOSTNAME, "")
        if not host:
            raise TPLinkConfigError(
                f"No switch hostname given (use --hostname or {ENV_HOSTNAME})"
            )

        if timeout_s is None:
            raw_timeout = env.get(ENV_TIMEOUT)
            timeout_s = _parse_timeout(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_S
        if not math.isfinite(timeout_s) or timeout_s <= 0:
            raise TPLinkConfigError(
                f"Timeout must be a positive number, got {timeout_s!r}"
            )

        return cls(
            hostname=host,
            username=username or env.get(ENV_USERNAME) or DEFAULT_USERNAME,
            password=resolve_password(
                host,
                password if password is not None else env.get(ENV_PASSWORD),
                search_dir,
            ),
            timeout_s=timeout_s,
            send_cpassword=send_cpassword,
            verify_tls=verify_tls,
        )


def resolve_password(
    hostname: str,
    explicit: str | None,
    search_dir: pathlib.Path | None = None,
) -> str:
    """Return the password to log in to *hostname* with.

    Order: *explicit*, then ``.<hostname>_password``, then ``.tplink`` in
    *search_dir*, then the empty string.  A trailing line break in a
    password file is not part of the password.

    Args:
        hostname: Switch host name, used to name the per-host file.
        explicit: Password from a flag or the environment, or ``None``.
        search_dir: Directory holding the password files (default: cwd).

    Returns:
        The resolved password.
    """
    if explicit is not None:
        return explicit
    base = search_dir if search_dir is not None else pathlib.Path.cwd()
    for name in (f".{hostname}_password", SHARED_PASSWORD_FILE):
        path = base / name
        try:
            secret = path.read_text().rstrip("\r\n")
        except OSError:
            continue
        logger.debug("Using password from %s", path)
        return secret
    logger.debug("No password configured for %s; using empty password", hostname)
    return ""


def _parse_timeout(raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise TPLinkConfigError(f"{ENV_TIMEOUT} must be a number, got {raw!r}") from exc
