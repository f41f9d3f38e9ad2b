"""Low-level HTTP client wrapper for TP-Link Easy Smart web endpoints."""

from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Collection

import requests

from check_tl_sg108e.client.errors import TPLinkRequestError, TPLinkResponseError

logger = logging.getLogger(__name__)

try:
    VERSION: str = importlib.metadata.version("check-tl-sg108e")
except importlib.metadata.PackageNotFoundError:
    VERSION = "0.0.0"

_USER_AGENT: str = f"check-tl-sg108e/{VERSION}"

DEFAULT_TIMEOUT_S: float = 10.0


def _normalise_base_url(url: str) -> str:
    """Ensure the URL has a scheme and no trailing slash."""
    url = url.rstrip("/")
    if not url.startswith(("http://", "https://")):
        url = "http://" + url
    return url


class TPLinkHTTP:
    """Low-level HTTP wrapper around :class:`requests.Session`.

    Handles cookie persistence, a default ``User-Agent`` header, timeout,
    and maps transport/HTTP errors to :mod:`.errors` types.

    The switch does not always signal success with ``200``: ``logon.cgi``
    answers ``401`` on a successful login.  Callers list such statuses in
    *allow_status* and judge the body themselves.

    Args:
        base_url: Switch base URL or bare host, e.g. ``192.168.0.1``.
        timeout_s: Request timeout in seconds (default 10).
        verify_tls: Whether to verify TLS certificates (default True).
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        verify_tls: bool = True,
    ) -> None:
        self.base_url: str = _normalise_base_url(base_url)
        self.timeout_s: float = timeout_s
        self.verify_tls: bool = verify_tls
        self._session: requests.Session = requests.Session()
        self._session.headers.update({"User-Agent": _USER_AGENT})

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(
        self,
        path: str,
        allow_status: Collection[int] = (),
    ) -> requests.Response:
        """Send an HTTP GET to *path* and return the response.

        Args:
            path: URL path relative to :attr:`base_url`.
            allow_status: Non-2xx status codes to accept without raising.

        Returns:
            The :class:`requests.Response`.

        Raises:
            TPLinkRequestError: On any transport-level failure.
            TPLinkResponseError: On a non-2xx status not in *allow_status*.
        """
        url = self.base_url + path
        try:
            resp = self._session.get(
                url,
                timeout=self.timeout_s,
                verify=self.verify_tls,
            )
        except requests.exceptions.RequestException as exc:
            raise TPLinkRequestError(url, exc) from exc
        self._raise_for_status(resp, allow_status)
        return resp

    def post_form(
        self,
        path: str,
        data: dict[str, str] | None = None,
        allow_status: Collection[int] = (),
    ) -> requests.Response:
        """Send an HTTP POST with form-encoded *data* to *path*.

        Args:
            path: URL path relative to :attr:`base_url`.
            data: Optional form fields.
            allow_status: Non-2xx status codes to accept without raising.

        Returns:
            The :class:`requests.Response`.

        Raises:
            TPLinkRequestError: On any transport-level failure.
            TPLinkResponseError: On a non-2xx status not in *allow_status*.
        """
        url = self.base_url + path
        try:
            resp = self._session.post(
                url,
                data=data,
                timeout=self.timeout_s,
                verify=self.verify_tls,
            )
        except requests.exceptions.RequestException as exc:
            raise TPLinkRequestError(url, exc) from exc
        self._raise_for_status(resp, allow_status)
        return resp

    def close(self) -> None:
        """Close the underlying :class:`requests.Session`."""
        self._session.close()

    def __enter__(self) -> TPLinkHTTP:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_for_status(
        resp: requests.Response,
        allow_status: Collection[int],
    ) -> None:
        if resp.ok or resp.status_code in allow_status:
            return
        raise TPLinkResponseError(resp.status_code, resp.url)
