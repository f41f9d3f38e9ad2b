"""Authenticated HTTP session for TP-Link Easy Smart switches."""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass

from check_tl_sg108e.client.errors import (
    LOGON_OK,
    TPLinkAuthError,
    TPLinkProtocolError,
)
from check_tl_sg108e.client.http import DEFAULT_TIMEOUT_S, TPLinkHTTP
from check_tl_sg108e.vendor.tplink.endpoints import (
    LOGON,
    PORT_STATISTICS,
    PORT_STATISTICS_MARKER,
)
from check_tl_sg108e.vendor.tplink.mappings import (
    LOGON_ERROR_MESSAGES,
    LOGON_UNEXPECTED_MESSAGE,
)

logger = logging.getLogger(__name__)

# The logon CGI answers 401 even when the login succeeded, and the
# statistics page may do the same for a stale session.
_UNAUTHORIZED: tuple[int, ...] = (401,)

# First element of ``var logonInfo = new Array(\n<code>,\n0,0);``
_LOGON_INFO_RE: re.Pattern[str] = re.compile(
    r"var logonInfo = new Array\(\s*(\d+)\s*,",
    re.ASCII,
)


class SessionState(enum.Enum):
    """Where a :class:`TPLinkSession` is in its login flow."""

    UNAUTHENTICATED = "unauthenticated"
    NEEDS_LOGIN = "needs_login"
    LOGGED_IN = "logged_in"
    AUTHENTICATED = "authenticated"
    LOGIN_FAILED = "login_failed"


@dataclass(frozen=True)
class TPLinkCredentials:
    """Immutable credential pair for a TP-Link switch.

    Args:
        username: Login username.
        password: Login password.
    """

    username: str
    password: str


class TPLinkSession:
    """Fetches the port statistics page, logging in only when needed.

    The switch keeps sessions per client IP address (cookies are optional),
    so a probe run shortly after the previous one is usually still logged
    in.  :meth:`fetch_status_page` therefore tries the page first and only
    posts credentials when the switch serves the login page instead.

    Args:
        base_url: Switch base URL or bare host, e.g. ``192.168.0.1``.
        credentials: Username/password pair.
        timeout_s: Request timeout in seconds (default 10).
        send_cpassword: Also send the empty ``cpassword`` form field some
            firmware revisions expect (default False).
        verify_tls: Verify the certificate of an ``https://`` base URL
            (default True).
    """

    def __init__(
        self,
        base_url: str,
        credentials: TPLinkCredentials,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        send_cpassword: bool = False,
        verify_tls: bool = True,
    ) -> None:
        self._http: TPLinkHTTP = TPLinkHTTP(
            base_url=base_url, timeout_s=timeout_s, verify_tls=verify_tls
        )
        self._credentials: TPLinkCredentials = credentials
        self._send_cpassword: bool = send_cpassword
        self._state: SessionState = SessionState.UNAUTHENTICATED

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self) -> None:
        """Authenticate to the switch.

        Posts the credentials to ``LOGON`` and decodes the result code the
        switch embeds in the ``logonInfo`` script array.

        Raises:
            TPLinkAuthError: If the switch reports a non-zero result code.
            TPLinkProtocolError: If the response carries no result code.
        """
        form: dict[str, str] = {
            "username": self._credentials.username,
            "password": self._credentials.password,
        }
        if self._send_cpassword:
            form["cpassword"] = ""
        form["logon"] = "Login"

        resp = self._http.post_form(LOGON, data=form, allow_status=_UNAUTHORIZED)
        code = self._parse_logon_code(resp.text)
        if code != LOGON_OK:
            self._state = SessionState.LOGIN_FAILED
            raise TPLinkAuthError(
                code=code,
                reason=LOGON_ERROR_MESSAGES.get(code, LOGON_UNEXPECTED_MESSAGE),
            )
        self._state = SessionState.LOGGED_IN
        logger.debug("Logged in to %s", self._http.base_url)

    # ------------------------------------------------------------------
    # Public request methods
    # ------------------------------------------------------------------

    def fetch_status_page(self) -> str:
        """Return the body of the port statistics page.

        Issues one probe GET; if it does not yield the statistics page,
        logs in once and issues one more GET.  Nothing is retried beyond
        that.

        Returns:
            Response body as a string.

        Raises:
            TPLinkRequestError: On any transport failure.
            TPLinkAuthError: If the login is rejected.
            TPLinkProtocolError: If the page is still not served after a
                successful login.
        """
        for attempt in ("probe", "after login"):
            text = self._http.get(PORT_STATISTICS, allow_status=_UNAUTHORIZED).text
            if PORT_STATISTICS_MARKER in text:
                if self._state is SessionState.UNAUTHENTICATED:
                    logger.debug("Reusing existing session on %s", self._http.base_url)
                self._state = SessionState.AUTHENTICATED
                return text
            if self._state is SessionState.LOGGED_IN:
                break
            logger.debug("Statistics page not served on %s GET; logging in", attempt)
            self._state = SessionState.NEEDS_LOGIN
            self.login()

        raise TPLinkProtocolError(
            f"{PORT_STATISTICS} did not contain {PORT_STATISTICS_MARKER!r} "
            "after a successful login; unsupported firmware or session refused"
        )

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._http.close()

    def __enter__(self) -> TPLinkSession:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """Current position in the login flow."""
        return self._state

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_logon_code(text: str) -> int:
        """Extract the ``logonInfo`` result code, raising :exc:`.TPLinkProtocolError` if absent."""
        m = _LOGON_INFO_RE.search(text)
        if m is None:
            raise TPLinkProtocolError(
                f"No logonInfo result in {LOGON} response: {text[:200]!r}"
            )
        return int(m.group(1))


def fetch_status_page(
    host: str,
    username: str,
    password: str,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    send_cpassword: bool = False,
    verify_tls: bool = True,
) -> str:
    """Fetch the port statistics page from *host* with a one-shot session.

    Args:
        host: Switch host name, IP address or base URL.
        username: Login username.
        password: Login password.
        timeout_s: Request timeout in seconds.
        send_cpassword: Send the empty ``cpassword`` login field.
        verify_tls: Verify the TLS certificate of an ``https://`` host.

    Returns:
        Raw body of ``PortStatisticsRpm.htm``.
    """
    credentials = TPLinkCredentials(username=username, password=password)
    with TPLinkSession(
        host,
        credentials,
        timeout_s=timeout_s,
        send_cpassword=send_cpassword,
        verify_tls=verify_tls,
    ) as session:
        return session.fetch_status_page()
