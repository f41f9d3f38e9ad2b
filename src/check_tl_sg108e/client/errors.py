"""Custom exceptions for the check-tl-sg108e probe."""

from __future__ import annotations

from dataclasses import dataclass

# Logon CGI result codes (first element of the ``logonInfo`` array)
LOGON_OK: int = 0
LOGON_BAD_CREDENTIALS: int = 1
LOGON_NOT_ALLOWED: int = 2
LOGON_USER_TABLE_FULL: int = 3
LOGON_SESSION_LIMIT: int = 4
LOGON_SESSION_TIMEOUT: int = 5


class TPLinkError(Exception):
    """Base exception for all check-tl-sg108e errors."""


class TPLinkConfigError(TPLinkError):
    """Raised when the probe configuration is incomplete or invalid."""


class TPLinkRequestError(TPLinkError):
    """Raised when a network-level error occurs (connection refused, timeout, etc.)."""

    def __init__(self, url: str, cause: Exception) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Request to {url!r} failed: {cause}")


class TPLinkResponseError(TPLinkError):
    """Raised when the switch returns an HTTP status code we do not accept."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code} for {url!r}")


@dataclass
class TPLinkAuthError(TPLinkError):
    """Raised when the switch rejects the login with a non-zero result code.

    Attributes:
        code: Raw result code reported by ``logon.cgi``.
        reason: Human-readable reason, as shown by the switch web UI.
    """

    code: int
    reason: str

    def __post_init__(self) -> None:
        super().__init__(f"Login failed (code={self.code}): {self.reason}")


class TPLinkProtocolError(TPLinkError):
    """Raised when the switch answers in a format this probe does not understand.

    Typical causes are a firmware with a different page layout, or a switch
    that accepted the login but still serves the login page afterwards.
    """


class TPLinkParseError(TPLinkError):
    """Raised when the port statistics page cannot be turned into a snapshot."""


class TPLinkMissingFieldError(TPLinkParseError):
    """Raised when a required data series is absent from the page."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"Field {field!r} not found in port statistics page")


class TPLinkCountMismatchError(TPLinkParseError):
    """Raised when a data series is shorter than the declared port count needs."""

    def __init__(self, field: str, expected: int, actual: int) -> None:
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Field {field!r} has {actual} usable entries, "
            f"expected at least {expected}"
        )


class TPLinkMalformedNumberError(TPLinkParseError):
    """Raised when per-port assembly finds a value missing or out of range."""
