"""Port statistics probe: fetch, parse and render in one run."""

from __future__ import annotations

import logging

from check_tl_sg108e.client.errors import TPLinkError
from check_tl_sg108e.client.session import TPLinkCredentials, TPLinkSession
from check_tl_sg108e.model.config import ProbeConfig
from check_tl_sg108e.model.port import StatsSnapshot
from check_tl_sg108e.parser.stats import parse_port_statistics
from check_tl_sg108e.utils.render import render_report

logger = logging.getLogger(__name__)


class TPLinkStatsProbe:
    """One-shot port statistics check against a TP-Link Easy Smart switch.

    Args:
        config: Resolved probe configuration.
    """

    def __init__(self, config: ProbeConfig) -> None:
        self.config = config
        self._session: TPLinkSession | None = None

        logger.debug(
            "TPLinkStatsProbe initialised: host=%s user=%s timeout=%.1fs",
            config.hostname,
            config.username,
            config.timeout_s,
        )

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Create the HTTP session.  No request is sent yet."""
        creds = TPLinkCredentials(
            username=self.config.username,
            password=self.config.password,
        )
        self._session = TPLinkSession(
            base_url=self.config.hostname,
            credentials=creds,
            timeout_s=self.config.timeout_s,
            send_cpassword=self.config.send_cpassword,
            verify_tls=self.config.verify_tls,
        )

    def close(self) -> None:
        """Close the HTTP session, if open."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> TPLinkStatsProbe:
        self.open()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def get_port_statistics(self) -> StatsSnapshot:
        """Fetch and parse the port statistics page.

        Raises:
            TPLinkError: If the session is not open, or on any fetch or
                parse failure.
        """
        if self._session is None:
            raise TPLinkError("Probe is not open. Call open() first.")
        html = self._session.fetch_status_page()
        return parse_port_statistics(html)

    def check(self) -> str:
        """Return the plugin output line for the current port statistics."""
        return render_report(self.get_port_statistics())


def run_check(config: ProbeConfig) -> str:
    """Run a complete check for *config* and return the report line."""
    with TPLinkStatsProbe(config) as probe:
        return probe.check()
