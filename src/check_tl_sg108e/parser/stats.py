"""Parser for the TP-Link port statistics page (PortStatisticsRpm.htm).

The page has no table markup for the counters.  Everything lives in a
JavaScript object literal, e.g.::

    var all_info = {
    state:[1,1,0,1,1,1,1,1,0,0],
    link_status:[6,0,0,5,0,0,6,0,0,0],
    pkts:[1523,0,2210,0, ... ,0,0]
    };
    var max_port_num = 8;

Each series is looked up in the script bodies first and, failing that, in the
whole page.  Series are extracted independently and only cross-checked against
``max_port_num`` when the per-port records are assembled.  The arrays are
padded by the firmware (trailing ``0,0``), so extra entries are ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from check_tl_sg108e.client.errors import (
    TPLinkCountMismatchError,
    TPLinkMalformedNumberError,
    TPLinkMissingFieldError,
)
from check_tl_sg108e.model.port import LinkStatus, PortStatistics, StatsSnapshot
from check_tl_sg108e.parser.html import extract_script_text
from check_tl_sg108e.vendor.tplink.mappings import PORT_STATE_CODES

logger = logging.getLogger(__name__)

# Counters per port in the flat pkts series: tx good, tx bad, rx good, rx bad.
PKTS_PER_PORT: int = 4

# link_status codes are unsigned 8-bit values.
_UINT8_RE: re.Pattern[str] = re.compile(r"\d{1,3}", re.ASCII)
_UINT_RE: re.Pattern[str] = re.compile(r"\d+", re.ASCII)


@dataclass(frozen=True)
class _FieldExtractor:
    """Pulls the first capture group of *pattern* out of the first text that has it."""

    field: str
    pattern: re.Pattern[str]

    def extract(self, *texts: str) -> str:
        for text in texts:
            m = self.pattern.search(text)
            if m is not None:
                return m.group(1)
        raise TPLinkMissingFieldError(self.field)


class StatsParser:
    """Turns the statistics page into a :class:`.StatsSnapshot`.

    Patterns are compiled once per instance and reused for every call to
    :meth:`parse`.
    """

    def __init__(self) -> None:
        self._port_count = _FieldExtractor(
            "port_count", re.compile(r"max_port_num\s=\s(\d+)", re.ASCII)
        )
        self._state = _FieldExtractor("state", re.compile(r"state:\[(.*?)\],"))
        self._link_status = _FieldExtractor(
            "link_status", re.compile(r"link_status:\[(.*?)\],")
        )
        self._pkts = _FieldExtractor("pkts", re.compile(r"pkts:\[(.*?)\]"))

    def parse(self, html: str) -> StatsSnapshot:
        """Parse the port statistics page.

        Args:
            html: Raw response body of ``PortStatisticsRpm.htm``.

        Returns:
            Snapshot with exactly ``max_port_num`` ports.

        Raises:
            TPLinkMissingFieldError: If one of the four series is absent.
            TPLinkCountMismatchError: If ``link_status`` or ``pkts`` holds
                fewer entries than the port count requires.
            TPLinkMalformedNumberError: If ``state`` holds fewer entries
                than the port count.
        """
        # Script bodies first; the whole page when a field sits outside them.
        texts = (extract_script_text(html), html)

        num_ports = int(self._port_count.extract(*texts))
        states = self.parse_states(self._state.extract(*texts))

        link_codes = self.parse_link_codes(self._link_status.extract(*texts))
        if len(link_codes) < num_ports:
            raise TPLinkCountMismatchError("link_status", num_ports, len(link_codes))

        pkts = self.parse_counters(self._pkts.extract(*texts))
        if len(pkts) < num_ports * PKTS_PER_PORT:
            raise TPLinkCountMismatchError(
                "pkts", num_ports * PKTS_PER_PORT, len(pkts)
            )

        ports = tuple(
            _build_port(index, states, link_codes, pkts)
            for index in range(num_ports)
        )
        snapshot = StatsSnapshot(ports=ports)
        logger.debug(
            "Parsed %d ports (%d connected)",
            snapshot.total_ports,
            snapshot.connected_ports,
        )
        return snapshot

    @staticmethod
    def parse_states(raw: str) -> list[bool]:
        """Keep only ``"1"``/``"0"`` tokens; anything else is dropped."""
        return [PORT_STATE_CODES[t] for t in raw.split(",") if t in PORT_STATE_CODES]

    @staticmethod
    def parse_link_codes(raw: str) -> list[int]:
        """Keep tokens that are unsigned 8-bit integers; anything else is dropped."""
        codes: list[int] = []
        for token in raw.split(","):
            if _UINT8_RE.fullmatch(token) and int(token) <= 0xFF:
                codes.append(int(token))
        return codes

    @staticmethod
    def parse_counters(raw: str) -> list[int]:
        """Keep tokens that are unsigned integers of any size; anything else is dropped."""
        return [int(t) for t in raw.split(",") if _UINT_RE.fullmatch(t)]


_PARSER = StatsParser()


def parse_port_statistics(html: str) -> StatsSnapshot:
    """Parse *html* with a shared :class:`StatsParser` instance.

    Args:
        html: Raw response body of ``PortStatisticsRpm.htm``.

    Returns:
        Parsed :class:`.StatsSnapshot`.
    """
    return _PARSER.parse(html)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _build_port(
    index: int,
    states: list[bool],
    link_codes: list[int],
    pkts: list[int],
) -> PortStatistics:
    """Assemble the record for the port at 0-based *index*.

    ``link_codes`` and ``pkts`` are length-checked by the caller; ``states``
    is not, so it is guarded here.
    """
    if index >= len(states):
        raise TPLinkMalformedNumberError(
            f"Field 'state' has {len(states)} usable entries, "
            f"no value for port {index + 1}"
        )
    base = index * PKTS_PER_PORT
    return PortStatistics(
        port_number=index + 1,
        enabled=states[index],
        link_status=LinkStatus.from_code(link_codes[index]),
        tx_good=pkts[base],
        tx_bad=pkts[base + 1],
        rx_good=pkts[base + 2],
        rx_bad=pkts[base + 3],
    )
