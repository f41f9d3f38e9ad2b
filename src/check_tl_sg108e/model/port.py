"""Typed models for port statistics data."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field

from check_tl_sg108e.vendor.tplink.mappings import LINK_STATUS_CODES


class LinkStatus(enum.Enum):
    """Negotiated link state of a port, as encoded by the switch.

    Members are keyed by the ``link_status`` code from the statistics page.
    Calling ``LinkStatus(code)`` with any integer outside ``0..6`` yields
    :attr:`EMPTY` instead of raising.
    """

    DOWN = 0
    AUTO = 1
    HALF_10 = 2
    FULL_10 = 3
    HALF_100 = 4
    FULL_100 = 5
    FULL_1000 = 6
    EMPTY = -1

    @classmethod
    def _missing_(cls, value: object) -> LinkStatus | None:
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.EMPTY
        return None

    @classmethod
    def from_code(cls, code: int) -> LinkStatus:
        """Decode a raw ``link_status`` code; unknown codes map to :attr:`EMPTY`."""
        return cls(code)

    @property
    def label(self) -> str:
        """Text shown for this state in the switch web UI."""
        return LINK_STATUS_CODES.get(self.value, ("", 0))[0]

    @property
    def speed_mbit(self) -> int:
        """Nominal speed in Mbit/s, as the switch encodes it."""
        return LINK_STATUS_CODES.get(self.value, ("", 0))[1]

    @property
    def is_connected(self) -> bool:
        """``True`` when a 10/100/1000 link is established."""
        return self not in (LinkStatus.DOWN, LinkStatus.AUTO, LinkStatus.EMPTY)


@dataclass(frozen=True)
class PortStatistics:
    """Traffic counters for a single switch port.

    Attributes:
        port_number: 1-based port number, assigned in page order.
        enabled: ``True`` if the port is administratively enabled.
        link_status: Negotiated link state.
        tx_good: Packets transmitted without error.
        tx_bad: Packets transmitted with error.
        rx_good: Packets received without error.
        rx_bad: Packets received with error.
    """

    port_number: int
    enabled: bool
    link_status: LinkStatus
    tx_good: int = 0
    tx_bad: int = 0
    rx_good: int = 0
    rx_bad: int = 0


@dataclass(frozen=True)
class StatsSnapshot:
    """All port statistics read from one statistics page.

    Attributes:
        ports: One entry per physical port, ordered by
            :attr:`PortStatistics.port_number`.
    """

    ports: tuple[PortStatistics, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[PortStatistics]:
        return iter(self.ports)

    def __len__(self) -> int:
        return len(self.ports)

    @property
    def total_ports(self) -> int:
        return len(self.ports)

    @property
    def connected_ports(self) -> int:
        return sum(1 for p in self.ports if p.link_status.is_connected)
