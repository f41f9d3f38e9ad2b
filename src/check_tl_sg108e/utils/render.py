"""Plugin output renderer for port statistics snapshots.

The output follows the monitoring-plugin convention
``STATUS: text | label=value[UOM] label=value[UOM] ...``; consumers key on
the label names, so their order and spelling are fixed.
"""

from __future__ import annotations

from dataclasses import dataclass

from check_tl_sg108e.model.port import PortStatistics, StatsSnapshot


@dataclass(frozen=True)
class StatsTotals:
    """Counter sums across all ports of a snapshot."""

    good_tx: int
    bad_tx: int
    good_rx: int
    bad_rx: int
    ports_connected: int
    total_ports: int


def summarize(snapshot: StatsSnapshot) -> StatsTotals:
    """Sum the per-port counters of *snapshot*."""
    return StatsTotals(
        good_tx=sum(p.tx_good for p in snapshot),
        bad_tx=sum(p.tx_bad for p in snapshot),
        good_rx=sum(p.rx_good for p in snapshot),
        bad_rx=sum(p.rx_bad for p in snapshot),
        ports_connected=snapshot.connected_ports,
        total_ports=snapshot.total_ports,
    )


def link_speed_bytes(port: PortStatistics) -> int:
    """Nominal link speed of *port* in bytes, as ``speed // 8 * 10**6``."""
    return port.link_status.speed_mbit // 8 * 1000 * 1000


def render_report(snapshot: StatsSnapshot) -> str:
    """Render *snapshot* as a single plugin output line.

    Returns:
        ``"OK: ports connected: C/T |"`` followed by six perfdata fields per
        port and the totals, space-separated, without a trailing newline.
    """
    totals = summarize(snapshot)
    fields: list[str] = [
        f"OK: ports connected: {totals.ports_connected}/{totals.total_ports} |"
    ]
    for port in snapshot:
        fields.extend(_port_fields(port))
    fields.extend(
        [
            f"TotalGoodTX={totals.good_tx}c",
            f"TotalBadTX={totals.bad_tx}c",
            f"TotalGoodRX={totals.good_rx}c",
            f"TotalBadRX={totals.bad_rx}c",
            f"PortsConnected={totals.ports_connected}",
            f"TotalPorts={totals.total_ports}",
        ]
    )
    return " ".join(fields)


def _port_fields(port: PortStatistics) -> list[str]:
    name = f"Port{port.port_number}"
    return [
        f"{name}Enabled={int(port.enabled)}",
        f"{name}LinkSpeed={link_speed_bytes(port)}B",
        f"{name}GoodTX={port.tx_good}c",
        f"{name}BadTX={port.tx_bad}c",
        f"{name}GoodRX={port.rx_good}c",
        f"{name}BadRX={port.rx_bad}c",
    ]
