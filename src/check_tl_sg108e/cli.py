"""Command-line entry point: monitoring plugin for TP-Link Easy Smart switches.

Prints one line in the monitoring-plugin format and exits with the
plugin state (0 OK, 1 WARNING, 2 CRITICAL, 3 UNKNOWN).
"""

from __future__ import annotations

import argparse
import enum
import logging
import os
import pathlib
import sys
from collections.abc import Sequence
from typing import NoReturn

from check_tl_sg108e.client.errors import (
    TPLinkAuthError,
    TPLinkError,
    TPLinkRequestError,
    TPLinkResponseError,
)
from check_tl_sg108e.client.http import VERSION
from check_tl_sg108e.model.config import ProbeConfig
from check_tl_sg108e.probe import run_check

logger = logging.getLogger(__name__)

_EPILOG: str = """\
environment variables:
  TPLINK_HOST       switch host name or IP (when --hostname is not given)
  TPLINK_USERNAME   login username           (default: admin)
  TPLINK_PASSWORD   login password
  TPLINK_TIMEOUT    request timeout, seconds (default: 10)

Without a password flag or variable, .<hostname>_password and then .tplink
are read from the password directory (default: current directory).

examples:
  check_tl_sg108e -H 192.168.0.1 -p secret
  TPLINK_PASSWORD=secret check_tl_sg108e -H switch.lan -t 5 -v
"""


class NagiosState(enum.IntEnum):
    """Monitoring-plugin service states, used as process exit codes."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


class _PluginArgumentParser(argparse.ArgumentParser):
    """Reports usage errors as ``UNKNOWN`` rather than argparse's exit status 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        print(f"UNKNOWN: {self.prog}: {message}")
        self.exit(NagiosState.UNKNOWN)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = _PluginArgumentParser(
        prog="check_tl_sg108e",
        description="Report port statistics of a TP-Link Easy Smart switch.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-H", "--hostname", help="switch host name or IP address")
    parser.add_argument("-u", "--username", help="login username (default: admin)")
    parser.add_argument(
        "-p",
        "-a",
        "--password",
        "--authentication",
        dest="password",
        help="login password",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        help="request timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--cpassword",
        action="store_true",
        help="send the empty cpassword login field some firmwares expect",
    )
    parser.add_argument(
        "-k",
        "--insecure",
        action="store_true",
        help="do not verify the certificate of an https:// hostname",
    )
    parser.add_argument(
        "--password-dir",
        type=pathlib.Path,
        help="directory holding .<hostname>_password / .tplink (default: cwd)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log debug output to stderr",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def classify_error(exc: TPLinkError) -> NagiosState:
    """Map a probe failure to the plugin state it is reported with.

    An unreachable switch or a rejected login is ``CRITICAL``; a page the
    probe cannot make sense of, or a bad configuration, is ``UNKNOWN``.
    """
    if isinstance(exc, (TPLinkRequestError, TPLinkResponseError, TPLinkAuthError)):
        return NagiosState.CRITICAL
    return NagiosState.UNKNOWN


def main(argv: Sequence[str] | None = None) -> int:
    """Run the plugin and return its exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = ProbeConfig.from_sources(
            hostname=args.hostname,
            username=args.username,
            password=args.password,
            timeout_s=args.timeout,
            send_cpassword=args.cpassword,
            verify_tls=not args.insecure,
            environ=os.environ,
            search_dir=args.password_dir,
        )
        report = run_check(config)
    except TPLinkError as exc:
        state = classify_error(exc)
        logger.debug("Check failed", exc_info=True)
        print(f"{state.name}: {exc}")
        return int(state)

    print(report)
    return int(NagiosState.OK)


if __name__ == "__main__":
    sys.exit(main())
