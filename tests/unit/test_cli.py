"""Unit tests for check_tl_sg108e.cli and check_tl_sg108e.probe."""

from __future__ import annotations

import pathlib

import pytest
import requests
import responses as rsps_lib

from check_tl_sg108e.cli import NagiosState, build_parser, classify_error, main
from check_tl_sg108e.client.errors import (
    TPLinkAuthError,
    TPLinkConfigError,
    TPLinkError,
    TPLinkMissingFieldError,
    TPLinkProtocolError,
    TPLinkRequestError,
    TPLinkResponseError,
)
from check_tl_sg108e.model.config import ProbeConfig
from check_tl_sg108e.probe import TPLinkStatsProbe, run_check
from check_tl_sg108e.vendor.tplink.endpoints import LOGON, PORT_STATISTICS

FIXTURES = pathlib.Path(__file__).parent.parent / "fixtures"

HOST = "192.168.0.1"
STATS_URL = f"http://{HOST}{PORT_STATISTICS}"
LOGON_URL = f"http://{HOST}{LOGON}"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
    """Keep the developer's environment and password files out of the tests."""
    for name in ("TPLINK_HOST", "TPLINK_USERNAME", "TPLINK_PASSWORD", "TPLINK_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _stats_page() -> str:
    return (FIXTURES / "port_statistics.html").read_text()


# ---------------------------------------------------------------------------
# probe.py
# ---------------------------------------------------------------------------

@rsps_lib.activate
def test_run_check_returns_report() -> None:
    rsps_lib.add(rsps_lib.GET, STATS_URL, body=_stats_page(), status=200)
    report = run_check(ProbeConfig(hostname=HOST))
    assert report.startswith("OK: ports connected: 3/8 |")


def test_probe_requires_open() -> None:
    probe = TPLinkStatsProbe(ProbeConfig(hostname=HOST))
    with pytest.raises(TPLinkError):
        probe.get_port_statistics()


@rsps_lib.activate
def test_probe_context_manager_returns_snapshot() -> None:
    rsps_lib.add(rsps_lib.GET, STATS_URL, body=_stats_page(), status=200)
    with TPLinkStatsProbe(ProbeConfig(hostname=HOST)) as probe:
        snapshot = probe.get_port_statistics()
    assert snapshot.total_ports == 8


# ---------------------------------------------------------------------------
# cli.py — argument parsing
# ---------------------------------------------------------------------------

def test_parser_accepts_short_flags() -> None:
    args = build_parser().parse_args(
        ["-H", HOST, "-u", "ops", "-p", "pw", "-t", "4", "-v", "--cpassword"]
    )
    assert args.hostname == HOST
    assert args.username == "ops"
    assert args.password == "pw"
    assert args.timeout == 4.0
    assert args.verbose is True
    assert args.cpassword is True


def test_parser_authentication_alias() -> None:
    args = build_parser().parse_args(["--authentication", "pw"])
    assert args.password == "pw"


def test_parser_insecure_flag() -> None:
    assert build_parser().parse_args([]).insecure is False
    assert build_parser().parse_args(["-k"]).insecure is True
    assert build_parser().parse_args(["--insecure"]).insecure is True


@pytest.mark.parametrize(
    "argv",
    [["-H", HOST, "-t", "abc"], ["-H", HOST, "--no-such-flag"], ["-H"]],
)
def test_usage_error_exits_unknown(
    argv: list[str], capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    assert exc_info.value.code == NagiosState.UNKNOWN == 3
    captured = capsys.readouterr()
    assert captured.out.startswith("UNKNOWN: ")
    assert "usage:" in captured.err


@pytest.mark.parametrize(
    ("exc", "state"),
    [
        (TPLinkRequestError("http://x", ConnectionError("down")), NagiosState.CRITICAL),
        (TPLinkResponseError(500, "http://x"), NagiosState.CRITICAL),
        (TPLinkAuthError(code=1, reason="bad"), NagiosState.CRITICAL),
        (TPLinkProtocolError("changed"), NagiosState.UNKNOWN),
        (TPLinkMissingFieldError("pkts"), NagiosState.UNKNOWN),
        (TPLinkConfigError("no host"), NagiosState.UNKNOWN),
    ],
)
def test_classify_error(exc: TPLinkError, state: NagiosState) -> None:
    assert classify_error(exc) is state


# ---------------------------------------------------------------------------
# cli.py — main
# ---------------------------------------------------------------------------

@rsps_lib.activate
def test_main_ok(capsys: pytest.CaptureFixture[str]) -> None:
    rsps_lib.add(rsps_lib.GET, STATS_URL, body=_stats_page(), status=200)

    code = main(["-H", HOST])

    out = capsys.readouterr().out
    assert code == NagiosState.OK == 0
    assert out.startswith("OK: ports connected: 3/8 |")
    assert out.endswith("TotalPorts=8\n")
    assert out.count("\n") == 1


@rsps_lib.activate
def test_main_login_failure_is_critical(capsys: pytest.CaptureFixture[str]) -> None:
    rsps_lib.add(rsps_lib.GET, STATS_URL, body="<html>login</html>", status=200)
    rsps_lib.add(
        rsps_lib.POST,
        LOGON_URL,
        body="<script>\nvar logonInfo = new Array(\n1,\n0,0);\n</script>",
        status=200,
    )

    code = main(["-H", HOST, "-p", "wrong"])

    out = capsys.readouterr().out
    assert code == NagiosState.CRITICAL
    assert out.startswith("CRITICAL: ")
    assert "The user name or the password is wrong." in out


@rsps_lib.activate
def test_main_unreachable_is_critical(capsys: pytest.CaptureFixture[str]) -> None:
    rsps_lib.add(
        rsps_lib.GET,
        STATS_URL,
        body=requests.exceptions.ConnectionError("no route to host"),
    )
    assert main(["-H", HOST]) == NagiosState.CRITICAL
    assert capsys.readouterr().out.startswith("CRITICAL: ")


@rsps_lib.activate
def test_main_incomplete_page_is_unknown(capsys: pytest.CaptureFixture[str]) -> None:
    broken = _stats_page().replace("pkts:[", "pkts_removed=(")
    rsps_lib.add(rsps_lib.GET, STATS_URL, body=broken, status=200)

    assert main(["-H", HOST]) == NagiosState.UNKNOWN
    out = capsys.readouterr().out
    assert out.startswith("UNKNOWN: ")
    assert "'pkts'" in out


def test_main_without_hostname_is_unknown(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == NagiosState.UNKNOWN
    assert "hostname" in capsys.readouterr().out


@rsps_lib.activate
def test_main_reads_password_file(tmp_path: pathlib.Path) -> None:
    (tmp_path / f".{HOST}_password").write_text("filepw\n")
    rsps_lib.add(rsps_lib.GET, STATS_URL, body="<html>login</html>", status=200)
    rsps_lib.add(
        rsps_lib.POST,
        LOGON_URL,
        body="<script>\nvar logonInfo = new Array(\n0,\n0,0);\n</script>",
        status=401,
    )
    rsps_lib.add(rsps_lib.GET, STATS_URL, body=_stats_page(), status=200)

    assert main(["-H", HOST, "--password-dir", str(tmp_path)]) == NagiosState.OK
    assert "password=filepw" in rsps_lib.calls[1].request.body


@rsps_lib.activate
def test_main_uses_environment(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("TPLINK_HOST", HOST)
    rsps_lib.add(rsps_lib.GET, STATS_URL, body=_stats_page(), status=200)
    assert main([]) == NagiosState.OK
    assert capsys.readouterr().out.startswith("OK: ")


@pytest.mark.parametrize("timeout", ["nan", "inf", "0"])
def test_main_invalid_timeout_is_unknown(
    timeout: str, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["-H", HOST, "-t", timeout]) == NagiosState.UNKNOWN
    assert capsys.readouterr().out.startswith("UNKNOWN: Timeout")


@pytest.mark.parametrize(("argv", "verify"), [([], True), (["--insecure"], False)])
def test_main_passes_tls_verification(
    monkeypatch: pytest.MonkeyPatch, argv: list[str], verify: bool
) -> None:
    seen: list[ProbeConfig] = []

    def fake_run_check(config: ProbeConfig) -> str:
        seen.append(config)
        return "OK: ports connected: 0/0 |"

    monkeypatch.setattr("check_tl_sg108e.cli.run_check", fake_run_check)
    assert main(["-H", f"https://{HOST}", *argv]) == NagiosState.OK
    assert seen[0].verify_tls is verify


@rsps_lib.activate
def test_run_check_over_https_without_verification() -> None:
    url = f"https://{HOST}{PORT_STATISTICS}"
    rsps_lib.add(rsps_lib.GET, url, body=_stats_page(), status=200)
    config = ProbeConfig(hostname=f"https://{HOST}", verify_tls=False)
    with TPLinkStatsProbe(config) as stats_check:
        assert stats_check._session is not None
        assert stats_check._session._http.verify_tls is False
        assert stats_check.get_port_statistics().total_ports == 8
