#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from collections.abc import Callable, Iterator
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Any

import pytest

from nitro_probe.active_checks import check_netscaler
from nitro_probe.checks import CheckRequest
from nitro_probe.utils.nitro_client import NitroClient, NitroFetcher

LBVSERVERS = {"lbvserver": {"lbvserver": [{"name": "lb_web", "state": "UP"}]}}


def _factory(fetch: NitroFetcher) -> Callable[[CheckRequest], Any]:
    return lambda request: nullcontext(fetch)


def test_ok(make_fetcher: Callable[..., Any], capsys: pytest.CaptureFixture[str]) -> None:
    exitcode = check_netscaler.main(
        ["-H", "ns", "-C", "state", "-o", "lbvserver"],
        _factory(make_fetcher(LBVSERVERS)),
    )

    assert exitcode == 0
    assert capsys.readouterr().out == (
        "NetScaler OK - lbvserver OK (1 up, 0 down, 0 oos, 0 unknown)"
        " | up=1;;;0 down=0;;;0 oos=0;;;0 unknown=0;;;0\n"
    )


def test_critical(make_fetcher: Callable[..., Any], capsys: pytest.CaptureFixture[str]) -> None:
    fetch = make_fetcher({"lbvserver": {"lbvserver": [{"name": "lb_web", "state": "DOWN"}]}})

    exitcode = check_netscaler.main(["-H", "ns", "-C", "state", "-o", "lbvserver"], _factory(fetch))

    assert exitcode == 2
    assert capsys.readouterr().out.startswith("NetScaler CRITICAL - lbvserver lb_web down(!!)")


def test_warning(make_fetcher: Callable[..., Any], capsys: pytest.CaptureFixture[str]) -> None:
    fetch = make_fetcher({"nsconfig": {"nsconfig": {"configchanged": True}}})

    exitcode = check_netscaler.main(["-H", "ns", "-C", "nsconfig"], _factory(fetch))

    assert exitcode == 1
    assert capsys.readouterr().out == (
        "NetScaler WARNING - nsconfig::configchanged unsaved configuration changes\n"
    )


def test_request_from_arguments(make_fetcher: Callable[..., Any]) -> None:
    requests: list[CheckRequest] = []

    def factory(request: CheckRequest) -> Any:
        requests.append(request)
        return nullcontext(make_fetcher(LBVSERVERS))

    check_netscaler.main(
        [
            "-H", "ns.example.com", "-s", "-P", "8443", "-u", "monitor", "-p", "s3cr3t",
            "-C", "string_not", "-o", "lbvserver", "-n", "state", "-w", "DOWN", "-c", "UP",
            "-e", "config", "-x", "attrs=state", "-a", "v2", "-t", "5",
        ],
        factory,
    )

    assert requests == [
        CheckRequest(
            hostname="ns.example.com",
            port=8443,
            use_ssl=True,
            username="monitor",
            password="s3cr3t",
            api_version="v2",
            command="string_not",
            object_type="lbvserver",
            object_name="state",
            endpoint="config",
            warning="DOWN",
            critical="UP",
            urlopts="attrs=state",
            timeout=5.0,
        )
    ]


def test_password_reference(make_fetcher: Callable[..., Any], tmp_path: Path) -> None:
    store = tmp_path / "stored_passwords"
    store.write_text("netscaler:from-the-store\n")
    passwords: list[str] = []

    def factory(request: CheckRequest) -> Any:
        passwords.append(request.password)
        return nullcontext(make_fetcher(LBVSERVERS))

    check_netscaler.main(
        [
            "-H",
            "ns",
            "-C",
            "state",
            "-o",
            "lbvserver",
            "--password-reference",
            f"netscaler:{store}",
        ],
        factory,
    )

    assert passwords == ["from-the-store"]


def test_default_credentials(make_fetcher: Callable[..., Any]) -> None:
    credentials: list[tuple[str, str]] = []

    def factory(request: CheckRequest) -> Any:
        credentials.append((request.username, request.password))
        return nullcontext(make_fetcher(LBVSERVERS))

    check_netscaler.main(["-H", "ns", "-C", "state", "-o", "lbvserver"], factory)

    assert credentials == [("nsroot", "nsroot")]


@pytest.mark.parametrize(
    "argv, output",
    [
        (
            ["-H", "ns", "-C", "foo"],
            "NetScaler UNKNOWN - unknown command foo given\n",
        ),
        (
            ["-H", "ns", "-C", "above"],
            "NetScaler UNKNOWN - above: command requires parameter for objecttype (-o),"
            " objectname (-n), warning (-w), critical (-c)\n",
        ),
        (
            ["-H", "ns", "-C", "above", "-o", "system", "-n", "cpu", "-w", "high", "-c", "90"],
            "NetScaler UNKNOWN - warning must be numeric, got 'high'\n",
        ),
    ],
)
def test_usage_errors_do_no_io(
    argv: list[str], output: str, capsys: pytest.CaptureFixture[str]
) -> None:
    def no_request(*args: object) -> Any:
        raise AssertionError("no request expected")

    assert check_netscaler.main(argv, _factory(no_request)) == 3
    assert capsys.readouterr().out == output


def test_invalid_endpoint(capsys: pytest.CaptureFixture[str]) -> None:
    exitcode = check_netscaler.main(
        ["-H", "ns", "-C", "state", "-o", "lbvserver", "-e", "foo"],
        _factory(_exploding_fetcher),
    )

    assert exitcode == 3
    assert capsys.readouterr().out.startswith("NetScaler UNKNOWN - invalid parameter endpoint: ")


def test_malformed_body(
    make_session: Callable[..., Any], capsys: pytest.CaptureFixture[str]
) -> None:
    def factory(request: CheckRequest) -> NitroClient:
        return NitroClient(
            hostname=request.hostname,
            username=request.username,
            password=request.password,
            session=make_session(200, "<html>maintenance</html>"),
        )

    exitcode = check_netscaler.main(["-H", "ns", "-C", "state", "-o", "lbvserver"], factory)

    assert exitcode == 3
    output = capsys.readouterr().out
    assert output.startswith("NetScaler UNKNOWN - unable to decode response of http://ns/")
    assert "|" not in output


def test_api_error(make_session: Callable[..., Any], capsys: pytest.CaptureFixture[str]) -> None:
    body = '{"errorcode": 258, "message": "No such resource [name, lb_gone]", "severity": "ERROR"}'

    def factory(request: CheckRequest) -> NitroClient:
        return NitroClient(
            hostname=request.hostname,
            username=request.username,
            password=request.password,
            session=make_session(404, body),
        )

    exitcode = check_netscaler.main(
        ["-H", "ns", "-C", "state", "-o", "lbvserver", "-n", "lb_gone"], factory
    )

    assert exitcode == 3
    assert capsys.readouterr().out == (
        "NetScaler UNKNOWN - NITRO error 258 (HTTP 404): No such resource [name, lb_gone]\n"
    )


def _exploding_fetcher(*args: object) -> Any:
    raise RuntimeError("boom")


def test_unhandled_exception(capsys: pytest.CaptureFixture[str]) -> None:
    exitcode = check_netscaler.main(
        ["-H", "ns", "-C", "state", "-o", "lbvserver"], _factory(_exploding_fetcher)
    )

    assert exitcode == 3
    assert capsys.readouterr().out == (
        "NetScaler UNKNOWN - Unhandled exception: RuntimeError('boom')\n"
    )


def test_debug_lets_exceptions_through() -> None:
    with pytest.raises(RuntimeError, match="boom"):
        check_netscaler.main(
            ["-H", "ns", "-C", "state", "-o", "lbvserver", "--debug"],
            _factory(_exploding_fetcher),
        )


def test_client_is_closed_on_error() -> None:
    closed: list[bool] = []

    @contextmanager
    def factory(request: CheckRequest) -> Iterator[NitroFetcher]:
        try:
            yield _exploding_fetcher
        finally:
            closed.append(True)

    assert check_netscaler.main(["-H", "ns", "-C", "state", "-o", "lbvserver"], factory) == 3
    assert closed == [True]


def test_debug_command_prints_raw_dump(
    make_fetcher: Callable[..., Any], capsys: pytest.CaptureFixture[str]
) -> None:
    exitcode = check_netscaler.main(
        ["-H", "ns", "-C", "debug", "-o", "lbvserver"], _factory(make_fetcher(LBVSERVERS))
    )

    assert exitcode == 0
    assert capsys.readouterr().out == "{'lbvserver': [{'name': 'lb_web', 'state': 'UP'}]}\n"


def test_missing_hostname_is_unknown(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        check_netscaler.main(["-C", "state"], _factory(_exploding_fetcher))

    assert excinfo.value.code == 3
    assert "-H/--hostname" in capsys.readouterr().err


def test_verbose_logs_the_url(
    make_session: Callable[..., Any],
    caplog: pytest.LogCaptureFixture,
) -> None:
    def factory(request: CheckRequest) -> NitroClient:
        return NitroClient(
            hostname=request.hostname,
            username=request.username,
            password=request.password,
            session=make_session(200, '{"nsconfig": {"configchanged": false}}'),
        )

    with caplog.at_level("DEBUG", logger="nitro_probe"):
        check_netscaler.main(["-H", "ns", "-C", "nsconfig", "-vv"], factory)

    assert "target url is http://ns/nitro/v1/config/nsconfig" in caplog.text
    assert '{"nsconfig": {"configchanged": false}}' in caplog.text
