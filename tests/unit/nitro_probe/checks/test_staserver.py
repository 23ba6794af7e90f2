#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from collections.abc import Callable
from typing import Any

import pytest

from nitro_probe.checks import CheckRequest, dispatch
from nitro_probe.utils.check_result import State

GLOBAL_BINDING = "vpnglobal_staserver_binding"

# NITRO omits the object type key if nothing matched
NOTHING_FOUND = {"errorcode": 0, "message": "Done", "severity": "NONE"}


def _bindings(*servers: tuple[str, str]) -> dict[str, Any]:
    return {
        GLOBAL_BINDING: {
            GLOBAL_BINDING: [
                {"staserver": server, "staauthid": auth_id} for server, auth_id in servers
            ]
        }
    }


def test_all_sta_servers_unavailable(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher(_bindings(("http://sta1", ""), ("http://sta2", "")))

    result = dispatch("staserver").run(CheckRequest(hostname="ns", command="staserver"), fetch)

    assert result.state is State.CRIT
    assert result.summary == "server http://sta1 unavailable(!), http://sta2 unavailable(!)"
    assert fetch.calls == [("config", GLOBAL_BINDING, None, None)]


def test_one_sta_server_unavailable(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher(_bindings(("http://sta1", "STA0001"), ("http://sta2", "")))

    result = dispatch("staserver").run(CheckRequest(hostname="ns", command="staserver"), fetch)

    assert result.state is State.WARN
    assert result.summary == "server http://sta1 OK (STA0001), http://sta2 unavailable(!)"


def test_missing_auth_id_counts_as_unavailable(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher({GLOBAL_BINDING: {GLOBAL_BINDING: {"staserver": "http://sta1"}}})

    result = dispatch("staserver").run(CheckRequest(hostname="ns", command="staserver"), fetch)

    assert result.state is State.CRIT


def test_vserver_binding(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher(
        {
            "vpnvserver_staserver_binding": {
                "vpnvserver_staserver_binding": [
                    {"name": "vpn1", "staserver": "http://sta1", "staauthid": "STA0001"}
                ]
            }
        }
    )

    result = dispatch("staserver").run(
        CheckRequest(hostname="ns", command="staserver", object_name="vpn1"), fetch
    )

    assert result.state is State.OK
    assert fetch.calls == [("config", "vpnvserver_staserver_binding", "vpn1", None)]


@pytest.mark.parametrize(
    "states, expected",
    [
        (("ENABLED", "ENABLED"), State.OK),
        (("ENABLED", "DISABLED"), State.WARN),
        (("DISABLED", "DISABLED"), State.CRIT),
    ],
)
def test_server(make_fetcher: Callable[..., Any], states: tuple[str, str], expected: State) -> None:
    fetch = make_fetcher(
        {
            "server": {
                "server": [
                    {"name": f"srv{i}", "ipaddress": f"10.0.0.{i}", "state": state}
                    for i, state in enumerate(states, 1)
                ]
            }
        }
    )

    result = dispatch("server").run(CheckRequest(hostname="ns", command="server"), fetch)

    assert result.state is expected
    assert result.summary.startswith(f"server srv1(10.0.0.1) {states[0]}")


def test_no_servers(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher({"server": NOTHING_FOUND})

    result = dispatch("server").run(CheckRequest(hostname="ns", command="server"), fetch)

    assert result.state is State.OK
    assert result.summary == "server none configured"


def test_no_sta_server_bound(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher({GLOBAL_BINDING: NOTHING_FOUND})

    result = dispatch("staserver").run(CheckRequest(hostname="ns", command="staserver"), fetch)

    assert result.state is State.OK
    assert result.summary == "server no STA server bound"
