#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Availability of the STA servers and of the configured load balancing servers

Both checks degrade to WARN for a single failing item and turn CRIT once no
item is left in a good state. Nothing bound or configured at all is OK.
"""

import dataclasses
from collections.abc import Sequence

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, text_value
from nitro_probe.utils.check_result import ActiveCheckResult, CheckResultCollector, State
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract_field, field_or_default, items


def all_items_failed(result: ActiveCheckResult, item_states: Sequence[State]) -> ActiveCheckResult:
    """Post aggregation rule: CRIT if every item failed, the aggregated result otherwise

    >>> all_items_failed(ActiveCheckResult(State.WARN, "a"), [State.WARN, State.WARN]).state.name
    'CRIT'
    >>> all_items_failed(ActiveCheckResult(State.WARN, "a"), [State.WARN, State.OK]).state.name
    'WARN'
    >>> all_items_failed(ActiveCheckResult(State.OK, ""), []).state.name
    'OK'
    """
    if item_states and State.OK not in item_states:
        return dataclasses.replace(result, state=State.CRIT)
    return result


def check_staserver(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    if request.object_name:
        object_type = request.object_type or "vpnvserver_staserver_binding"
    else:
        object_type = request.object_type or "vpnglobal_staserver_binding"

    response = fetch(
        request.endpoint or "config",
        object_type,
        request.object_name,
        request.urlopts,
    )

    collector = CheckResultCollector()
    for binding in items(response, object_type):
        server = text_value(extract_field(binding, "staserver"))
        auth_id = text_value(field_or_default(binding, "staauthid", ""))
        if auth_id:
            collector.add_message(State.OK, f"{server} OK ({auth_id})")
        else:
            collector.add_message(State.WARN, f"{server} unavailable")

    result = all_items_failed(collector.finalize(), collector.states)
    return dataclasses.replace(result, summary=f"server {result.summary or 'no STA server bound'}")


def check_server(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    response = fetch(
        request.endpoint or "config",
        "server",
        request.object_name,
        request.urlopts,
    )

    collector = CheckResultCollector()
    for server in items(response, "server"):
        name = text_value(extract_field(server, "name"))
        address = text_value(field_or_default(server, "ipaddress"))
        state = text_value(extract_field(server, "state"))
        collector.add_message(
            State.OK if state == "ENABLED" else State.WARN,
            f"{name}({address}) {state}",
        )

    result = all_items_failed(collector.finalize(), collector.states)
    return dataclasses.replace(result, summary=f"server {result.summary or 'none configured'}")


check_registry.register(NitroCheck(name="staserver", evaluate=check_staserver))
check_registry.register(NitroCheck(name="server", evaluate=check_server))
