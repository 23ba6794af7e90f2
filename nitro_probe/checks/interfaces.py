#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Link, interface and admin state of all network interfaces"""

import dataclasses
from collections.abc import Iterable

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, text_value
from nitro_probe.utils import object_types
from nitro_probe.utils.check_result import (
    ActiveCheckResult,
    CheckResultCollector,
    PerfData,
    State,
)
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract_field, field_or_default, items
from nitro_probe.utils.structured import Mapping as Record

OBJECT_TYPE = "interface"

# counter -> unit
COUNTERS = {
    "rxbytes": "B",
    "txbytes": "B",
    "rxerrors": "c",
    "txerrors": "c",
}


def interface_errors(device: str, interface: Record) -> Iterable[str]:
    # NITRO reports link and interface state as 1 (up) or 0 (down)
    if text_value(field_or_default(interface, "linkstate")) != "1":
        yield f'interface {device} has linkstate "DOWN"'
    if text_value(field_or_default(interface, "intfstate")) != "1":
        yield f'interface {device} has intstate "DOWN"'
    if (state := text_value(field_or_default(interface, "state"))) != "ENABLED":
        yield f'interface {device} has state "{state}"'


def check_interfaces(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    response = fetch("config", OBJECT_TYPE, None, request.urlopts)

    collector = CheckResultCollector()
    all_errors: list[str] = []

    for interface in items(response, object_types.response_key(OBJECT_TYPE)):
        device = text_value(extract_field(interface, object_types.lookup(OBJECT_TYPE).name_field))
        errors = list(interface_errors(device, interface))
        all_errors.extend(errors)

        collector.add_message(
            State.CRIT if errors else State.OK,
            "device: {} (speed: {}, MTU: {}, VLAN: {}, type: {}) {}".format(
                device,
                text_value(field_or_default(interface, "actspeed")) or "N/A",
                text_value(field_or_default(interface, "actualmtu")),
                text_value(field_or_default(interface, "vlan")),
                text_value(field_or_default(interface, "intftype")),
                text_value(field_or_default(interface, "state")),
            ),
        )
        for counter, unit in COUNTERS.items():
            collector.add_perfdata(
                PerfData(
                    f"{device}.{counter}",
                    text_value(field_or_default(interface, counter, 0)),
                    unit=unit,
                )
            )

    result = collector.finalize()
    summary = result.summary
    if all_errors:
        summary = f"{', '.join(all_errors)} - {summary}"
    return dataclasses.replace(result, summary=f"Interfaces: {summary or 'none found'}")


check_registry.register(NitroCheck(name="interfaces", evaluate=check_interfaces))
