#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import dataclasses

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, text_value
from nitro_probe.utils.check_result import ActiveCheckResult, CheckResultCollector, State
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, field_or_default


def get_hardware_info(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    hardware = extract(fetch("config", "nshardware", None, request.urlopts), "nshardware")

    def field(name: str) -> str:
        return text_value(field_or_default(hardware, name))

    collector = CheckResultCollector()
    collector.add_message(State.OK, f"Platform: {field('hwdescription')} {field('sysid')}")
    collector.add_message(
        State.OK,
        "Manufactured on: {}/{}/{}".format(
            field("manufactureyear"), field("manufacturemonth"), field("manufactureday")
        ),
    )
    # sic, the API really spells it this way
    collector.add_message(State.OK, f"CPU: {field('cpufrequncy')}MHz")
    collector.add_message(State.OK, f"Serial no: {field('serialno')}")

    version = extract(fetch("config", "nsversion", None, request.urlopts), "nsversion")
    collector.add_message(
        State.OK, f"Build Version: {text_value(field_or_default(version, 'version'))}"
    )

    result = collector.finalize()
    return dataclasses.replace(result, summary=f"INFO: {result.summary}")


check_registry.register(NitroCheck(name="hwinfo", evaluate=get_hardware_info))
