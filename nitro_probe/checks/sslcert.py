#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Remaining lifetime of the installed certificates"""

import dataclasses

from nitro_probe.checks._base import (
    check_registry,
    CheckRequest,
    NitroCheck,
    numeric_value,
    parse_levels,
    text_value,
)
from nitro_probe.utils import object_types
from nitro_probe.utils.check_result import ActiveCheckResult, CheckResultCollector, State
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract_field, items

DEFAULT_OBJECT_TYPE = "sslcertkey"


def check_sslcert(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    warn_days, crit_days = parse_levels(request)
    object_type = request.object_type or DEFAULT_OBJECT_TYPE
    fields = object_types.lookup(DEFAULT_OBJECT_TYPE)

    response = fetch(
        request.endpoint or fields.default_endpoint,
        object_type,
        request.object_name,
        request.urlopts,
    )

    collector = CheckResultCollector()
    for certificate in items(response, object_type):
        days = numeric_value(extract_field(certificate, "daystoexpiration"), "daystoexpiration")
        if days <= crit_days:
            state = State.CRIT
        elif days <= warn_days:
            state = State.WARN
        else:
            continue
        name = text_value(extract_field(certificate, fields.name_field))
        collector.add_message(state, f"{name} expires in {days:g} days")

    result = collector.finalize()
    return dataclasses.replace(
        result,
        summary=(
            f"{DEFAULT_OBJECT_TYPE} OK"
            if result.state is State.OK
            else f"{DEFAULT_OBJECT_TYPE} {result.summary}"
        ),
    )


check_registry.register(
    NitroCheck(
        name="sslcert",
        evaluate=check_sslcert,
        requires=("warning", "critical"),
    )
)
