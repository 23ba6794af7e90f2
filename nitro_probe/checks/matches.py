#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Compare fields of a response against keywords"""

from functools import partial

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, required, text_value
from nitro_probe.utils.check_result import ActiveCheckResult, CheckResultCollector, State
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, extract_field


def match_state(current: str, warning: str, critical: str, *, negate: bool) -> State:
    """
    >>> match_state("DOWN", "DEGRADED", "DOWN", negate=False).name
    'CRIT'
    >>> match_state("DOWN", "DOWN", "UP", negate=True).name
    'CRIT'
    >>> match_state("UP", "UP", "UP", negate=True).name
    'OK'
    """
    if (current == critical) is not negate:
        return State.CRIT
    if (current == warning) is not negate:
        return State.WARN
    return State.OK


def check_matches(request: CheckRequest, fetch: NitroFetcher, *, negate: bool) -> ActiveCheckResult:
    object_type = required(request, "object_type")
    required(request, "object_name")
    warning = required(request, "warning")
    critical = required(request, "critical")
    comparison = "matches not" if negate else "matches"

    response = extract(
        fetch(request.endpoint or "stat", object_type, None, request.urlopts),
        object_type,
    )

    collector = CheckResultCollector()
    for field in request.object_names:
        current = text_value(extract_field(response, field))
        label = f"{object_type}::{field}"

        match match_state(current, warning, critical, negate=negate):
            case State.CRIT:
                collector.add_message(
                    State.CRIT,
                    f"{label} {comparison} keyword"
                    f" (current: {current}, critical: {critical})",
                )
            case State.WARN:
                collector.add_message(
                    State.WARN,
                    f"{label} {comparison} keyword"
                    f" (current: {current}, warning: {warning})",
                )
            case _:
                collector.add_message(State.OK, f"{label} OK ({current})")

    return collector.finalize()


check_registry.register(
    NitroCheck(
        name="matches",
        evaluate=partial(check_matches, negate=False),
        requires=("object_type", "object_name", "warning", "critical"),
        aliases=("string",),
    )
)
check_registry.register(
    NitroCheck(
        name="matches_not",
        evaluate=partial(check_matches, negate=True),
        requires=("object_type", "object_name", "warning", "critical"),
        aliases=("string_not",),
    )
)
