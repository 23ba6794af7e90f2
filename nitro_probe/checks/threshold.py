#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Compare numeric fields against upper (above) or lower (below) levels"""

import enum
import operator
from collections.abc import Callable
from functools import partial

from nitro_probe.checks._base import (
    check_registry,
    CheckRequest,
    NitroCheck,
    numeric_value,
    parse_levels,
    required,
)
from nitro_probe.utils.check_result import (
    ActiveCheckResult,
    CheckResultCollector,
    PerfData,
    State,
)
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, extract_field


class Direction(enum.Enum):
    ABOVE = "above"
    BELOW = "below"

    @property
    def exceeds(self) -> Callable[[float, float], bool]:
        return operator.ge if self is Direction.ABOVE else operator.le


def check_level(value: float, warn: float, crit: float, direction: Direction) -> State:
    """Critical wins over warning, the levels themselves count as reached

    >>> check_level(90, 80, 90, Direction.ABOVE).name
    'CRIT'
    >>> check_level(85, 80, 90, Direction.ABOVE).name
    'WARN'
    >>> check_level(20, 10, 5, Direction.BELOW).name
    'OK'
    """
    if direction.exceeds(value, crit):
        return State.CRIT
    if direction.exceeds(value, warn):
        return State.WARN
    return State.OK


def check_threshold(
    request: CheckRequest, fetch: NitroFetcher, *, direction: Direction
) -> ActiveCheckResult:
    object_type = required(request, "object_type")
    required(request, "object_name")
    warn, crit = parse_levels(request)

    response = extract(
        fetch(request.endpoint or "stat", object_type, None, request.urlopts),
        object_type,
    )

    collector = CheckResultCollector()
    for field in request.object_names:
        raw_value = extract_field(response, field)
        value = numeric_value(raw_value, field)
        label = f"{object_type}::{field}"

        collector.add_perfdata(PerfData(label, value, warn=request.warning, crit=request.critical))

        match check_level(value, warn, crit, direction):
            case State.CRIT:
                collector.add_message(
                    State.CRIT,
                    f"{label} is {direction.value} threshold"
                    f" (current: {raw_value}, critical: {request.critical})",
                )
            case State.WARN:
                collector.add_message(
                    State.WARN,
                    f"{label} is {direction.value} threshold"
                    f" (current: {raw_value}, warning: {request.warning})",
                )
            case _:
                collector.add_message(State.OK, f"{label} OK ({raw_value})")

    return collector.finalize()


for _direction in Direction:
    check_registry.register(
        NitroCheck(
            name=_direction.value,
            evaluate=partial(check_threshold, direction=_direction),
            requires=("object_type", "object_name", "warning", "critical"),
        )
    )
