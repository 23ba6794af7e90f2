#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Health of a servicegroup and the quorum of its members

Deviations of the group or of single members from their healthy states are
reported, but only the member quorum (percentage of members that are up)
decides about the state of the check.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping

from nitro_probe.checks._base import (
    check_registry,
    CheckRequest,
    NitroCheck,
    parse_levels,
    required,
    text_value,
)
from nitro_probe.utils.check_result import (
    ActiveCheckResult,
    CheckResultCollector,
    PerfData,
    State,
)
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, field_or_default, items, records
from nitro_probe.utils.structured import Mapping as Record

MEMBER_BINDING = "servicegroup_servicegroupmember_binding"

DEFAULT_QUORUM_WARNING = 90.0
DEFAULT_QUORUM_CRITICAL = 50.0

HEALTHY_GROUP_STATES: Mapping[str, str] = {
    "state": "ENABLED",
    "servicegroupeffectivestate": "UP",
    "monstate": "ENABLED",
    "healthmonitor": "YES",
}

HEALTHY_MEMBER_STATES: Mapping[str, str] = {
    "state": "ENABLED",
    "svrstate": "UP",
}


@dataclasses.dataclass(frozen=True)
class Quorum:
    up: int
    down: int

    @property
    def percentage(self) -> float:
        """
        >>> Quorum(2, 1).percentage
        66.67
        >>> Quorum(0, 0).percentage
        0.0
        """
        total = self.up + self.down
        if not total:
            return 0.0
        return round(100 * self.up / total, 2)

    def state(self, warn: float, crit: float) -> State:
        """
        >>> Quorum(1, 1).state(90, 50).name
        'CRIT'
        >>> Quorum(9, 1).state(90, 50).name
        'WARN'
        >>> Quorum(10, 0).state(90, 50).name
        'OK'
        """
        if self.percentage <= crit:
            return State.CRIT
        if self.percentage <= warn:
            return State.WARN
        return State.OK


def unhealthy_keys(record: Record, healthy: Mapping[str, str]) -> Iterable[tuple[str, str]]:
    for key, expected in healthy.items():
        if (current := text_value(field_or_default(record, key))) != expected:
            yield key, current


def count_members(members: Iterable[Record], errors: list[str]) -> Quorum:
    member_down: dict[str, bool] = {}
    for member in members:
        name = text_value(field_or_default(member, "servername"))
        problems = list(unhealthy_keys(member, HEALTHY_MEMBER_STATES))
        errors.extend(
            f'servicegroup member {name} "{key}" is {current or "missing"}'
            for key, current in problems
        )
        member_down[name] = member_down.get(name, False) or bool(problems)
    down = sum(member_down.values())
    return Quorum(up=len(member_down) - down, down=down)


def check_servicegroup(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    object_name = required(request, "object_name")
    warn, crit = parse_levels(
        request,
        default_warning=DEFAULT_QUORUM_WARNING,
        default_critical=DEFAULT_QUORUM_CRITICAL,
    )

    collector = CheckResultCollector()
    errors: list[str] = []

    groups = fetch("config", "servicegroup", object_name, request.urlopts)
    for group in records(extract(groups, "servicegroup")):
        name = text_value(field_or_default(group, "servicegroupname"))
        errors.extend(
            f'servicegroup {name} "{key}" is {current or "missing"}'
            for key, current in unhealthy_keys(group, HEALTHY_GROUP_STATES)
        )
        collector.add_message(
            State.OK,
            "{} ({}) - state: {}".format(
                name,
                text_value(field_or_default(group, "servicetype")),
                text_value(field_or_default(group, "servicegroupeffectivestate")),
            ),
        )

    bindings = fetch("config", MEMBER_BINDING, object_name, request.urlopts)
    members = list(items(bindings, MEMBER_BINDING))
    for member in members:
        collector.add_message(
            State.OK,
            "{} ({}:{}) is {}".format(
                text_value(field_or_default(member, "servername")),
                text_value(field_or_default(member, "ip")),
                text_value(field_or_default(member, "port")),
                text_value(field_or_default(member, "svrstate")),
            ),
        )
    quorum = count_members(members, errors)

    collector.add_message(
        State.OK,
        f"member quorum: {quorum.percentage:.2f}% (UP/DOWN): {quorum.up}/{quorum.down}",
    )
    collector.add_perfdata(
        PerfData(
            f"{object_name}.member_quorum",
            quorum.percentage,
            unit="%",
            warn=warn,
            crit=crit,
            min=0,
            max=100,
        )
    )

    result = collector.finalize()
    summary = result.summary
    if errors:
        summary = f"{', '.join(errors)} - {summary}"
    return dataclasses.replace(
        result,
        state=quorum.state(warn, crit),
        summary=f"servicegroup: {summary}",
    )


check_registry.register(
    NitroCheck(
        name="servicegroup",
        evaluate=check_servicegroup,
        requires=("object_name",),
    )
)
