#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Pass arbitrary counters of an object type through as performance data

For object types that answer with a single object the field names are used as
they are. If the answer is a list, every field has to be given as
`<id field>.<metric field>`, the value of the id field makes the labels unique.
"""

from __future__ import annotations

import dataclasses

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, required, text_value
from nitro_probe.utils.check_result import (
    ActiveCheckResult,
    CheckResultCollector,
    PerfData,
    State,
)
from nitro_probe.utils.exceptions import DecodeError, UsageError
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, extract_field, Mapping, records, Sequence


def split_field_spec(field_spec: str) -> tuple[str, str]:
    """
    >>> split_field_spec("name.totalrequests")
    ('name', 'totalrequests')
    """
    id_field, separator, metric_field = field_spec.partition(".")
    if not separator or not id_field or not metric_field:
        raise UsageError(
            "performancedata: return data is an array and contains multiple objects."
            f" You need to separate id and name with a '.' (got {field_spec!r})"
        )
    return id_field, metric_field


def _add_point(
    collector: CheckResultCollector, request: CheckRequest, label: str, value: str
) -> None:
    collector.add_message(State.OK, f"{label}:{value}")
    collector.add_perfdata(PerfData(label, value, warn=request.warning, crit=request.critical))


def get_performancedata(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    object_type = required(request, "object_type")
    required(request, "object_name")
    field_specs = request.object_names

    response = extract(
        fetch(request.endpoint or "stat", object_type, None, request.urlopts),
        object_type,
    )

    collector = CheckResultCollector()
    match response:
        case Sequence():
            split_specs = [split_field_spec(spec) for spec in field_specs]
            for item in records(response):
                for id_field, metric_field in split_specs:
                    item_id = text_value(extract_field(item, id_field))
                    value = text_value(extract_field(item, metric_field))
                    _add_point(collector, request, f"{object_type}.{item_id}.{metric_field}", value)
        case Mapping():
            for field in field_specs:
                value = text_value(extract_field(response, field))
                _add_point(collector, request, f"{object_type}.{field}", value)
        case _:
            raise DecodeError(
                "performancedata: unable to parse data. Returned data is not an object or a list"
            )

    result = collector.finalize()
    return dataclasses.replace(result, summary=f"performancedata: {result.summary}")


check_registry.register(
    NitroCheck(
        name="performancedata",
        evaluate=get_performancedata,
        requires=("object_type", "object_name"),
    )
)
