#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Up/down state of vservers, services and servicegroups"""

import dataclasses
import enum
from collections import Counter

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, required, text_value
from nitro_probe.utils import object_types
from nitro_probe.utils.check_result import (
    ActiveCheckResult,
    CheckResultCollector,
    PerfData,
    State,
)
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract_field, items


class StateBucket(enum.Enum):
    UP = "up"
    DOWN = "down"
    OUT_OF_SERVICE = "oos"
    UNKNOWN = "unknown"


_BUCKETS = {
    "UP": StateBucket.UP,
    "DOWN": StateBucket.DOWN,
    "OUT OF SERVICE": StateBucket.OUT_OF_SERVICE,
}


def bucket_of(state: str) -> StateBucket:
    """
    >>> bucket_of("OUT OF SERVICE")
    <StateBucket.OUT_OF_SERVICE: 'oos'>
    >>> bucket_of("UNKOWN")
    <StateBucket.UNKNOWN: 'unknown'>
    """
    return _BUCKETS.get(state, StateBucket.UNKNOWN)


def check_state(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    object_type = required(request, "object_type")
    fields = object_types.lookup(object_type)

    response = fetch(
        request.endpoint or fields.default_endpoint,
        object_type,
        request.object_name,
        request.urlopts,
    )

    collector = CheckResultCollector()
    counter: Counter[StateBucket] = Counter({bucket: 0 for bucket in StateBucket})

    for item in items(response, object_types.response_key(object_type)):
        bucket = bucket_of(text_value(extract_field(item, fields.state_field)))
        counter[bucket] += 1
        if bucket is not StateBucket.UP:
            name = text_value(extract_field(item, fields.name_field))
            collector.add_message(State.CRIT, f"{name} {bucket.value}")

    for bucket in StateBucket:
        collector.add_perfdata(PerfData(bucket.value, counter[bucket], min=0))

    stats = "({} up, {} down, {} oos, {} unknown)".format(
        *(counter[bucket] for bucket in StateBucket)
    )
    result = collector.finalize()
    return dataclasses.replace(
        result,
        summary=(
            f"{object_type} OK {stats}"
            if result.state is State.OK
            else f"{object_type} {result.summary} {stats}"
        ),
    )


check_registry.register(
    NitroCheck(
        name="state",
        evaluate=check_state,
        requires=("object_type",),
    )
)
