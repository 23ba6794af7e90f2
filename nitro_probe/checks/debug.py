#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import pprint

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, required
from nitro_probe.utils.check_result import ActiveCheckResult, State
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import to_python


def check_debug(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    """Dump the full decoded response, there is nothing to evaluate"""
    response = fetch(
        request.endpoint or "stat",
        required(request, "object_type"),
        request.object_name,
        request.urlopts,
    )
    return ActiveCheckResult(State.OK, pprint.pformat(to_python(response), width=100))


check_registry.register(
    NitroCheck(
        name="debug",
        evaluate=check_debug,
        requires=("object_type",),
        emits_verdict=False,
    )
)
