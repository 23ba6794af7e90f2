#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Unsaved configuration changes"""

from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck, text_value
from nitro_probe.utils.check_result import ActiveCheckResult, State
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, field_or_default


def check_nsconfig(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    object_type = request.object_type or "nsconfig"
    response = extract(
        fetch(request.endpoint or "config", object_type, None, request.urlopts),
        object_type,
    )

    # a missing flag counts as changed
    changed = text_value(field_or_default(response, "configchanged", default=True))
    if changed.lower() not in ("", "false", "0"):
        return ActiveCheckResult(
            State.WARN, "nsconfig::configchanged unsaved configuration changes"
        )
    return ActiveCheckResult(State.OK, "nsconfig::configchanged OK")


check_registry.register(NitroCheck(name="nsconfig", evaluate=check_nsconfig))
