#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Expiry of the features of an installed license file

The license file is read through the systemfile object of the config API. Its
content arrives base64 encoded and carries one line per licensed feature:

    INCREMENT CNS_V1000_SERVER CITRIX 2017.1229 18-jan-2018 uncounted ...

The fifth field is the expiry date or "permanent".
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import datetime
from collections.abc import Iterator
from urllib.parse import quote

from nitro_probe.checks._base import (
    check_registry,
    CheckRequest,
    NitroCheck,
    parse_levels,
    required,
    text_value,
)
from nitro_probe.utils.check_result import ActiveCheckResult, CheckResultCollector, State
from nitro_probe.utils.exceptions import DecodeError
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.structured import extract, extract_field

LICENSE_DIRECTORY = "/nsconfig/license"


@dataclasses.dataclass(frozen=True)
class Feature:
    name: str
    expiry: str
    expires_on: datetime.datetime | None


def file_options(filename: str) -> str:
    """
    >>> file_options("CNS_V1000_SERVER_PLT_Retail.lic")
    'args=filelocation:%2Fnsconfig%2Flicense,filename:CNS_V1000_SERVER_PLT_Retail.lic'
    """
    return "args=filelocation:{},filename:{}".format(
        quote(LICENSE_DIRECTORY, safe=""), quote(filename, safe="")
    )


def parse_license(content: str) -> Iterator[Feature]:
    """
    >>> list(parse_license("# comment\\nINCREMENT CNS_SSE_SERVER CITRIX 2017.1229 permanent uncounted"))
    [Feature(name='CNS_SSE_SERVER', expiry='permanent', expires_on=None)]
    """
    for line in content.splitlines():
        if not line.startswith("INCREMENT "):
            continue
        fields = line.split()
        if len(fields) < 5:
            raise DecodeError(f"license: malformed line: {line}")
        name, expiry = fields[1], fields[4]
        if expiry.lower() == "permanent":
            yield Feature(name, expiry, None)
            continue
        try:
            expires_on = datetime.datetime.strptime(expiry, "%d-%b-%Y")
        except ValueError:
            raise DecodeError(f"license: unable to parse date {expiry!r} of {name}") from None
        yield Feature(name, expiry, expires_on)


def decode_file_content(content: str) -> str:
    try:
        return base64.b64decode(content).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"license: unable to decode file content: {e}") from e


def feature_state(
    feature: Feature, now: datetime.datetime, warn_days: float, crit_days: float
) -> State:
    if feature.expires_on is None:
        return State.OK
    remaining = feature.expires_on - now
    if remaining < datetime.timedelta(days=crit_days):
        return State.CRIT
    if remaining < datetime.timedelta(days=warn_days):
        return State.WARN
    return State.OK


def check_license(request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
    filename = required(request, "object_name")
    warn_days, crit_days = parse_levels(request)

    response = fetch(
        request.endpoint or "config",
        "systemfile",
        None,
        file_options(filename),
    )
    content = decode_file_content(
        text_value(extract_field(extract(response, "systemfile"), "filecontent"))
    )

    now = datetime.datetime.now()
    collector = CheckResultCollector()
    for feature in parse_license(content):
        collector.add_message(
            feature_state(feature, now, warn_days, crit_days),
            f"{feature.name} expires on {feature.expiry}"
            if feature.expires_on
            else f"{feature.name} never expires",
        )

    result = collector.finalize()
    return dataclasses.replace(result, summary=f"license: {result.summary}")


check_registry.register(
    NitroCheck(
        name="license",
        evaluate=check_license,
        requires=("object_name", "warning", "critical"),
    )
)
