#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Common ground of all checks: the request model, the plug-in type and its registry"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from typing import Literal

from pydantic import BaseModel, ConfigDict

from nitro_probe.utils.check_result import ActiveCheckResult
from nitro_probe.utils.exceptions import DecodeError, UsageError
from nitro_probe.utils.nitro_client import NitroFetcher
from nitro_probe.utils.plugin_registry import Registry
from nitro_probe.utils.structured import ScalarValue

Parameter = Literal["object_type", "object_name", "warning", "critical"]

_PARAMETER_OPTIONS: dict[Parameter, str] = {
    "object_type": "objecttype (-o)",
    "object_name": "objectname (-n)",
    "warning": "warning (-w)",
    "critical": "critical (-c)",
}


class CheckRequest(BaseModel):
    """Everything one invocation of the plug-in needs to know"""

    model_config = ConfigDict(frozen=True)

    hostname: str
    port: int | None = None
    use_ssl: bool = False
    cert_check: bool = False
    username: str = "nsroot"
    password: str = "nsroot"
    api_version: str = "v1"
    command: str
    object_type: str | None = None
    object_name: str | None = None
    endpoint: Literal["stat", "config"] | None = None
    warning: str | None = None
    critical: str | None = None
    urlopts: str | None = None
    timeout: float = 15.0

    @property
    def object_names(self) -> Sequence[str]:
        """The object name interpreted as a comma separated list

        >>> CheckRequest(hostname="ns", command="above", object_name="cpuusagepcnt, memusagepcnt").object_names
        ['cpuusagepcnt', 'memusagepcnt']
        """
        if not self.object_name:
            return []
        return [name.strip() for name in self.object_name.split(",") if name.strip()]


Evaluator = Callable[[CheckRequest, NitroFetcher], ActiveCheckResult]


@dataclasses.dataclass(frozen=True)
class NitroCheck:
    name: str
    evaluate: Evaluator
    requires: Sequence[Parameter] = ()
    aliases: Sequence[str] = ()
    emits_verdict: bool = True

    def validate(self, request: CheckRequest) -> None:
        missing = [
            _PARAMETER_OPTIONS[parameter]
            for parameter in self.requires
            if getattr(request, parameter) in (None, "")
        ]
        if missing:
            raise UsageError(f"{self.name}: command requires parameter for {', '.join(missing)}")

    def run(self, request: CheckRequest, fetch: NitroFetcher) -> ActiveCheckResult:
        self.validate(request)
        return self.evaluate(request, fetch)


class CheckRegistry(Registry[NitroCheck]):
    def plugin_name(self, instance: NitroCheck) -> str:
        return instance.name

    def lookup(self, command: str) -> NitroCheck:
        for check in self.values():
            if command == check.name or command in check.aliases:
                return check
        raise UsageError(f"unknown command {command} given")


check_registry = CheckRegistry()


def required(request: CheckRequest, parameter: Parameter) -> str:
    """
    >>> required(CheckRequest(hostname="ns", command="state", object_type="lbvserver"), "object_type")
    'lbvserver'
    """
    value = getattr(request, parameter)
    if value in (None, ""):
        raise UsageError(f"command requires parameter for {_PARAMETER_OPTIONS[parameter]}")
    return value


def parse_level(value: str | None, option: str, default: float | None = None) -> float:
    """
    >>> parse_level("80", "warning")
    80.0
    >>> parse_level(None, "critical", default=50)
    50.0
    """
    if value in (None, ""):
        if default is None:
            raise UsageError(f"command requires parameter for {option}")
        return float(default)
    try:
        return float(value)
    except ValueError:
        raise UsageError(f"{option} must be numeric, got {value!r}") from None


def parse_levels(
    request: CheckRequest,
    default_warning: float | None = None,
    default_critical: float | None = None,
) -> tuple[float, float]:
    return (
        parse_level(request.warning, "warning", default_warning),
        parse_level(request.critical, "critical", default_critical),
    )


def numeric_value(value: ScalarValue, field: str) -> float:
    """Interpret a response value as number, NITRO sends most counters as strings

    >>> numeric_value("42", "cpuusagepcnt")
    42.0
    """
    if isinstance(value, bool) or value is None:
        raise DecodeError(f"field {field!r} is not numeric: {value!r}")
    try:
        return float(value)
    except ValueError:
        raise DecodeError(f"field {field!r} is not numeric: {value!r}") from None


def text_value(value: ScalarValue) -> str:
    """
    >>> text_value(None)
    ''
    >>> text_value(3)
    '3'
    """
    return "" if value is None else str(value)
