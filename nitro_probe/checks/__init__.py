#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""The checks of the plug-in, one module per kind of check

Importing this package registers all of them in `check_registry`.
"""

from nitro_probe.checks import (  # noqa: F401
    debug,
    hwinfo,
    interfaces,
    license,
    matches,
    nsconfig,
    performancedata,
    servicegroup,
    sslcert,
    staserver,
    state,
    threshold,
)
from nitro_probe.checks._base import check_registry, CheckRequest, NitroCheck

__all__ = ["CheckRequest", "NitroCheck", "check_registry", "dispatch"]


def dispatch(command: str) -> NitroCheck:
    """Map a command name (or one of its aliases) to its check

    >>> dispatch("string_not").name
    'matches_not'
    """
    return check_registry.lookup(command)
