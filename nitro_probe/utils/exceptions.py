#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""User-defined exceptions of the plug-in.

Every one of them is fatal to the current invocation. The active check main
function catches them at top level and terminates with exit code 3, in order to
be compatible with the monitoring plug-in API.
"""

__all__ = [
    "ApiError",
    "DecodeError",
    "FieldNotFound",
    "NitroError",
    "UsageError",
]


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class NitroError(Exception):
    pass


class UsageError(NitroError):
    """A required parameter is missing or invalid. Raised before any network I/O."""


class ApiError(NitroError):
    """The request failed: transport error, timeout or a non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class DecodeError(NitroError):
    """The response body (or a value inside it) could not be interpreted."""


class FieldNotFound(NitroError):
    def __init__(self, field: str) -> None:
        super().__init__(f"field {field!r} not found in response")
        self.field = field
