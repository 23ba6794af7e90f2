#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Read credentials from a password store file instead of the command line.

The store is a plain text file with one `ident:password` entry per line. A
reference on the command line has the form `ident:/path/to/store`.
"""

from pathlib import Path

from nitro_probe.utils.exceptions import UsageError


def load(path: Path) -> dict[str, str]:
    passwords = {}
    try:
        with path.open(encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                ident, password = line.rstrip("\n").split(":", 1)
                passwords[ident] = password
    except OSError as e:
        raise UsageError(f"pwstore: cannot read {path}: {e.strerror}") from e
    except ValueError as e:
        raise UsageError(f"pwstore: invalid entry in {path}") from e
    return passwords


def lookup(path: Path, password_id: str) -> str:
    try:
        return load(path)[password_id]
    except KeyError:
        raise UsageError(f"pwstore: password '{password_id}' does not exist") from None


def resolve_reference(reference: str) -> str:
    """Look up a reference of the form `ident:/path/to/store`"""
    try:
        password_id, file = reference.split(":", 1)
    except ValueError:
        raise UsageError(f"pwstore: invalid reference: {reference}") from None
    return lookup(Path(file), password_id)
