#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import argparse
import atexit
from collections.abc import Sequence
from typing import Any


def vcrtrace(**vcr_init_kwargs: Any) -> type[argparse.Action]:
    """Returns the class of an argparse.Action to enter a vcr context

    Provided keyword arguments will be passed to the call of vcrpy.VCR.
    The minimal change to use vcrtrace in your program is to add this
    line to your argument parsing:

        parser.add_argument("--vcrtrace", action=vcrtrace())

    If this flag is set to a TRACEFILE that does not exist yet, it will be created and
    all requests the program sends and their corresponding answers will be recorded in said file.
    If the file already exists, no requests are sent to the server, but the responses will be
    replayed from the tracefile.
    """

    class VcrTraceAction(argparse.Action):
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            kwargs.setdefault("metavar", "TRACEFILE")
            kwargs["help"] = "{} {}".format(
                (vcrtrace.__doc__ or "").split("\n\n")[3].strip(),
                kwargs.get("help", ""),
            )
            super().__init__(*args, nargs=None, default=False, **kwargs)

        def __call__(
            self,
            _parser: argparse.ArgumentParser,
            namespace: argparse.Namespace,
            filename: str | Sequence[Any] | None,
            option_string: str | None = None,
        ) -> None:
            setattr(namespace, self.dest, filename)
            if not filename:
                return

            import vcr  # type: ignore[import-untyped]

            global_context = vcr.VCR(**vcr_init_kwargs).use_cassette(filename)
            atexit.register(global_context.__exit__)
            global_context.__enter__()

    return VcrTraceAction
