#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from collections.abc import Callable
from typing import Any

from nitro_probe.checks import CheckRequest, dispatch


def test_debug_dumps_the_response(make_fetcher: Callable[..., Any]) -> None:
    fetch = make_fetcher({"lbvserver": {"errorcode": 0, "lbvserver": [{"name": "lb_web"}]}})
    check = dispatch("debug")

    result = check.run(
        CheckRequest(hostname="ns", command="debug", object_type="lbvserver", object_name="lb_web"),
        fetch,
    )

    assert not check.emits_verdict
    assert result.summary == "{'errorcode': 0, 'lbvserver': [{'name': 'lb_web'}]}"
    assert fetch.calls == [("stat", "lbvserver", "lb_web", None)]
