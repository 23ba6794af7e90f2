#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from nitro_probe.utils.structured import from_json, StructuredResponse


class FakeFetcher:
    """Answers every request with the canned response of its object type"""

    def __init__(self, responses: Mapping[str, Any]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, str, str | None, str | None]] = []

    def __call__(
        self,
        endpoint: str,
        object_type: str,
        object_name: str | None = None,
        options: str | None = None,
    ) -> StructuredResponse:
        self.calls.append((endpoint, object_type, object_name, options))
        return from_json(self.responses[object_type])


class StubResponse:
    def __init__(self, status_code: int, text: str) -> None:
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def __enter__(self) -> StubResponse:
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


class StubSession:
    def __init__(
        self,
        response: StubResponse | None = None,
        exception: Exception | None = None,
    ) -> None:
        self.headers: dict[str, str] = {}
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self._response = response
        self._exception = exception

    def get(self, url: str, **kwargs: Any) -> StubResponse:
        self.requests.append((url, kwargs))
        if self._exception is not None:
            raise self._exception
        assert self._response is not None
        return self._response

    def close(self) -> None:
        self.closed = True


@pytest.fixture(name="make_fetcher")
def fixture_make_fetcher() -> Callable[[Mapping[str, Any]], FakeFetcher]:
    return FakeFetcher


@pytest.fixture(name="make_session")
def fixture_make_session() -> Callable[..., StubSession]:
    def _make_session(
        status_code: int = 200,
        text: str = "",
        exception: Exception | None = None,
    ) -> StubSession:
        return StubSession(StubResponse(status_code, text), exception)

    return _make_session
