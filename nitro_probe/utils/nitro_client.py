#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Client for the NITRO REST API

One authenticated GET per call, the decoded body is returned as a
StructuredResponse. There are no retries: every failure is fatal to the
invocation.
"""

from __future__ import annotations

import json
import logging
from types import TracebackType
from typing import Protocol
from urllib.parse import quote

import requests

from nitro_probe.utils.exceptions import ApiError, DecodeError
from nitro_probe.utils.structured import from_json, StructuredResponse

LOGGER = logging.getLogger("nitro_probe.nitro_client")

API_ROOT = "nitro"


class NitroFetcher(Protocol):
    def __call__(
        self,
        endpoint: str,
        object_type: str,
        object_name: str | None = None,
        options: str | None = None,
    ) -> StructuredResponse: ...


def quote_object_name(object_name: str) -> str:
    """The NITRO API expects object names to be escaped twice

    >>> quote_object_name("lb_web")
    'lb_web'
    >>> quote_object_name("web 01/a")
    'web%252001%252Fa'
    """
    return quote(quote(object_name, safe=""), safe="")


class NitroClient:
    def __init__(
        self,
        *,
        hostname: str,
        username: str,
        password: str,
        port: int | None = None,
        use_ssl: bool = False,
        api_version: str = "v1",
        timeout: float = 15.0,
        cert_check: bool = False,
        logger: logging.Logger = LOGGER,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = "{}://{}{}/{}/{}".format(
            "https" if use_ssl else "http",
            hostname,
            f":{port}" if port else "",
            API_ROOT,
            api_version,
        )
        self._timeout = timeout
        self._verify = cert_check
        self._logger = logger
        self._session = requests.Session() if session is None else session
        self._session.headers.update({"X-NITRO-USER": username, "X-NITRO-PASS": password})

    def __enter__(self) -> NitroClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def url(
        self,
        endpoint: str,
        object_type: str,
        object_name: str | None = None,
        options: str | None = None,
    ) -> str:
        url = f"{self._base_url}/{endpoint}/{object_type}"
        if object_name:
            url += f"/{quote_object_name(object_name)}"
        if options:
            url += f"?{options}"
        return url

    def __call__(
        self,
        endpoint: str,
        object_type: str,
        object_name: str | None = None,
        options: str | None = None,
    ) -> StructuredResponse:
        url = self.url(endpoint, object_type, object_name, options)
        self._logger.info("target url is %s", url)

        try:
            with self._session.get(
                url,
                headers={
                    "Content-Type": f"application/vnd.com.citrix.netscaler.{object_type}+json"
                },
                verify=self._verify,
                timeout=self._timeout,
            ) as response:
                status_code, body, success = response.status_code, response.text, response.ok
        except requests.exceptions.Timeout as e:
            self._logger.error("Request timed out: %s", e)
            raise ApiError(f"request timed out after {self._timeout:g}s") from e
        except requests.exceptions.RequestException as e:
            self._logger.error("Connection failed: %s", e)
            raise ApiError(f"connection failed: {e}") from e

        self._logger.debug("response of request is:\n%s", body)

        if not success:
            raise ApiError(_error_message(status_code, body), status_code, body)

        try:
            return from_json(json.loads(body))
        except ValueError as e:
            raise DecodeError(f"unable to decode response of {url}: {e}") from e

    fetch = __call__


def _error_message(status_code: int, body: str) -> str:
    """NITRO reports errors as JSON, fall back to the raw body otherwise

    >>> _error_message(401, '{"errorcode": 354, "message": "Invalid username or password", "severity": "ERROR"}')
    'NITRO error 354 (HTTP 401): Invalid username or password'
    >>> _error_message(503, 'Service Unavailable')
    'Service Unavailable'
    >>> _error_message(500, '')
    'HTTP 500'
    """
    try:
        error = json.loads(body)
        return f"NITRO error {error['errorcode']} (HTTP {status_code}): {error['message']}"
    except (ValueError, TypeError, KeyError):
        return body.strip() or f"HTTP {status_code}"
