#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""check_netscaler - Monitor NetScaler appliances (VPX/MPX/SDX/CPX) via the NITRO API

Evaluate one check, write one line according to the monitoring plug-in API and
terminate with the matching exit code:
OK: 0
WARN: 1
CRIT: 2
UNKNOWN: 3
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from typing import NoReturn

import pydantic
import urllib3

from nitro_probe.checks import CheckRequest, dispatch
from nitro_probe.utils import password_store
from nitro_probe.utils.check_result import State
from nitro_probe.utils.exceptions import NitroError, UsageError
from nitro_probe.utils.nitro_client import NitroClient, NitroFetcher
from nitro_probe.utils.vcrtrace import vcrtrace

LOGGER = logging.getLogger("nitro_probe")

PLUGIN_NAME = "NetScaler"

ClientFactory = Callable[[CheckRequest], AbstractContextManager[NitroFetcher]]


def main(
    argv: Sequence[str] | None = None,
    client_factory: ClientFactory | None = None,
) -> int:
    exitcode, output = _check_netscaler_main(
        sys.argv[1:] if argv is None else argv,
        client_factory or _nitro_client,
    )
    _output_check_result(output)
    return int(exitcode)


def _output_check_result(text: str) -> None:
    sys.stdout.write("%s\n" % text)


def _format_result(state: State, text: str) -> str:
    """
    >>> _format_result(State.WARN, "nsconfig::configchanged unsaved configuration changes")
    'NetScaler WARNING - nsconfig::configchanged unsaved configuration changes'
    """
    return f"{PLUGIN_NAME} {state.long_name} - {text}"


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        # usage errors are UNKNOWN for the monitoring core
        self.print_usage(sys.stderr)
        self.exit(int(State.UNKNOWN), f"{self.prog}: error: {message}\n")


def parse_arguments(argv: Sequence[str]) -> argparse.Namespace:
    parser = _ArgumentParser(
        prog="check_netscaler",
        description=(__doc__ or "").split("\n\n")[0],
    )
    parser.add_argument(
        "-H", "--hostname", required=True, help="Hostname of the NetScaler appliance to connect to"
    )
    parser.add_argument(
        "-P", "--port", type=int, default=None, help="Establish connection to an alternate TCP port"
    )
    parser.add_argument(
        "-s", "--ssl", action="store_true", help="Establish connection to NetScaler using SSL"
    )
    parser.add_argument(
        "--cert-check",
        action="store_true",
        help="Verify the TLS certificate of the appliance (default: no verification)",
    )
    parser.add_argument(
        "-u",
        "--username",
        default="nsroot",
        help="Username to log into box as (default: nsroot)",
    )
    secret = parser.add_mutually_exclusive_group()
    secret.add_argument(
        "-p",
        "--password",
        default=None,
        help="Password for login username (default: nsroot)",
    )
    secret.add_argument(
        "--password-reference",
        metavar="ID:FILE",
        default=None,
        help="Password store reference to the password for login username",
    )
    parser.add_argument(
        "-C", "--command", required=True, help="Check to be executed on the appliance"
    )
    parser.add_argument(
        "-o", "--objecttype", default=None, help="Objecttype (target) for the check command"
    )
    parser.add_argument(
        "-n", "--objectname", default=None, help="Filter request to a specific objectname"
    )
    parser.add_argument(
        "-e",
        "--endpoint",
        default=None,
        help="Override option for the API endpoint (stat or config)",
    )
    parser.add_argument("-w", "--warning", default=None, help="Value for warning")
    parser.add_argument("-c", "--critical", default=None, help="Value for critical")
    parser.add_argument("-x", "--urlopts", default=None, help="Add additional url options")
    parser.add_argument(
        "-a", "--api", default="v1", help="Version of the NITRO API to use (default: v1)"
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=15.0,
        help="Seconds before the connection times out (default: 15)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log the request URL (-v) and the raw response (-vv) to stderr",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Debug mode: let Python exceptions come through.",
    )
    parser.add_argument(
        "--vcrtrace",
        action=vcrtrace(
            filter_headers=[("X-NITRO-USER", "****"), ("X-NITRO-PASS", "****")],
        ),
    )
    return parser.parse_args(argv)


def _setup_logging(verbose: int, debug: bool) -> None:
    logging.basicConfig(
        level=(
            {0: logging.WARN, 1: logging.INFO, 2: logging.DEBUG}.get(verbose, logging.DEBUG)
            if debug or verbose > 0
            else logging.CRITICAL
        ),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def make_request(args: argparse.Namespace) -> CheckRequest:
    password = (
        password_store.resolve_reference(args.password_reference)
        if args.password_reference
        else args.password
    )
    try:
        return CheckRequest.model_validate(
            {
                "hostname": args.hostname,
                "port": args.port,
                "use_ssl": args.ssl,
                "cert_check": args.cert_check,
                "username": args.username,
                "password": "nsroot" if password is None else password,
                "api_version": args.api,
                "command": args.command,
                "object_type": args.objecttype,
                "object_name": args.objectname,
                "endpoint": args.endpoint,
                "warning": args.warning,
                "critical": args.critical,
                "urlopts": args.urlopts,
                "timeout": args.timeout,
            }
        )
    except pydantic.ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        raise UsageError(f"invalid parameter {location}: {error['msg']}") from e


def _nitro_client(request: CheckRequest) -> NitroClient:
    if not request.cert_check:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
    return NitroClient(
        hostname=request.hostname,
        port=request.port,
        use_ssl=request.use_ssl,
        username=request.username,
        password=request.password,
        api_version=request.api_version,
        timeout=request.timeout,
        cert_check=request.cert_check,
        logger=logging.getLogger("nitro_probe.nitro_client"),
    )


def _check_netscaler_main(argv: Sequence[str], client_factory: ClientFactory) -> tuple[int, str]:
    args = parse_arguments(argv)
    _setup_logging(args.verbose, args.debug)

    try:
        request = make_request(args)
        check = dispatch(request.command)
        LOGGER.info("running check %s on %s", check.name, request.hostname)
        check.validate(request)
        with client_factory(request) as fetch:
            result = check.evaluate(request, fetch)

    except NitroError as e:
        if args.debug:
            raise
        return State.UNKNOWN, _format_result(State.UNKNOWN, str(e))

    except Exception as e:
        if args.debug:
            raise
        return State.UNKNOWN, _format_result(State.UNKNOWN, f"Unhandled exception: {e!r}")

    if not check.emits_verdict:
        return State.OK, result.summary
    return result.state, _format_result(result.state, result.as_text())


if __name__ == "__main__":
    sys.exit(main())
