#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Naming irregularities of the NITRO object types

The keys that hold an object's name and state differ between object types, as
does the endpoint that reports the state and, in a few cases, the key the
response is nested under. New object types are added as rows here.
"""

from typing import Final, Literal, NamedTuple

Endpoint = Literal["stat", "config"]


class ObjectType(NamedTuple):
    name_field: str = "name"
    state_field: str = "state"
    default_endpoint: Endpoint = "stat"
    response_key: str | None = None


_DEFAULT: Final = ObjectType()

OBJECT_TYPES: Final[dict[str, ObjectType]] = {
    "service": ObjectType(
        name_field="name",
        state_field="svrstate",
        default_endpoint="config",
    ),
    "servicegroup": ObjectType(
        name_field="servicegroupname",
        state_field="servicegroupeffectivestate",
        default_endpoint="config",
    ),
    "sslcertkey": ObjectType(name_field="certkey", default_endpoint="config"),
    "server": ObjectType(default_endpoint="config"),
    "interface": ObjectType(
        name_field="devicename",
        default_endpoint="config",
        response_key="Interface",
    ),
}


def lookup(object_type: str) -> ObjectType:
    """
    >>> lookup("servicegroup").state_field
    'servicegroupeffectivestate'
    >>> lookup("lbvserver")
    ObjectType(name_field='name', state_field='state', default_endpoint='stat', response_key=None)
    """
    return OBJECT_TYPES.get(object_type, _DEFAULT)


def response_key(object_type: str) -> str:
    return lookup(object_type).response_key or object_type
