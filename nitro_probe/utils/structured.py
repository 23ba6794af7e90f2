#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Read-only view on a decoded NITRO response

The NITRO API answers the same kind of query with a single object for some
object types and with a list of objects for others. The response is therefore
wrapped into a small tagged variant (Scalar, Mapping, Sequence) and the
extraction functions below are defined for all three, so that evaluators do not
have to care which shape they got unless they really want to.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from typing import Any

from nitro_probe.utils.exceptions import DecodeError, FieldNotFound

__all__ = [
    "Mapping",
    "Scalar",
    "ScalarValue",
    "Sequence",
    "StructuredResponse",
    "extract",
    "extract_field",
    "field_or_default",
    "from_json",
    "items",
    "records",
    "to_python",
]

ScalarValue = str | int | float | bool | None


@dataclasses.dataclass(frozen=True)
class Scalar:
    value: ScalarValue


@dataclasses.dataclass(frozen=True)
class Mapping:
    fields: dict[str, StructuredResponse]

    def __contains__(self, key: object) -> bool:
        return key in self.fields


@dataclasses.dataclass(frozen=True)
class Sequence:
    items: tuple[StructuredResponse, ...]

    def __len__(self) -> int:
        return len(self.items)


StructuredResponse = Scalar | Mapping | Sequence


def from_json(obj: Any) -> StructuredResponse:
    """Wrap the result of json.loads

    >>> from_json({"lbvserver": [{"name": "lb1"}]})
    Mapping(fields={'lbvserver': Sequence(items=(Mapping(fields={'name': Scalar(value='lb1')}),))})
    """
    if isinstance(obj, dict):
        return Mapping({str(k): from_json(v) for k, v in obj.items()})
    if isinstance(obj, list):
        return Sequence(tuple(from_json(v) for v in obj))
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return Scalar(obj)
    raise DecodeError(f"unexpected value in response: {obj!r}")


def to_python(doc: StructuredResponse) -> Any:
    match doc:
        case Mapping(fields):
            return {k: to_python(v) for k, v in fields.items()}
        case Sequence(items):
            return [to_python(v) for v in items]
        case Scalar(value):
            return value
    raise TypeError(doc)


def extract(doc: StructuredResponse, object_type: str) -> StructuredResponse:
    """Narrow a response to the part keyed by the requested object type

    >>> extract(from_json({"errorcode": 0, "nsconfig": {"configchanged": False}}), "nsconfig")
    Mapping(fields={'configchanged': Scalar(value=False)})
    """
    match doc:
        case Mapping(fields):
            try:
                return fields[object_type]
            except KeyError:
                raise FieldNotFound(object_type) from None
    raise FieldNotFound(object_type)


def items(doc: StructuredResponse, object_type: str) -> Iterator[Mapping]:
    """Iterate the objects of the requested type

    NITRO drops the object type key altogether if nothing matched the query, so
    a successful answer without it counts as an empty list.

    >>> list(items(from_json({"errorcode": 0, "message": "Done", "severity": "NONE"}), "server"))
    []
    >>> [r.fields["name"] for r in items(from_json({"server": {"name": "srv1"}}), "server")]
    [Scalar(value='srv1')]
    """
    match doc:
        case Mapping(fields) if object_type not in fields:
            return iter(())
    return records(extract(doc, object_type))


def records(doc: StructuredResponse) -> Iterator[Mapping]:
    """Iterate the objects of a narrowed response, whatever its shape

    A single object counts as a one element list, scalars are skipped.
    """
    match doc:
        case Mapping():
            yield doc
        case Sequence(items):
            yield from (item for item in items if isinstance(item, Mapping))


def extract_field(doc: StructuredResponse, field_name: str) -> ScalarValue:
    """Get a scalar value by key

    For a list of objects the first object carrying the field wins.

    >>> extract_field(from_json({"name": "lb1", "state": "UP"}), "state")
    'UP'
    >>> extract_field(from_json([{"name": "lb1"}, {"state": "DOWN"}]), "state")
    'DOWN'
    """
    for record in records(doc):
        match record.fields.get(field_name):
            case Scalar(value):
                return value
            case None:
                continue
            case _:
                raise DecodeError(f"field {field_name!r} is not a scalar value")
    raise FieldNotFound(field_name)


def field_or_default(
    doc: StructuredResponse, field_name: str, default: ScalarValue = None
) -> ScalarValue:
    try:
        return extract_field(doc, field_name)
    except FieldNotFound:
        return default
