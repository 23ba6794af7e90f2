#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from abc import abstractmethod
from collections.abc import Iterator, Mapping
from typing import TypeVar

_VT = TypeVar("_VT")


class Registry(Mapping[str, _VT]):
    """An abstract registry that stores objects by name.

    To create a registry inherit from ``Registry[A]`` where ``A`` is the class
    of the objects that are stored in the registry and tell it how to name
    them.

    Examples:

        >>> class A:
        ...     def __init__(self, name: str):
        ...         self.name = name
        >>> class MyRegistry(Registry[A]):
        ...     def plugin_name(self, instance: A) -> str:
        ...         return instance.name
        >>> my_registry = MyRegistry()
        >>> my_a = my_registry.register(A("my_a"))
        >>> assert my_registry["my_a"] is my_a
        >>> my_registry.register(A("my_a"))
        Traceback (most recent call last):
        ...
        ValueError: 'my_a' is already registered

    """

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[str, _VT] = {}

    @abstractmethod
    def plugin_name(self, instance: _VT) -> str:
        raise NotImplementedError()

    def register(self, instance: _VT) -> _VT:
        name = self.plugin_name(instance)
        if name in self._entries:
            raise ValueError(f"{name!r} is already registered")
        self._entries[name] = instance
        return instance

    def __getitem__(self, key: str) -> _VT:
        return self._entries.__getitem__(key)

    def __len__(self) -> int:
        return self._entries.__len__()

    def __iter__(self) -> Iterator[str]:
        return self._entries.__iter__()
