#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""States, performance data and the aggregation of per item results"""

from __future__ import annotations

import dataclasses
import enum
import re
from collections.abc import Iterable, Sequence

__all__ = [
    "ActiveCheckResult",
    "CheckResultCollector",
    "PerfData",
    "State",
    "state_markers",
    "worst_service_state",
]


class State(enum.IntEnum):
    OK = 0
    WARN = 1
    CRIT = 2
    UNKNOWN = 3

    @property
    def long_name(self) -> str:
        return {
            State.OK: "OK",
            State.WARN: "WARNING",
            State.CRIT: "CRITICAL",
            State.UNKNOWN: "UNKNOWN",
        }[self]


state_markers = {
    State.OK: "",
    State.WARN: "(!)",
    State.CRIT: "(!!)",
    State.UNKNOWN: "(?)",
}


def worst_service_state(*states: State, default: State) -> State:
    """Return the 'worst' aggregation of all states

    The numeric encoding does not reflect the order of severity, where

        OK -> WARN -> UNKNOWN -> CRIT

    That's why this function is just not quite `max`.

    >>> worst_service_state(State.OK, State.WARN, default=State.OK).name
    'WARN'
    >>> worst_service_state(State.WARN, State.CRIT, State.UNKNOWN, default=State.OK).name
    'CRIT'
    >>> worst_service_state(State.OK, State.UNKNOWN, default=State.OK).name
    'UNKNOWN'
    >>> worst_service_state(default=State.OK).name
    'OK'
    """
    return State.CRIT if State.CRIT in states else max(states, default=default)


_PLAIN_LABEL = re.compile(r"^[A-Za-z0-9_.:-]+$")

PerfValue = int | float | str


def _render_number(value: PerfValue | None) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclasses.dataclass(frozen=True)
class PerfData:
    label: str
    value: PerfValue
    unit: str = ""
    warn: PerfValue | None = None
    crit: PerfValue | None = None
    min: PerfValue | None = None
    max: PerfValue | None = None

    def render(self) -> str:
        """
        >>> PerfData("up", 3, min=0).render()
        'up=3;;;0'
        >>> PerfData("lb 1.hits", 4.0, warn="10", crit="20").render()
        "'lb 1.hits'=4;10;20"
        >>> PerfData("quorum", 66.67, "%", 90, 50, 0, 100).render()
        'quorum=66.67%;90;50;0;100'
        """
        fields = [
            f"{_render_number(self.value)}{self.unit}",
            *(_render_number(v) for v in (self.warn, self.crit, self.min, self.max)),
        ]
        while fields[-1] == "":
            fields.pop()
        return f"{self._quoted_label()}={';'.join(fields)}"

    def _quoted_label(self) -> str:
        if _PLAIN_LABEL.match(self.label):
            return self.label
        return "'%s'" % self.label.replace("'", "''")


@dataclasses.dataclass(frozen=True)
class ActiveCheckResult:
    state: State = State.OK
    summary: str = ""
    metrics: Sequence[PerfData] = ()

    def as_text(self) -> str:
        safe_summary = self._replace_pipe(self.summary)
        if not self.metrics:
            return safe_summary
        return " | ".join((safe_summary, " ".join(m.render() for m in self.metrics)))

    @staticmethod
    def _replace_pipe(txt: str) -> str:
        """The vertical bar indicates end of service output and start of metrics.
        Replace the ones in the output by a Unicode "Light vertical bar"

        >>> ActiveCheckResult._replace_pipe("web|a down")
        'web❘a down'
        """
        return txt.replace("|", "❘")


class CheckResultCollector:
    """Collects the messages and metrics of one evaluation

    Messages are kept in the order they were added. The overall state is the
    worst state of all messages, OK if there are none. The collector does not
    know about any check specific rules; evaluators that need to override the
    state do so on the finalized result.
    """

    separator = ", "

    def __init__(self) -> None:
        self._messages: list[tuple[State, str]] = []
        self._metrics: list[PerfData] = []

    def add_message(self, state: State, text: str) -> None:
        self._messages.append((state, text))

    def add_perfdata(self, perfdata: PerfData) -> None:
        self._metrics.append(perfdata)

    @property
    def states(self) -> Sequence[State]:
        return [state for state, _text in self._messages]

    def messages(self, *states: State) -> Iterable[str]:
        for state, text in self._messages:
            if not states or state in states:
                yield self._add_marker(text, state)

    def finalize(self) -> ActiveCheckResult:
        return ActiveCheckResult(
            state=worst_service_state(*self.states, default=State.OK),
            summary=self.separator.join(self.messages()),
            metrics=tuple(self._metrics),
        )

    @staticmethod
    def _add_marker(text: str, state: State) -> str:
        marker = state_markers[state]
        return text if text.endswith(marker) else f"{text}{marker}"
