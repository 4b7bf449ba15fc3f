"""
Lazy pull streams used for machine input and output.

A stream is single-consumer: `next()` hands out each value once and never
rewinds. After the last value every call returns END. Composition is plain
data: a PrefixStream holds its head value and a reference to the tail it
defers to, so wiring machines together never builds closures.

Pulling a MachineOutputStream may run the producing machine until it emits
a value or halts. That is how several machines interleave on one thread:
an Input on one machine pulls its upstream's output, which steps the
upstream, which may in turn pull further upstream.
"""

from __future__ import annotations

import collections
from typing import TYPE_CHECKING, Iterable, Iterator

if TYPE_CHECKING:
    from .machine import IntcodeMachine


END = None  # end-of-sequence sentinel


class Stream:
    """Base class. Subclasses implement `next()`."""

    def next(self) -> int | None:
        raise NotImplementedError

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        value = self.next()
        if value is END:
            raise StopIteration
        return value


class SequenceStream(Stream):
    """Finite stream over a copy of the given values."""

    def __init__(self, values: Iterable[int]):
        self._values = collections.deque(values)

    def next(self) -> int | None:
        return self._values.popleft() if self._values else END

    def remaining(self) -> list[int]:
        """Values not yet pulled. Does not consume them."""
        return list(self._values)

    def __repr__(self) -> str:
        return f"SequenceStream({list(self._values)!r})"


class PrefixStream(Stream):
    """Yields `head` once, then whatever `tail` yields."""

    def __init__(self, head: int, tail: Stream):
        self.head = head
        self.tail = tail
        self._head_pending = True

    def next(self) -> int | None:
        if self._head_pending:
            self._head_pending = False
            return self.head
        return self.tail.next()

    def __repr__(self) -> str:
        head = repr(self.head) if self._head_pending else "-"
        return f"PrefixStream({head}, {self.tail!r})"


class MachineOutputStream(Stream):
    """Demand-driven view of a machine's output queue."""

    def __init__(self, machine: IntcodeMachine):
        self.machine = machine

    def next(self) -> int | None:
        queue = self.machine.output_buffer
        if not queue.ready():
            self.machine.run_to_next_output()
        value = queue.pop()
        return END if value is None else value

    def __repr__(self) -> str:
        return f"MachineOutputStream({self.machine.name!r})"


def from_sequence(values: Iterable[int]) -> SequenceStream:
    return SequenceStream(values)


def prefix(value: int, tail: Stream) -> PrefixStream:
    return PrefixStream(value, tail)


def to_list(stream: Stream) -> list[int]:
    """Drain a stream. Does not return until the stream ends."""
    return list(stream)
