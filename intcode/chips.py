"""
Storage primitives for the intcode machine.

Memory (bounds-checked word store), Register (instruction pointer) and
OutputQueue (FIFO of produced values).
"""

from __future__ import annotations

import collections
from typing import Iterable

from .errors import OutOfBoundsAccess


class Memory:
    """Fixed-size linear store of signed integers. Never grows."""

    def __init__(self, program: Iterable[int]):
        self.data: list[int] = list(program)
        self.reads = 0
        self.writes = 0

    def __len__(self) -> int:
        return len(self.data)

    def _check(self, address: int):
        if not 0 <= address < len(self.data):
            raise OutOfBoundsAccess(
                f"address outside memory of {len(self.data)} words",
                address=address,
            )

    def read_at(self, address: int) -> int:
        self._check(address)
        self.reads += 1
        return self.data[address]

    def set(self, address: int, value: int):
        self._check(address)
        self.writes += 1
        self.data[address] = value

    def snapshot(self) -> list[int]:
        return list(self.data)


class Register:
    """Non-negative integer register (instruction pointer)."""

    def __init__(self, value: int = 0):
        self.value = value

    def load(self, val: int):
        if val < 0:
            raise OutOfBoundsAccess("negative register load", address=val)
        self.value = val

    def advance(self) -> int:
        """Return the current value, then increment."""
        val = self.value
        self.value = val + 1
        return val


class OutputQueue:
    """Unbounded FIFO of output values. Append-only until drained."""

    def __init__(self):
        self.buffer: collections.deque[int] = collections.deque()

    def push(self, value: int):
        self.buffer.append(value)

    def pop(self) -> int | None:
        return self.buffer.popleft() if self.buffer else None

    def ready(self) -> bool:
        return len(self.buffer) > 0

    def __len__(self) -> int:
        return len(self.buffer)

    def __getitem__(self, index: int) -> int:
        return self.buffer[index]

    def __iter__(self):
        return iter(self.buffer)
