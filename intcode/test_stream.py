"""
Verification suite for lazy streams: sequence streams, prefix composition,
and demand-driven machine output.
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from intcode.errors import NetworkDeadlock
from intcode.machine import IntcodeMachine
from intcode.stream import (
    END, MachineOutputStream, PrefixStream, SequenceStream, from_sequence,
    prefix, to_list,
)


def test_sequence_round_trip():
    for values in ([], [0], [1, 2, 3], [-5, 0, 5, 2 ** 40], list(range(50))):
        assert to_list(from_sequence(values)) == values


def test_sequence_stream_is_single_consumer():
    values = [4, 5]
    stream = from_sequence(values)
    assert isinstance(stream, SequenceStream)
    assert stream.next() == 4
    assert stream.remaining() == [5]
    assert stream.next() == 5
    for _ in range(3):
        assert stream.next() is END

    # The source list is untouched; a fresh stream starts over
    values.append(6)
    assert values == [4, 5, 6]
    assert to_list(from_sequence(values)) == [4, 5, 6]


def test_stream_iteration():
    stream = from_sequence([1, 2, 3])
    assert next(stream) == 1
    assert list(stream) == [2, 3]
    with pytest.raises(StopIteration):
        next(stream)


def test_prefix():
    stream = prefix(7, from_sequence([8, 9]))
    assert isinstance(stream, PrefixStream)
    assert to_list(stream) == [7, 8, 9]
    assert to_list(prefix(1, prefix(2, from_sequence([])))) == [1, 2]


def test_prefix_shares_tail():
    tail = from_sequence([2, 3])
    head = prefix(1, tail)
    assert head.next() == 1
    assert tail.next() == 2
    assert head.next() == 3
    assert head.next() is END


def test_prefix_does_not_pull_tail_early():
    machine = IntcodeMachine([104, 10, 99])
    stream = prefix(1, machine.output_stream())
    assert stream.next() == 1
    assert machine.steps == 0
    assert stream.next() == 10
    assert machine.steps == 1


def test_machine_output_is_lazy():
    machine = IntcodeMachine([104, 1, 104, 2, 99])
    stream = machine.output_stream()
    assert isinstance(stream, MachineOutputStream)
    assert stream.next() == 1
    assert machine.steps == 1 and not machine.is_terminal
    assert stream.next() == 2
    assert machine.steps == 2
    assert stream.next() is END
    assert machine.is_terminal
    assert stream.next() is END


def test_machine_output_drains_queue_first():
    machine = IntcodeMachine([104, 1, 104, 2, 99])
    machine.run_to_terminal()
    steps = machine.steps
    assert to_list(machine.output_stream()) == [1, 2]
    assert machine.steps == steps
    assert not machine.output_buffer.ready()


def test_chained_machines_pull_upstream():
    # Doubler reads one value and writes it back twice as large
    doubler = [3, 9, 1002, 9, 2, 9, 4, 9, 99, 0]
    first = IntcodeMachine(doubler, name="first")
    second = IntcodeMachine(doubler, name="second")
    first.set_input_stream(from_sequence([21]))
    second.set_input_stream(first.output_stream())

    second.run_to_terminal()
    assert list(second.output_buffer) == [84]
    assert first.is_terminal is False
    assert not first.output_buffer.ready()


def test_self_pull_is_a_deadlock():
    machine = IntcodeMachine([3, 0, 4, 0, 99])
    machine.set_input_stream(machine.output_stream())
    with pytest.raises(NetworkDeadlock) as info:
        machine.step()
    assert "intcode" in str(info.value)


def test_repr():
    assert repr(from_sequence([1])) == "SequenceStream([1])"
    assert "MachineOutputStream('amp')" in repr(
        prefix(3, IntcodeMachine([99], name="amp").output_stream()))


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main():
    print("=" * 60)
    print("Intcode Streams — Verification Suite")
    print("=" * 60)

    tests = [obj for name, obj in sorted(globals().items())
             if name.startswith("test_") and callable(obj)]
    failed = 0
    for test in tests:
        try:
            test()
        except AssertionError as e:
            failed += 1
            print(f"  FAIL: {test.__name__} {e}")
        else:
            print(f"  ok:   {test.__name__}")

    print("\n" + "=" * 60)
    if not failed:
        print("ALL TESTS PASSED")
    else:
        print(f"{failed} TEST(S) FAILED")
        sys.exit(1)


if __name__ == "__main__":
    main()
