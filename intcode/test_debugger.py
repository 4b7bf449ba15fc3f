"""
Checks for the debugger's non-UI helpers.
"""

from __future__ import annotations

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from intcode.debugger import _esc, disassembly_window


def test_window_follows_instruction_boundaries():
    words = [1002, 4, 3, 4, 33]
    assert disassembly_window(words, 0) == [(0, "mul  [4], #3, [4]"), (4, ".word 33")]
    # ip inside an instruction focuses the instruction containing it
    assert disassembly_window(words, 2)[0] == (0, "mul  [4], #3, [4]")


def test_window_is_bounded():
    words = [104, 1] * 200 + [99]
    lines = disassembly_window(words, 300, window=10)
    assert len(lines) == 10
    addresses = [address for address, _ in lines]
    assert 300 in addresses
    assert addresses == sorted(addresses)


def test_escape_markup():
    assert _esc("mul  [4], #3") == "mul  \\[4], #3"


def main():
    for name, obj in sorted(globals().items()):
        if name.startswith("test_") and callable(obj):
            obj()
            print(f"  ok:   {name}")
    print("ALL TESTS PASSED")


if __name__ == "__main__":
    main()
