"""
Intcode operation set and instruction decoder.

An instruction word packs the opcode in its two low decimal digits and one
addressing-mode digit per argument above them, least significant first:

    1002  ->  opcode 02 (Multiply), modes (0, 1, 0)

Digits beyond those written in the word are position mode.
"""

from __future__ import annotations

from enum import IntEnum

from .errors import AddressingModeViolation, InvalidOpcode


# Addressing modes
POSITION  = 0
IMMEDIATE = 1

MODE_NAMES = {POSITION: "position", IMMEDIATE: "immediate"}

# Argument tags (immediate mode is never valid on WRITE)
READ  = "r"
WRITE = "w"


class Op(IntEnum):
    ADD           = 1
    MULTIPLY      = 2
    INPUT         = 3
    OUTPUT        = 4
    JUMP_IF_TRUE  = 5
    JUMP_IF_FALSE = 6
    LESS_THAN     = 7
    EQUALS        = 8
    TERMINATE     = 99


# Per-position read/write tags. Arity is the tuple length.
OP_TABLE: dict[Op, tuple[str, ...]] = {
    Op.ADD:           (READ, READ, WRITE),
    Op.MULTIPLY:      (READ, READ, WRITE),
    Op.INPUT:         (WRITE,),
    Op.OUTPUT:        (READ,),
    Op.JUMP_IF_TRUE:  (READ, READ),
    Op.JUMP_IF_FALSE: (READ, READ),
    Op.LESS_THAN:     (READ, READ, WRITE),
    Op.EQUALS:        (READ, READ, WRITE),
    Op.TERMINATE:     (),
}

MNEMONICS = {
    Op.ADD: "add", Op.MULTIPLY: "mul", Op.INPUT: "in", Op.OUTPUT: "out",
    Op.JUMP_IF_TRUE: "jt", Op.JUMP_IF_FALSE: "jf", Op.LESS_THAN: "lt",
    Op.EQUALS: "eq", Op.TERMINATE: "halt",
}


def arity(op: Op) -> int:
    return len(OP_TABLE[op])


def mode_digits(word: int, count: int) -> tuple[int, ...]:
    """First `count` mode digits of `word`, least significant first."""
    modes = word // 100
    digits = []
    for _ in range(count):
        digits.append(modes % 10)
        modes //= 10
    return tuple(digits)


def decode(word: int, ip: int | None = None) -> tuple[Op, tuple[int, ...]]:
    """Split an instruction word into its operation and argument modes.

    Raises InvalidOpcode for unknown (or negative) words and
    AddressingModeViolation for mode digits other than 0 or 1. Immediate
    mode on a write target is caught later, at argument resolution.
    """
    if word < 0:
        raise InvalidOpcode("negative instruction word", ip=ip, opcode=word)
    try:
        op = Op(word % 100)
    except ValueError:
        raise InvalidOpcode(f"unknown opcode in word {word}",
                            ip=ip, opcode=word % 100) from None

    modes = mode_digits(word, arity(op))
    for position, mode in enumerate(modes):
        if mode not in MODE_NAMES:
            raise AddressingModeViolation(
                f"unknown mode {mode} for argument {position}",
                ip=ip, opcode=int(op))
    return op, modes


def disassemble(words: list[int], address: int) -> tuple[str, int]:
    """Render the instruction at `address`.

    Returns (text, length). Words that do not decode, or whose arguments
    run past the end of memory, render as a `.word` data directive of
    length 1.
    """
    word = words[address]
    try:
        op, modes = decode(word)
    except (InvalidOpcode, AddressingModeViolation):
        return f".word {word}", 1

    count = arity(op)
    if address + count >= len(words):
        return f".word {word}", 1

    operands = []
    for mode, raw in zip(modes, words[address + 1:address + 1 + count]):
        operands.append(f"#{raw}" if mode == IMMEDIATE else f"[{raw}]")
    text = MNEMONICS[op]
    if operands:
        text = f"{text:<5s}{', '.join(operands)}"
    return text, 1 + count


def disassemble_all(words: list[int]) -> list[tuple[int, str]]:
    """Linear sweep over the whole program: [(address, text), ...]."""
    lines = []
    address = 0
    while address < len(words):
        text, length = disassemble(words, address)
        lines.append((address, text))
        address += length
    return lines
