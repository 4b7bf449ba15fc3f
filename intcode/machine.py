"""
Intcode machine — fetch/decode/execute loop over a self-modifying program.

The machine owns its memory, instruction pointer and output queue. Input
arrives through a stream attached with `set_input_stream`; output leaves
through the queue, either read directly or pulled lazily through
`output_stream()`.
"""

from __future__ import annotations

import logging
from typing import Iterable

from .chips import Memory, Register, OutputQueue
from .errors import (
    AddressingModeViolation, ArityMismatch, InputExhausted, InvalidOpcode,
    NetworkDeadlock, OutOfBoundsAccess,
)
from .opcodes import (
    IMMEDIATE, MNEMONICS, OP_TABLE, POSITION, WRITE, Op, arity, decode,
    disassemble,
)
from .stream import END, MachineOutputStream, Stream, from_sequence

logger = logging.getLogger(__name__)


class IntcodeMachine:
    """Single intcode CPU. States: running, then terminal (absorbing)."""

    POSITION  = POSITION
    IMMEDIATE = IMMEDIATE

    def __init__(self, program: Iterable[int], name: str = "intcode"):
        self.name = name
        self.memory = Memory(program)
        self.ip = Register(0)
        self.output_buffer = OutputQueue()
        self.is_terminal = False
        self.input_stream: Stream | None = None

        # Set while step() is executing; guards re-entrant output pulls
        self._stepping = False

        # --- Counters ---
        self.steps = 0
        self.io_ops = 0
        self.jumps_taken = 0

    def __repr__(self) -> str:
        state = "terminal" if self.is_terminal else "running"
        return f"<IntcodeMachine {self.name} ip={self.ip.value} {state}>"

    # -------------------------------------------------------------------
    # Wiring
    # -------------------------------------------------------------------

    def set_input_stream(self, stream: Stream):
        self.input_stream = stream

    def output_stream(self) -> MachineOutputStream:
        return MachineOutputStream(self)

    # -------------------------------------------------------------------
    # Argument resolution
    # -------------------------------------------------------------------

    def resolve(self, op: Op, modes: tuple[int, ...], raw: list[int],
                ip: int | None = None) -> list[int]:
        """Turn raw argument words into operand values.

        Read arguments in position mode are loaded from memory; immediate
        read arguments and write targets pass through as-is. Never writes.
        """
        tags = OP_TABLE[op]
        if len(raw) != len(tags) or len(modes) < len(tags):
            raise ArityMismatch(
                f"{op.name} takes {len(tags)} arguments, got {len(raw)}",
                ip=ip, opcode=int(op))

        resolved = []
        for position, (tag, mode, word) in enumerate(zip(tags, modes, raw)):
            if tag == WRITE:
                if mode == IMMEDIATE:
                    raise AddressingModeViolation(
                        f"immediate mode on write argument {position} "
                        f"of {op.name}", ip=ip, opcode=int(op))
                resolved.append(word)
            elif mode == POSITION:
                resolved.append(self.memory.read_at(word))
            else:
                resolved.append(word)
        return resolved

    # -------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------

    def step(self) -> bool:
        """Execute one instruction. Returns True once the machine is terminal."""
        if self.is_terminal:
            return True

        ip = self.ip.value
        opcode = None
        self._stepping = True
        try:
            word = self.memory.read_at(self.ip.advance())
            opcode = word % 100
            op, modes = decode(word, ip)
            raw = [self.memory.read_at(self.ip.advance())
                   for _ in range(arity(op))]
            args = self.resolve(op, modes, raw, ip)
            logger.debug("%s %4d: %-4s %s -> %s",
                         self.name, ip, MNEMONICS[op], raw, args)
            self._execute(op, args, ip)
        except OutOfBoundsAccess as err:
            if err.ip is not None:
                raise
            raise OutOfBoundsAccess("memory access out of bounds", ip=ip,
                                    opcode=opcode, address=err.address) from err
        finally:
            self._stepping = False

        self.steps += 1
        return self.is_terminal

    def _execute(self, op: Op, args: list[int], ip: int):
        if op == Op.ADD:
            self.memory.set(args[2], args[0] + args[1])

        elif op == Op.MULTIPLY:
            self.memory.set(args[2], args[0] * args[1])

        elif op == Op.INPUT:
            self.memory.set(args[0], self._read_input(ip))

        elif op == Op.OUTPUT:
            self.output_buffer.push(args[0])
            self.io_ops += 1

        elif op == Op.JUMP_IF_TRUE:
            if args[0] != 0:
                self.ip.load(args[1])
                self.jumps_taken += 1

        elif op == Op.JUMP_IF_FALSE:
            if args[0] == 0:
                self.ip.load(args[1])
                self.jumps_taken += 1

        elif op == Op.LESS_THAN:
            self.memory.set(args[2], 1 if args[0] < args[1] else 0)

        elif op == Op.EQUALS:
            self.memory.set(args[2], 1 if args[0] == args[1] else 0)

        elif op == Op.TERMINATE:
            self.is_terminal = True
            logger.debug("%s halted after %d steps", self.name, self.steps + 1)

        else:
            raise InvalidOpcode(f"no handler for {op!r}", ip=ip, opcode=int(op))

    def _read_input(self, ip: int) -> int:
        if self.input_stream is None:
            raise InputExhausted(f"{self.name} has no input stream", ip=ip,
                                 opcode=int(Op.INPUT))
        value = self.input_stream.next()
        if value is END:
            raise InputExhausted(f"{self.name} input stream ended", ip=ip,
                                 opcode=int(Op.INPUT))
        self.io_ops += 1
        return value

    # -------------------------------------------------------------------
    # Run helpers
    # -------------------------------------------------------------------

    def run_to_terminal(self):
        while not self.step():
            pass

    def run_to_next_output(self):
        """Step until the output queue is non-empty or the machine halts."""
        if self._stepping and not self.output_buffer.ready():
            raise NetworkDeadlock(
                f"{self.name} output pulled while it is blocked mid-instruction",
                ip=self.ip.value)
        while not self.is_terminal and not self.output_buffer.ready():
            self.step()

    def current_instruction(self) -> str:
        if self.is_terminal:
            return "(halted)"
        try:
            text, _ = disassemble(self.memory.data, self.ip.value)
        except IndexError:
            return "(ip outside memory)"
        return text

    # -------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------

    def reset_counters(self):
        self.steps = 0
        self.io_ops = 0
        self.jumps_taken = 0
        self.memory.reads = 0
        self.memory.writes = 0

    def stats(self) -> dict:
        return {
            "steps": self.steps,
            "io_ops": self.io_ops,
            "jumps_taken": self.jumps_taken,
            "memory_reads": self.memory.reads,
            "memory_writes": self.memory.writes,
            "memory_size": len(self.memory),
            "ip": self.ip.value,
            "terminal": self.is_terminal,
        }

    def stats_summary(self) -> str:
        s = self.stats()
        return (
            f"Steps: {s['steps']}\n"
            f"Memory: {s['memory_reads']}R/{s['memory_writes']}W "
            f"({s['memory_size']} words)\n"
            f"IO: {s['io_ops']} operations\n"
            f"Jumps taken: {s['jumps_taken']}\n"
            f"IP: {s['ip']} ({'terminal' if s['terminal'] else 'running'})"
        )


def run_program(program: Iterable[int],
                inputs: Iterable[int] = ()) -> IntcodeMachine:
    """Build a machine, feed it `inputs`, and run it to completion."""
    machine = IntcodeMachine(program)
    machine.set_input_stream(from_sequence(inputs))
    machine.run_to_terminal()
    return machine
