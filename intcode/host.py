"""
IntcodeHost — high-level interface to a single intcode machine.

Loads a program, attaches a fixed input sequence, and runs the machine in
bounded slices so the CLI and the debugger can share one driver.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .errors import IntcodeError, NoSolution
from .loader import load_program, parse_program, patch_program
from .machine import IntcodeMachine
from .stream import SequenceStream, from_sequence

logger = logging.getLogger(__name__)


# Reasons a bounded run stops
STOP_HALTED     = "halted"
STOP_BREAKPOINT = "breakpoint"
STOP_OUTPUT     = "output"
STOP_LIMIT      = "limit"


class IntcodeHost:
    """Owns a machine plus the input values it was started with.

    Args:
        program: Initial memory contents.
        inputs: Values fed, in order, to the program's Input instructions.
        name: Machine name used in log lines.
        patches: Address -> value overrides applied to the program on every
            reset (e.g. ``{1: noun, 2: verb}``).
    """

    def __init__(self, program: Iterable[int], inputs: Iterable[int] = (),
                 name: str = "intcode", patches: dict[int, int] | None = None):
        self.program = patch_program(list(program), patches or {})
        self.inputs = list(inputs)
        self.name = name
        self.reset()

    @classmethod
    def from_text(cls, text: str, inputs: Iterable[int] = (),
                  name: str = "intcode",
                  patches: dict[int, int] | None = None) -> IntcodeHost:
        return cls(parse_program(text), inputs, name=name, patches=patches)

    @classmethod
    def from_file(cls, path: str | Path, inputs: Iterable[int] = (),
                  name: str | None = None,
                  patches: dict[int, int] | None = None) -> IntcodeHost:
        path = Path(path)
        return cls(load_program(path), inputs, name=name or path.stem,
                   patches=patches)

    def reset(self):
        """Discard the current machine and start over from the program."""
        self.machine = IntcodeMachine(self.program, name=self.name)
        self.input_stream: SequenceStream = from_sequence(self.inputs)
        self.machine.set_input_stream(self.input_stream)

    # -------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------

    @property
    def outputs(self) -> list[int]:
        return list(self.machine.output_buffer)

    @property
    def memory(self) -> list[int]:
        return self.machine.memory.snapshot()

    def pending_input(self) -> list[int]:
        return self.input_stream.remaining()

    # -------------------------------------------------------------------
    # Execution control
    # -------------------------------------------------------------------

    def step(self) -> bool:
        """Execute one instruction. Returns True while the machine still runs."""
        return not self.machine.step()

    def run(self, max_steps: int | None = None,
            breakpoints: Iterable[int] = (),
            stop_on_output: bool = False,
            resume: bool = True) -> str:
        """Run until halt, a breakpoint, a new output or `max_steps`.

        Breakpoints are instruction addresses; the run stops before
        executing the instruction at one. With `resume` the instruction the
        call starts on is executed even if it is a breakpoint, so a run
        issued after stopping at a breakpoint makes progress. Callers that
        continue a run in slices pass `resume=False` for every slice after
        the first.
        """
        breakpoints = set(breakpoints)
        outputs_before = len(self.machine.output_buffer)
        count = 0
        while not self.machine.is_terminal:
            if (count or not resume) and self.machine.ip.value in breakpoints:
                return STOP_BREAKPOINT
            if max_steps is not None and count >= max_steps:
                return STOP_LIMIT
            self.machine.step()
            count += 1
            if stop_on_output and len(self.machine.output_buffer) > outputs_before:
                return STOP_OUTPUT
        return STOP_HALTED

    def eval(self) -> dict:
        """Run to completion and report outputs, final memory and counters."""
        self.machine.run_to_terminal()
        logger.debug("%s finished: %s", self.name, self.machine.stats())
        return {
            "outputs": self.outputs,
            "memory": self.memory,
            "stats": self.machine.stats(),
        }


def search_noun_verb(program: Iterable[int], target: int,
                     limit: int = 100) -> tuple[int, int]:
    """Find the first (noun, verb) that leaves `target` at address 0.

    Nouns and verbs range over ``0 .. limit-1`` and are written to
    addresses 1 and 2 before each run. A run that fails with an
    IntcodeError counts as a miss.
    """
    program = list(program)
    for noun in range(limit):
        for verb in range(limit):
            try:
                host = IntcodeHost(program, patches={1: noun, 2: verb})
                memory = host.eval()["memory"]
            except IntcodeError as e:
                logger.debug("noun=%d verb=%d failed: %s", noun, verb, e)
                continue
            if memory[0] == target:
                logger.info("noun=%d verb=%d -> %d", noun, verb, target)
                return noun, verb
    raise NoSolution(f"No noun/verb pair below {limit} produces {target}")
