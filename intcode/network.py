"""
Amplifier networks — chains and rings of intcode machines.

Each amplifier reads its phase setting, then the output of the amplifier
feeding it. Wiring is an explicit edge list: `sources[i]` is the index of
the machine whose output feeds machine i, or None when machine i reads a
fixed sequence. In feedback mode `sources[0]` is the last machine, closing
the ring.

Nothing is scheduled. Running the last machine to completion pulls its
input, which steps its upstream machine, and so on around the chain.
"""

from __future__ import annotations

import itertools
import logging
from typing import Iterable, Sequence

from .errors import NoOutput
from .machine import IntcodeMachine
from .stream import MachineOutputStream, Stream, from_sequence, prefix

logger = logging.getLogger(__name__)


AMPLIFIER_PHASES = (0, 1, 2, 3, 4)
FEEDBACK_PHASES  = (5, 6, 7, 8, 9)
INITIAL_SIGNAL   = 0


class AmplifierNetwork:
    """N machines running the same program, wired as a path or a ring."""

    def __init__(self, program: Sequence[int], phases: Sequence[int],
                 feedback: bool = False, initial_signal: int = INITIAL_SIGNAL):
        phases = tuple(phases)
        if not phases:
            raise ValueError("Amplifier network needs at least one phase setting")
        if len(set(phases)) != len(phases):
            raise ValueError(f"Phase settings must be distinct, got {phases}")

        self.phases = phases
        self.feedback = feedback
        self.initial_signal = initial_signal
        self.machines = [
            IntcodeMachine(program, name=f"amp{i}")
            for i in range(len(phases))
        ]

        n = len(self.machines)
        self.sources: list[int | None] = [i - 1 for i in range(n)]
        self.sources[0] = n - 1 if feedback else None
        self._wire()

    def __len__(self) -> int:
        return len(self.machines)

    # -------------------------------------------------------------------
    # Wiring
    # -------------------------------------------------------------------

    def output_of(self, index: int) -> MachineOutputStream:
        return self.machines[index].output_stream()

    def input_for(self, index: int) -> Stream:
        """Build machine `index`'s input: its seed values, then its source."""
        seeds = [self.phases[index]]
        if index == 0:
            seeds.append(self.initial_signal)

        source = self.sources[index]
        if source is None:
            return from_sequence(seeds)

        stream: Stream = self.output_of(source)
        for value in reversed(seeds):
            stream = prefix(value, stream)
        return stream

    def _wire(self):
        for index, machine in enumerate(self.machines):
            machine.set_input_stream(self.input_for(index))
        logger.debug("wired %s network phases=%s edges=%s",
                     "feedback" if self.feedback else "serial",
                     self.phases, self.edges())

    def edges(self) -> list[tuple[int, int]]:
        """(source, target) pairs, one per machine-to-machine connection."""
        return [(src, dst) for dst, src in enumerate(self.sources)
                if src is not None]

    # -------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------

    def run(self) -> int:
        """Drive the last amplifier to completion and return its first output."""
        last = self.machines[-1]
        last.run_to_terminal()
        if not last.output_buffer.ready():
            raise NoOutput(f"{last.name} halted without output",
                           ip=last.ip.value)
        return last.output_buffer[0]

    def stats(self) -> dict:
        return {m.name: m.stats() for m in self.machines}


def run_amplifiers(program: Sequence[int], phases: Sequence[int],
                   feedback: bool = False) -> int:
    return AmplifierNetwork(program, phases, feedback=feedback).run()


def best_phase_setting(program: Sequence[int],
                       candidates: Iterable[int] | None = None,
                       feedback: bool = False) -> tuple[int, tuple[int, ...]]:
    """Try every ordering of `candidates`; return (best signal, its phases).

    Defaults to 0-4 for a serial chain and 5-9 for a feedback ring. Ties
    keep the first ordering found.
    """
    if candidates is None:
        candidates = FEEDBACK_PHASES if feedback else AMPLIFIER_PHASES
    candidates = tuple(candidates)
    if not candidates:
        raise ValueError("No phase candidates given")

    best: int | None = None
    best_phases: tuple[int, ...] = ()
    for phases in itertools.permutations(candidates):
        signal = run_amplifiers(program, phases, feedback=feedback)
        logger.debug("phases %s -> %d", phases, signal)
        if best is None or signal > best:
            best, best_phases = signal, phases

    logger.info("best signal %d with phases %s (%s)", best, best_phases,
                "feedback" if feedback else "serial")
    return best, best_phases
