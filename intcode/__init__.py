"""
Intcode machine, lazy streams and amplifier networks.
"""

from .errors import (
    IntcodeError, InvalidOpcode, AddressingModeViolation, ArityMismatch,
    OutOfBoundsAccess, InputExhausted, NetworkDeadlock, NoOutput,
    ProgramFormatError, NoSolution,
)
from .machine import IntcodeMachine, run_program
from .network import AmplifierNetwork, best_phase_setting, run_amplifiers
from .stream import END, from_sequence, prefix, to_list
from .host import IntcodeHost, search_noun_verb
from .loader import load_program, parse_program, patch_program
