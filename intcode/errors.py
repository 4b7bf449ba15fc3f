"""
Error taxonomy for the intcode machine.

Every failure is fatal to the run that raised it. Errors carry the
instruction pointer, opcode and address involved so a failing program can
be diagnosed from the message alone.
"""

from __future__ import annotations


class IntcodeError(Exception):
    """Base class for all machine, stream and network failures."""

    def __init__(self, message: str, *, ip: int | None = None,
                 opcode: int | None = None, address: int | None = None):
        self.ip = ip
        self.opcode = opcode
        self.address = address
        context = []
        if ip is not None:
            context.append(f"ip={ip}")
        if opcode is not None:
            context.append(f"opcode={opcode}")
        if address is not None:
            context.append(f"address={address}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class InvalidOpcode(IntcodeError):
    """Fetched word does not name a known operation."""


class AddressingModeViolation(IntcodeError):
    """Immediate mode on a write target, or an unknown mode digit."""


class ArityMismatch(IntcodeError):
    """Argument count disagrees with the operation's declared arity."""


class OutOfBoundsAccess(IntcodeError):
    """Read or write outside the program's memory."""


class InputExhausted(IntcodeError):
    """Input operation found no value on its input stream."""


class NetworkDeadlock(IntcodeError):
    """A machine's output was pulled while that machine was mid-step."""


class NoOutput(IntcodeError):
    """A network's terminal machine halted without producing a value."""


class ProgramFormatError(IntcodeError, ValueError):
    """Program text is not a comma-separated list of integers."""


class NoSolution(IntcodeError):
    """No noun/verb pair makes the program leave the target at address 0."""
