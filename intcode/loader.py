"""
Program loader: comma-separated integer text -> list of words.
"""

from __future__ import annotations

from pathlib import Path

from .errors import OutOfBoundsAccess, ProgramFormatError


def parse_program(text: str) -> list[int]:
    """Parse "1,9,10,3,..." into ints. Whitespace around items is ignored."""
    text = text.strip()
    if not text:
        raise ProgramFormatError("Empty program")

    words = []
    for position, item in enumerate(text.split(",")):
        item = item.strip()
        try:
            words.append(int(item))
        except ValueError:
            raise ProgramFormatError(
                f"Item {position} is not an integer: {item!r}") from None
    return words


def load_program(path: str | Path) -> list[int]:
    return parse_program(Path(path).read_text())


def format_program(words: list[int]) -> str:
    return ",".join(str(w) for w in words)


def patch_program(words: list[int], patches: dict[int, int]) -> list[int]:
    """Return a copy of `words` with each address in `patches` overwritten.

    Used to set a program's inputs in place before it runs, e.g. the
    "noun" and "verb" at addresses 1 and 2.
    """
    patched = list(words)
    for address, value in patches.items():
        if not 0 <= address < len(patched):
            raise OutOfBoundsAccess(
                f"Patch address outside program of {len(patched)} words",
                address=address,
            )
        patched[address] = value
    return patched


def parse_patch(text: str) -> tuple[int, int]:
    """Parse "ADDR=VALUE" into an (address, value) pair."""
    address, sep, value = text.partition("=")
    if not sep:
        raise ProgramFormatError(f"Expected ADDR=VALUE, got {text!r}")
    try:
        return int(address), int(value)
    except ValueError:
        raise ProgramFormatError(f"Expected ADDR=VALUE, got {text!r}") from None
