"""
Command line for the intcode machine.

Usage:
    python -m intcode run program.txt -i 8
    python -m intcode run program.txt -i 5 --stats --dump
    python -m intcode run program.txt --set 1=12 --set 2=2 --dump
    python -m intcode amplify program.txt --feedback
    python -m intcode amplify program.txt --phases 4,3,2,1,0
    python -m intcode disasm program.txt
    python -m intcode nounverb program.txt 19690720
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import IntcodeError
from .host import IntcodeHost, search_noun_verb
from .loader import format_program, load_program, parse_patch, parse_program
from .network import best_phase_setting, run_amplifiers
from .opcodes import disassemble_all


def _phase_list(text: str) -> list[int]:
    try:
        return parse_program(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _patch(text: str) -> tuple[int, int]:
    try:
        return parse_patch(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Intcode machine and amplifier network runner",
        prog="python -m intcode",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v) or every instruction (-vv)")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a program to completion")
    run.add_argument("file", help="Path to a comma-separated program")
    run.add_argument("-i", "--input", type=int, nargs="+", action="extend",
                     default=[], dest="inputs", metavar="VALUE",
                     help="Input values, consumed in order")
    run.add_argument("--stats", action="store_true",
                     help="Print execution counters to stderr")
    run.add_argument("--dump", action="store_true",
                     help="Print final memory after the outputs")
    run.add_argument("--set", type=_patch, action="append", default=[],
                     dest="patches", metavar="ADDR=VALUE",
                     help="Overwrite a memory word before running "
                          "(repeatable)")

    amp = sub.add_parser("amplify", help="Search amplifier phase settings")
    amp.add_argument("file", help="Path to a comma-separated program")
    amp.add_argument("--feedback", action="store_true",
                     help="Wire the last amplifier back into the first")
    amp.add_argument("--phases", type=_phase_list,
                     help="Run one fixed phase order (e.g. 4,3,2,1,0) "
                          "instead of searching")
    amp.add_argument("--candidates", type=_phase_list,
                     help="Phase values to permute (default 0-4, or 5-9 "
                          "with --feedback)")

    dis = sub.add_parser("disasm", help="Print a linear disassembly")
    dis.add_argument("file", help="Path to a comma-separated program")

    nv = sub.add_parser("nounverb",
                        help="Find the noun and verb that produce a target")
    nv.add_argument("file", help="Path to a comma-separated program")
    nv.add_argument("target", type=int,
                    help="Value expected at address 0 after the run")
    nv.add_argument("--limit", type=int, default=100,
                    help="Nouns and verbs range over 0 .. LIMIT-1 "
                         "(default 100)")

    return parser


def _cmd_run(args) -> int:
    host = IntcodeHost.from_file(args.file, args.inputs,
                                 patches=dict(args.patches))
    result = host.eval()
    for value in result["outputs"]:
        print(value)
    if args.dump:
        print(format_program(result["memory"]))
    if args.stats:
        print(host.machine.stats_summary(), file=sys.stderr)
    return 0


def _cmd_amplify(args) -> int:
    program = load_program(args.file)
    if args.phases is not None:
        signal = run_amplifiers(program, args.phases, feedback=args.feedback)
        phases = tuple(args.phases)
    else:
        signal, phases = best_phase_setting(
            program, args.candidates, feedback=args.feedback)
    print(signal)
    print(f"phases: {','.join(str(p) for p in phases)}", file=sys.stderr)
    return 0


def _cmd_disasm(args) -> int:
    for address, text in disassemble_all(load_program(args.file)):
        print(f"{address:5d}  {text}")
    return 0


def _cmd_nounverb(args) -> int:
    noun, verb = search_noun_verb(load_program(args.file), args.target,
                                  limit=args.limit)
    print(100 * noun + verb)
    print(f"noun: {noun}  verb: {verb}", file=sys.stderr)
    return 0


COMMANDS = {
    "run": _cmd_run,
    "amplify": _cmd_amplify,
    "disasm": _cmd_disasm,
    "nounverb": _cmd_nounverb,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose >= 2:
        level = logging.DEBUG
    elif args.verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level,
                        format="%(levelname)s %(name)s: %(message)s")

    if not Path(args.file).exists():
        print(f"Error: File not found: {args.file}", file=sys.stderr)
        return 1

    try:
        return COMMANDS[args.command](args)
    except (IntcodeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
