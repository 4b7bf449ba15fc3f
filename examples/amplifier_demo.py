#!/usr/bin/env python3
"""
Amplifier network demo.

Runs the serial and feedback example programs, prints the best signal for
each, then replays the winning feedback ring and shows how much work each
amplifier did. Pass -v to watch the wiring and every permutation tried.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Allow imports from repository root when launched via examples/ path.
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from intcode.loader import load_program
from intcode.network import AmplifierNetwork, best_phase_setting


HERE = Path(__file__).resolve().parent


def main():
    logging.basicConfig(
        level=logging.DEBUG if "-v" in sys.argv[1:] else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    serial = load_program(HERE / "amplifier.txt")
    ring = load_program(HERE / "feedback.txt")

    signal, phases = best_phase_setting(serial)
    print(f"serial   best={signal:>10d}  phases={phases}")

    signal, phases = best_phase_setting(ring, feedback=True)
    print(f"feedback best={signal:>10d}  phases={phases}")

    net = AmplifierNetwork(ring, phases, feedback=True)
    net.run()
    print("\nWinning ring, per amplifier:")
    for name, s in net.stats().items():
        state = "halted" if s["terminal"] else "waiting"
        print(f"  {name}: {s['steps']:4d} steps  {s['io_ops']:3d} io  "
              f"ip={s['ip']:3d}  {state}")


if __name__ == "__main__":
    main()
