"""
Textual TUI debugger for the intcode machine.

Instruction-stepping debugger that loads a program, runs it on an
IntcodeHost, and displays disassembly, machine state and IO at every step.

Usage:
    python -m intcode.debugger examples/compare.txt -i 8
    python -m intcode.debugger --run examples/compare.txt -i 8
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.timer import Timer
from textual.widgets import Static, RichLog, Footer

from .errors import IntcodeError
from .host import IntcodeHost, STOP_BREAKPOINT, STOP_HALTED, STOP_LIMIT, STOP_OUTPUT
from .opcodes import disassemble

RUN_SLICE = 500        # instructions per timer tick
RUN_INTERVAL = 0.01    # seconds between ticks
WINDOW = 40            # disassembly lines shown around the ip


def _esc(text: str) -> str:
    """Escape Rich markup characters in text."""
    return text.replace("[", "\\[")


def disassembly_window(words: list[int], ip: int,
                       window: int = WINDOW) -> list[tuple[int, str]]:
    """Disassemble up to `window` instructions, starting a little before `ip`.

    The sweep starts at address 0 so instruction boundaries line up, then
    keeps the lines surrounding the one at `ip`.
    """
    lines = []
    address = 0
    focus = 0
    while address < len(words):
        text, length = disassemble(words, address)
        if address <= ip:
            focus = len(lines)
        lines.append((address, text))
        address += length
    start = max(0, focus - window // 4)
    return lines[start:start + window]


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 2 3;
    grid-columns: 1fr 1fr;
    grid-rows: 1fr 1fr auto;
}

.panel {
    border: solid $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

#code-panel { row-span: 2; }

Footer {
    column-span: 2;
}
"""


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class CodePanel(ScrollableContainer):
    """Disassembly with the current instruction highlighted."""
    BORDER_TITLE = "Code"

    def compose(self) -> ComposeResult:
        yield Static("", id="code-content")


class StatePanel(ScrollableContainer):
    """Machine state: ip, counters."""
    BORDER_TITLE = "Machine State"

    def compose(self) -> ComposeResult:
        yield Static("", id="state-content")


class IOPanel(ScrollableContainer):
    """Pending input and produced output."""
    BORDER_TITLE = "IO"

    def compose(self) -> ComposeResult:
        yield Static("", id="io-content")
        yield RichLog(id="output-log", markup=True, wrap=True)


# ---------------------------------------------------------------------------
# Main debugger app
# ---------------------------------------------------------------------------

class IntcodeDebugger(App):
    """Textual TUI debugger for the intcode machine."""

    CSS = DEBUGGER_CSS
    TITLE = "Intcode Debugger"

    BINDINGS = [
        Binding("s", "step_1", "Step"),
        Binding("space", "step_1", "Step", show=False),
        Binding("n", "step_10", "x10"),
        Binding("f", "step_100", "x100"),
        Binding("r", "run_to_end", "Run"),
        Binding("o", "run_to_output", "→Output"),
        Binding("b", "toggle_breakpoint", "Break"),
        Binding("x", "reset", "Reset"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, host: IntcodeHost, auto_run: bool = False):
        super().__init__()
        self.host = host
        self.auto_run = auto_run
        self.breakpoints: set[int] = set()
        self.status = "ready"
        self._output_count = 0
        self._run_timer: Timer | None = None
        self._stop_on_output = False
        self._first_slice = False

    def compose(self) -> ComposeResult:
        yield CodePanel(id="code-panel", classes="panel")
        yield StatePanel(id="state-panel", classes="panel")
        yield IOPanel(id="io-panel", classes="panel")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_panels()
        if self.auto_run:
            self.action_run_to_end()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        self._refresh_code()
        self._refresh_state()
        self._refresh_io()

    def _refresh_code(self) -> None:
        m = self.host.machine
        ip = m.ip.value
        lines = []
        for address, text in disassembly_window(m.memory.data, ip):
            mark = "●" if address in self.breakpoints else " "
            cursor = "▸" if address == ip and not m.is_terminal else " "
            line = f"{mark}{cursor} {address:5d}│ {_esc(text)}"
            if cursor != " ":
                line = f"[bold reverse]{line}[/bold reverse]"
            lines.append(line)
        content = self.query_one("#code-content", Static)
        content.update("\n".join(lines) if lines else "(empty program)")

    def _refresh_state(self) -> None:
        m = self.host.machine
        s = m.stats()
        text = (
            f"[bold]Machine:[/bold] {_esc(m.name)}    "
            f"[bold]Status:[/bold] {self.status}\n"
            f"[bold]IP:[/bold] {s['ip']}    "
            f"[bold]Next:[/bold] {_esc(m.current_instruction())}\n"
            f"[bold]Steps:[/bold] {s['steps']}  "
            f"[bold]Jumps:[/bold] {s['jumps_taken']}  "
            f"[bold]IO:[/bold] {s['io_ops']}\n"
            f"[bold]Memory:[/bold] {s['memory_reads']}R/{s['memory_writes']}W "
            f"({s['memory_size']} words)\n"
            f"[bold]Breakpoints:[/bold] "
            f"{', '.join(str(b) for b in sorted(self.breakpoints)) or '-'}"
        )
        content = self.query_one("#state-content", Static)
        content.update(text)

    def _refresh_io(self) -> None:
        pending = self.host.pending_input()
        text = (
            f"[bold]Input:[/bold] "
            f"{' '.join(str(v) for v in pending) if pending else '(empty)'}"
        )
        self.query_one("#io-content", Static).update(text)

        log = self.query_one("#output-log", RichLog)
        outputs = self.host.outputs
        while self._output_count < len(outputs):
            log.write(f"out: {outputs[self._output_count]}")
            self._output_count += 1

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    def _report_error(self, err: Exception) -> None:
        """Show an error in the output log and stop any run in progress."""
        self._stop_run()
        self.status = "error"
        self.query_one("#output-log", RichLog).write(
            f"[red]\\[ERROR] {_esc(str(err))}[/red]")
        self.refresh_panels()

    def _do_steps(self, count: int) -> None:
        try:
            reason = self.host.run(max_steps=count)
        except IntcodeError as e:
            self._report_error(e)
            return
        self.status = "halted" if reason == STOP_HALTED else "paused"
        self.refresh_panels()

    def action_step_1(self) -> None:
        self._do_steps(1)

    def action_step_10(self) -> None:
        self._do_steps(10)

    def action_step_100(self) -> None:
        self._do_steps(100)

    def action_toggle_breakpoint(self) -> None:
        ip = self.host.machine.ip.value
        if ip in self.breakpoints:
            self.breakpoints.discard(ip)
        else:
            self.breakpoints.add(ip)
        self.refresh_panels()

    def action_reset(self) -> None:
        self._stop_run()
        self.host.reset()
        self._output_count = 0
        self.query_one("#output-log", RichLog).clear()
        self.status = "ready"
        self.refresh_panels()

    def action_run_to_end(self) -> None:
        self._start_run(stop_on_output=False)

    def action_run_to_output(self) -> None:
        self._start_run(stop_on_output=True)

    # -------------------------------------------------------------------
    # Timer-driven runs (the machine never leaves the event loop thread)
    # -------------------------------------------------------------------

    def _start_run(self, stop_on_output: bool) -> None:
        if self._run_timer is not None or self.host.machine.is_terminal:
            return
        self._stop_on_output = stop_on_output
        self._first_slice = True
        self.status = "running"
        self._run_timer = self.set_interval(RUN_INTERVAL, self._run_slice)

    def _stop_run(self) -> None:
        if self._run_timer is not None:
            self._run_timer.stop()
            self._run_timer = None

    def _run_slice(self) -> None:
        try:
            reason = self.host.run(max_steps=RUN_SLICE,
                                   breakpoints=self.breakpoints,
                                   stop_on_output=self._stop_on_output,
                                   resume=self._first_slice)
        except IntcodeError as e:
            self._report_error(e)
            return
        self._first_slice = False
        if reason != STOP_LIMIT:
            self._stop_run()
            self.status = {
                STOP_HALTED: "halted",
                STOP_BREAKPOINT: "breakpoint",
                STOP_OUTPUT: "output",
            }[reason]
        self.refresh_panels()


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main():
    parser = argparse.ArgumentParser(
        description="Intcode TUI debugger",
        prog="python -m intcode.debugger",
    )
    parser.add_argument("file", help="Path to a comma-separated program")
    parser.add_argument("-i", "--input", type=int, nargs="+", action="extend",
                        default=[], dest="inputs", metavar="VALUE",
                        help="Input values, consumed in order")
    parser.add_argument("--run", action="store_true",
                        help="Run to completion immediately (auto-run mode)")
    args = parser.parse_args()

    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    try:
        host = IntcodeHost.from_file(path, args.inputs)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    app = IntcodeDebugger(host, auto_run=args.run)
    app.run()


if __name__ == "__main__":
    main()
