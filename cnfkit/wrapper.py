"""Run a program under a memory and time limit and report how it ended."""

from __future__ import annotations

import enum
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Sequence

_POLL_INTERVAL = 0.001


class Outcome(enum.Enum):
    """How a limited run ended."""

    DONE = "done"
    ERROR = "err"
    MEMORY = "mem"
    MEMORY_ERROR = "mem err"
    TIMEOUT = "timeout"
    TIMEOUT_ERROR = "timeout err"

    @property
    def failed(self) -> bool:
        """True when the child could not be reaped after being stopped."""
        return self in (Outcome.MEMORY_ERROR, Outcome.TIMEOUT_ERROR)


@dataclass(frozen=True)
class RunReport:
    """The command, its outcome, peak virtual memory (kB) and elapsed seconds."""

    command: str
    outcome: Outcome
    memory: int
    duration: float

    def __str__(self) -> str:
        return f"{self.command}, {self.outcome.value}, {self.memory}, {self.duration:g}"


def _parse_vsize_kb(text: str) -> int:
    """Return the virtual size field of a /proc stat record divided by 1000."""
    # The command name is parenthesised and may hold spaces.
    tail = text[text.rfind(")") + 1:].split()
    try:
        return int(tail[20]) // 1000
    except (IndexError, ValueError):
        return 0


def mem_usage(pid: int) -> int:
    """Return the virtual memory of process ``pid`` in kB, or 0 if unknown."""
    try:
        with open(f"/proc/{pid}/stat", encoding="ascii", errors="replace") as handle:
            return _parse_vsize_kb(handle.read())
    except OSError:
        return 0


def build_command(args: Sequence[str]) -> str:
    """Join the program and its arguments with single spaces."""
    return " ".join(args)


def _stop(
    process: subprocess.Popen,
    reached: Outcome,
    unreaped: Outcome,
) -> Outcome:
    process.send_signal(signal.SIGINT)
    try:
        process.wait()
    except ChildProcessError:
        return unreaped
    return reached


def run_limited(
    max_mem_mb: int, max_time: float, args: Sequence[str]
) -> RunReport:
    """Run ``args`` until it exits or exceeds ``max_mem_mb`` megabytes or ``max_time`` seconds.

    A child over a limit is sent SIGINT and waited for.
    """
    args = [str(arg) for arg in args]
    if not args:
        raise ValueError("no program to run")
    limit = max_mem_mb * 1000
    command = build_command(args)
    start = time.monotonic()
    process = subprocess.Popen(args)
    memory = mem_usage(process.pid)

    while True:
        memory = max(memory, mem_usage(process.pid))
        returncode = process.poll()
        elapsed = time.monotonic() - start

        if returncode is not None:
            outcome = Outcome.DONE if returncode >= 0 else Outcome.ERROR
            return RunReport(command, outcome, memory, elapsed)
        if memory > limit:
            outcome = _stop(process, Outcome.MEMORY, Outcome.MEMORY_ERROR)
            return RunReport(command, outcome, memory, elapsed)
        if elapsed > max_time:
            outcome = _stop(process, Outcome.TIMEOUT, Outcome.TIMEOUT_ERROR)
            return RunReport(command, outcome, memory, elapsed)

        time.sleep(_POLL_INTERVAL)


def main(argv: list[str] | None = None) -> int:
    """Usage: wrap <memory in MB> <time in s> program [args...]."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) < 3:
        sys.stderr.write("usage: wrap <memory in MB> <time in s> program [args...]\n")
        return 1
    try:
        max_mem = int(args[0])
        max_time = int(args[1])
    except ValueError:
        sys.stderr.write("memory and time limits must be integers\n")
        return 1

    try:
        report = run_limited(max_mem, max_time, args[2:])
    except OSError:
        sys.stderr.write("execv failed\n")
        return 1

    sys.stderr.write(f"\n{report}\n")
    return 1 if report.outcome.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())