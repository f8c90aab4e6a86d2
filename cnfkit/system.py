"""Elapsed time and memory use of the running process."""

from __future__ import annotations

import mmap
import os
import sys
import time

_start: float | None = None


def cpu_time() -> float:
    """Return the wall-clock seconds elapsed since the first call."""
    global _start
    now = time.perf_counter()
    if _start is None:
        _start = now
    return now - _start


def _statm_pages(text: str) -> int:
    """Return the first field (total program size in pages) of a statm record."""
    fields = text.split()
    try:
        return int(fields[0])
    except (IndexError, ValueError) as exc:
        raise RuntimeError('Failed to parse memory statistics from "/proc".') from exc


def _peak_kb(text: str) -> int:
    """Return the VmPeak value in kB of a status record, or 0 if absent."""
    for line in text.splitlines():
        if line.startswith("VmPeak:"):
            fields = line.split()
            try:
                return int(fields[1])
            except (IndexError, ValueError):
                return 0
    return 0


def _read_proc(name: str) -> str | None:
    try:
        with open(f"/proc/{os.getpid()}/{name}", encoding="ascii") as handle:
            return handle.read()
    except OSError:
        return None


def _max_rss() -> float:
    try:
        import resource
    except ImportError:
        return 0.0
    return float(resource.getrusage(resource.RUSAGE_SELF).ru_maxrss)


def mem_used() -> float:
    """Return the memory in megabytes used by this process (0 where unsupported)."""
    if sys.platform.startswith("linux"):
        text = _read_proc("statm")
        if text is None:
            return 0.0
        return _statm_pages(text) * mmap.PAGESIZE / (1024 * 1024)
    if sys.platform.startswith("freebsd"):
        return _max_rss() / 1024
    if sys.platform == "darwin":
        return _max_rss() / (1024 * 1024)
    return 0.0


def mem_used_peak() -> float:
    """Return the peak memory in megabytes, falling back to :func:`mem_used`."""
    if sys.platform.startswith("linux"):
        text = _read_proc("status")
        peak = float(_peak_kb(text) // 1024) if text is not None else 0.0
        return mem_used() if peak == 0 else peak
    return mem_used()