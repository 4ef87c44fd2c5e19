# src/loadgen/reporter.py
from __future__ import annotations

import sys
import time
from typing import Optional, TextIO


def format_duration(seconds: float) -> str:
    """Render a duration the way ``1m2.5s`` / ``1.234567s`` / ``12.3ms`` read."""
    if seconds < 0:
        return "-" + format_duration(-seconds)
    if seconds < 1e-3:
        return f"{seconds * 1e6:.3f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.3f}ms"
    if seconds < 60:
        return f"{seconds:.6f}s"
    minutes, rest = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    prefix = f"{hours}h{minutes}m" if hours else f"{minutes}m"
    return f"{prefix}{rest:g}s"


class Reporter:
    """Wall-clock timer plus the two summary lines printed after a run."""

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out if out is not None else sys.stdout
        self._begin: Optional[float] = None
        self._end: Optional[float] = None

    def start(self) -> None:
        self._begin = time.perf_counter()
        self._end = None

    def stop(self) -> None:
        if self._begin is None:
            raise RuntimeError("Reporter.stop() called before start()")
        self._end = time.perf_counter()

    @property
    def elapsed(self) -> float:
        if self._begin is None or self._end is None:
            raise RuntimeError("Reporter has no completed measurement")
        return self._end - self._begin

    def print_elapsed(self) -> None:
        print(format_duration(self.elapsed), file=self.out)

    def print_summary(self, requests: int, count: int, failed: Optional[int] = None) -> None:
        if failed is not None:
            print(f"failed units = {failed}", file=self.out)
        print(f"insert num = {requests}, select count = {count}", file=self.out)
