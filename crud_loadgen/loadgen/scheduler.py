# crud_loadgen/loadgen/scheduler.py
"""
Bounded-concurrency scheduler for work units.

Units are submitted to a thread pool, but only after the launching thread
has taken a slot from an admission gate of ``parallel`` permits. Each unit
gives its slot back exactly once when it finishes, and ``run()`` joins on
every launched unit before returning.

This is also the single place that decides what a failing unit means for
the run: by default the first failure stops further launches and is
re-raised once the in-flight units have drained. With ``fail_fast=False``
failures are logged and counted instead.
"""

from __future__ import annotations

import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

logger = logging.getLogger(__name__)

WorkFn = Callable[[str], None]


class SchedulerState(enum.Enum):
    FILLING = "filling"
    DRAINING = "draining"
    DONE = "done"


@dataclass
class RunResult:
    launched: int
    succeeded: int
    failed: int


def assign_host(hosts: Sequence[str], index: int) -> str:
    """Round-robin host for the ``index``-th unit (0-based)."""
    return hosts[index % len(hosts)]


class Scheduler:
    def __init__(
        self,
        hosts: Sequence[str],
        requests: int,
        parallel: int,
        work: WorkFn,
        fail_fast: bool = True,
    ):
        if not hosts:
            raise ValueError("Scheduler needs at least one host")
        if parallel < 1:
            raise ValueError(f"parallel must be >= 1, got {parallel}")
        self.hosts = list(hosts)
        self.requests = requests
        self.parallel = parallel
        self.work = work
        self.fail_fast = fail_fast

        self.state = SchedulerState.FILLING
        self.max_in_flight = 0
        self._in_flight = 0
        self._gate = threading.BoundedSemaphore(parallel)
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._first_error: Optional[BaseException] = None
        self._succeeded = 0
        self._failed = 0

    @property
    def in_flight(self) -> int:
        with self._lock:
            return self._in_flight

    def _run_unit(self, index: int, host: str) -> None:
        with self._lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
        try:
            self.work(host)
        except Exception as e:
            with self._lock:
                self._failed += 1
                if self._first_error is None:
                    self._first_error = e
            if self.fail_fast:
                self._stop.set()
                logger.debug(f"Unit {index} on {host} failed: {e}")
            else:
                logger.warning(f"Unit {index} on {host} failed: {e}")
        else:
            with self._lock:
                self._succeeded += 1
        finally:
            with self._lock:
                self._in_flight -= 1
            self._gate.release()

    def run(self) -> RunResult:
        """
        Launch every unit and wait for all of them.

        Returns:
            RunResult with launched / succeeded / failed counts.

        Raises:
            The first unit exception, when fail_fast is set.
        """
        futures: List[Future] = []
        launched = 0
        with ThreadPoolExecutor(max_workers=self.parallel) as executor:
            for i in range(self.requests):
                self._gate.acquire()
                if self._stop.is_set():
                    self._gate.release()
                    break
                futures.append(executor.submit(self._run_unit, i, assign_host(self.hosts, i)))
                launched += 1
            self.state = SchedulerState.DRAINING
            wait(futures)
        self.state = SchedulerState.DONE

        if self.fail_fast and self._first_error is not None:
            logger.error(
                f"Aborting run after {launched} launched units: {self._first_error}"
            )
            raise self._first_error

        return RunResult(launched=launched, succeeded=self._succeeded, failed=self._failed)
