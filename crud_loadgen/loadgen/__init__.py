# crud_loadgen/loadgen/__init__.py
"""Row operations, work units, scheduling and reporting for a load run."""

from .operations import RowOperations, TestRow
from .reporter import Reporter
from .scheduler import RunResult, Scheduler, SchedulerState, assign_host
from .work_unit import run_work_unit

__all__ = [
    "RowOperations",
    "TestRow",
    "Reporter",
    "RunResult",
    "Scheduler",
    "SchedulerState",
    "assign_host",
    "run_work_unit",
]
