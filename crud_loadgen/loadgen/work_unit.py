# crud_loadgen/loadgen/work_unit.py
from __future__ import annotations

from .operations import RowOperations


def run_work_unit(ops: RowOperations, host: str) -> None:
    """Insert, update, delete and re-insert one code on ``host``."""
    code = ops.insert(host)
    ops.update(host, code)
    ops.delete(host, code)
    ops.insert(host, code)
