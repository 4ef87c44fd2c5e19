# crud_loadgen/common/errors.py
"""
Exception hierarchy for the load harness.

Every failure the harness can detect is raised as a subclass of
HarnessError and propagated up to the scheduler, which is the only place
that decides whether a failing work unit aborts the run.
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base class for all harness failures."""


class ConfigError(HarnessError):
    """Invalid flags, environment values or connection parameters."""


class UnknownHostError(HarnessError, KeyError):
    """A host was looked up that the registry was never provisioned with."""

    def __init__(self, host: str):
        super().__init__(host)
        self.host = host

    def __str__(self) -> str:
        return f"no connection pool registered for host {self.host!r}"


class OperationError(HarnessError):
    """A row operation failed in the database driver."""

    def __init__(self, operation: str, host: str, cause: BaseException):
        super().__init__(f"{operation} on {host} failed: {cause}")
        self.operation = operation
        self.host = host
        self.cause = cause


class ConsistencyError(HarnessError):
    """An update was not visible to the read that immediately followed it."""

    def __init__(self, host: str, code: str):
        super().__init__(
            f"unexpected is_test = true after update (host={host}, code={code})"
        )
        self.host = host
        self.code = code
