# crud_loadgen/common/db_client.py
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List

import mysql.connector
from mysql.connector import Error as MySQLError

from .config import DBConfig
from .errors import ConfigError, UnknownHostError

logger = logging.getLogger(__name__)

Connector = Callable[..., Any]


class HostPool:
    """
    Thread-safe pool of connections to a single database host.

    Connections are opened lazily on checkout, so creating the pool never
    touches the network. At most ``max_idle`` connections are kept around
    between checkouts; anything returned beyond that is closed.
    """

    def __init__(
        self,
        host: str,
        connect_kwargs: Dict[str, Any],
        max_idle: int,
        connector: Connector = mysql.connector.connect,
    ):
        if max_idle < 1:
            raise ConfigError(f"max_idle must be >= 1, got {max_idle}")
        self.host = host
        self.max_idle = max_idle
        self._connect_kwargs = connect_kwargs
        self._connector = connector
        self._idle: List[Any] = []
        self._lock = threading.Lock()
        self._closed = False

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    def acquire(self) -> Any:
        with self._lock:
            if self._closed:
                raise RuntimeError(f"Connection pool for {self.host} is closed")
            if self._idle:
                return self._idle.pop()
        return self._connector(**self._connect_kwargs)

    def release(self, conn: Any, broken: bool = False) -> None:
        with self._lock:
            if not broken and not self._closed and len(self._idle) < self.max_idle:
                self._idle.append(conn)
                return
        _close_quietly(conn)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Check out a connection for the duration of one statement."""
        conn = self.acquire()
        try:
            yield conn
        except MySQLError:
            self.release(conn, broken=True)
            raise
        except BaseException:
            self.release(conn)
            raise
        else:
            self.release(conn)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            idle, self._idle = self._idle, []
        for conn in idle:
            _close_quietly(conn)


def _close_quietly(conn: Any) -> None:
    try:
        conn.close()
    except MySQLError as e:
        logger.debug(f"Ignoring error while closing connection: {e}")


class ConnectionRegistry:
    """One HostPool per configured host, provisioned up front."""

    def __init__(
        self,
        cfg: DBConfig,
        max_idle: int,
        connector: Connector = mysql.connector.connect,
    ):
        self.hosts = list(cfg.hosts)
        self._pools: Dict[str, HostPool] = {}
        for host in self.hosts:
            logger.debug(f"dbinfo = {cfg.dsn(host)}")
            self._pools[host] = HostPool(
                host=host,
                connect_kwargs=cfg.connect_kwargs(host),
                max_idle=max_idle,
                connector=connector,
            )

    def get(self, host: str) -> HostPool:
        try:
            return self._pools[host]
        except KeyError:
            raise UnknownHostError(host) from None

    def __contains__(self, host: str) -> bool:
        return host in self._pools

    def __len__(self) -> int:
        return len(self._pools)

    def close(self) -> None:
        for pool in self._pools.values():
            pool.close()

    def __enter__(self) -> "ConnectionRegistry":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
