# crud_loadgen/common/config.py
from dataclasses import dataclass, field
import os
from typing import Any, Dict, List

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

DEFAULT_USER = "root"
DEFAULT_HOSTS = "localhost"
DEFAULT_PORT = "4000"
DEFAULT_DATABASE = "test"
DEFAULT_REQUESTS = 1000
DEFAULT_PARALLEL = 20


def parse_hosts(value: str) -> List[str]:
    """Split a comma-separated host list, dropping blank entries."""
    hosts = [h.strip() for h in value.split(",") if h.strip()]
    if not hosts:
        raise ConfigError(f"No database hosts in {value!r}")
    return hosts


def parse_port(value: Any) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid database port: {value!r}") from None
    if not 1 <= port <= 65535:
        raise ConfigError(f"Database port out of range: {port}")
    return port


@dataclass
class DBConfig:
    user: str
    hosts: List[str]
    port: int
    database: str
    # Only ever read from DB_PASSWORD, never from a flag.
    password: str = field(default="", repr=False)
    connection_timeout: int = 10

    def __post_init__(self):
        if not self.hosts:
            raise ConfigError("At least one database host is required")
        self.port = parse_port(self.port)

    @classmethod
    def from_env(cls) -> "DBConfig":
        """Build a config purely from DB_* environment variables (or .env)."""
        return cls(
            user=os.getenv("DB_USER", DEFAULT_USER),
            hosts=parse_hosts(os.getenv("DB_HOSTS", DEFAULT_HOSTS)),
            port=parse_port(os.getenv("DB_PORT", DEFAULT_PORT)),
            database=os.getenv("DB_DATABASE", DEFAULT_DATABASE),
            password=os.getenv("DB_PASSWORD", ""),
        )

    @classmethod
    def from_args(cls, user: str, hosts: str, port: str, database: str) -> "DBConfig":
        return cls(
            user=user,
            hosts=parse_hosts(hosts),
            port=parse_port(port),
            database=database,
            password=os.getenv("DB_PASSWORD", ""),
        )

    def dsn(self, host: str) -> str:
        """Loggable connection string; the password is never rendered."""
        return f"{self.user}@tcp({host}:{self.port})/{self.database}"

    def connect_kwargs(self, host: str) -> Dict[str, Any]:
        if not host:
            raise ConfigError("Empty database host")
        return {
            "host": host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
            "autocommit": True,
            "connection_timeout": self.connection_timeout,
            "ssl_disabled": True,
        }


@dataclass
class LoadConfig:
    requests: int = DEFAULT_REQUESTS
    parallel: int = DEFAULT_PARALLEL
    debug: bool = False
    keep_going: bool = False
    create_table: bool = False

    def __post_init__(self):
        if self.requests < 0:
            raise ConfigError(f"Request count must be >= 0, got {self.requests}")
        if self.parallel < 1:
            raise ConfigError(f"Parallel number must be >= 1, got {self.parallel}")
