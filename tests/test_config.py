import pytest

from crud_loadgen.common.config import DBConfig, LoadConfig, parse_hosts, parse_port
from crud_loadgen.common.errors import ConfigError


def test_parse_hosts_splits_and_strips():
    assert parse_hosts("db1, db2,,db3 ") == ["db1", "db2", "db3"]


def test_parse_hosts_rejects_empty():
    with pytest.raises(ConfigError):
        parse_hosts(" , ")


@pytest.mark.parametrize("value", ["abc", "0", "70000", None])
def test_parse_port_rejects_bad_values(value):
    with pytest.raises(ConfigError):
        parse_port(value)


def test_from_args_reads_password_from_env(monkeypatch):
    monkeypatch.setenv("DB_PASSWORD", "s3cret")
    cfg = DBConfig.from_args("root", "localhost", "4000", "test")
    assert cfg.password == "s3cret"
    assert cfg.port == 4000
    assert "s3cret" not in repr(cfg)


def test_from_env_uses_defaults(monkeypatch):
    for name in ("DB_USER", "DB_HOSTS", "DB_PORT", "DB_DATABASE", "DB_PASSWORD"):
        monkeypatch.delenv(name, raising=False)
    cfg = DBConfig.from_env()
    assert (cfg.user, cfg.hosts, cfg.port, cfg.database, cfg.password) == (
        "root", ["localhost"], 4000, "test", "",
    )


def test_dsn_never_contains_password():
    cfg = DBConfig(user="app", hosts=["h"], port=4000, database="bench", password="pw")
    assert cfg.dsn("h") == "app@tcp(h:4000)/bench"


def test_connect_kwargs_enable_autocommit():
    cfg = DBConfig(user="app", hosts=["h"], port=3306, database="bench")
    kwargs = cfg.connect_kwargs("h")
    assert kwargs["autocommit"] is True
    assert kwargs["host"] == "h"
    assert kwargs["port"] == 3306


def test_connect_kwargs_rejects_empty_host():
    cfg = DBConfig(user="app", hosts=["h"], port=3306, database="bench")
    with pytest.raises(ConfigError):
        cfg.connect_kwargs("")


def test_load_config_validation():
    assert LoadConfig().requests == 1000
    assert LoadConfig().parallel == 20
    with pytest.raises(ConfigError):
        LoadConfig(parallel=0)
    with pytest.raises(ConfigError):
        LoadConfig(requests=-1)
