#!/usr/bin/env python3
"""
Command-line entry point for the CRUD load harness.

Runs ``--requests`` insert/update/delete/insert work units against the
configured hosts, at most ``--parallel`` at a time, then prints the elapsed
time and the row count of the first host.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional, TextIO

import mysql.connector
from mysql.connector import Error as MySQLError

from ..common.config import (
    DBConfig,
    DEFAULT_DATABASE,
    DEFAULT_HOSTS,
    DEFAULT_PARALLEL,
    DEFAULT_PORT,
    DEFAULT_REQUESTS,
    DEFAULT_USER,
    LoadConfig,
)
from ..common.db_client import ConnectionRegistry, Connector
from ..common.errors import HarnessError
from ..loadgen.operations import RowOperations
from ..loadgen.reporter import Reporter
from ..loadgen.scheduler import Scheduler
from ..loadgen.work_unit import run_work_unit

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser. ``-h`` selects hosts, so help is ``--help`` only."""
    parser = argparse.ArgumentParser(
        prog="crud-loadgen",
        description="Concurrent insert/update/delete/insert load generator for MySQL-protocol databases. "
                    "The password, if any, is read from DB_PASSWORD in the environment or .env.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  # 1000 units, 20 at a time, against a local TiDB
  crud-loadgen

  # Spread 5000 units over three hosts, 50 in flight
  crud-loadgen -h db1,db2,db3 -n 5000 -t 50

  # Print affected rows for every statement
  crud-loadgen -n 10 --debug
        """,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit.")
    parser.add_argument(
        "-U", "--user",
        default=os.getenv("DB_USER", DEFAULT_USER),
        help="db user (default: %(default)s).",
    )
    parser.add_argument(
        "-h", "--hosts",
        default=os.getenv("DB_HOSTS", DEFAULT_HOSTS),
        help="db host name or ip addr. multi hosts with split , (default: %(default)s).",
    )
    parser.add_argument(
        "-P", "--port",
        default=os.getenv("DB_PORT", DEFAULT_PORT),
        help="db port (default: %(default)s).",
    )
    parser.add_argument(
        "-d", "--database",
        default=os.getenv("DB_DATABASE", DEFAULT_DATABASE),
        help="db name (default: %(default)s).",
    )
    parser.add_argument(
        "-n", "--requests",
        type=int,
        default=DEFAULT_REQUESTS,
        help="total request num (default: %(default)s).",
    )
    parser.add_argument(
        "-t", "--parallel",
        type=int,
        default=DEFAULT_PARALLEL,
        help="parallel number (default: %(default)s).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print affected rows per statement and log connection info.",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Count failed work units and continue instead of aborting the run.",
    )
    parser.add_argument(
        "--create-table",
        action="store_true",
        help="Create the `test` table on every host before the run if it is missing.",
    )
    return parser


def run_load(
    db_cfg: DBConfig,
    load_cfg: LoadConfig,
    connector: Connector = mysql.connector.connect,
    out: Optional[TextIO] = None,
) -> int:
    """
    Run the whole benchmark and print its report.

    Returns:
        The post-run row count of the first host.
    """
    reporter = Reporter(out)
    with ConnectionRegistry(db_cfg, max_idle=load_cfg.parallel, connector=connector) as registry:
        ops = RowOperations(registry, debug=load_cfg.debug)
        if load_cfg.create_table:
            for host in registry.hosts:
                ops.create_table(host)

        scheduler = Scheduler(
            hosts=registry.hosts,
            requests=load_cfg.requests,
            parallel=load_cfg.parallel,
            work=lambda host: run_work_unit(ops, host),
            fail_fast=not load_cfg.keep_going,
        )
        logger.info(
            f"Starting {load_cfg.requests} work units on {len(registry.hosts)} host(s), "
            f"parallel={load_cfg.parallel}"
        )
        reporter.start()
        result = scheduler.run()
        reporter.stop()
        reporter.print_elapsed()

        count = ops.select_count(registry.hosts[0])
        reporter.print_summary(
            load_cfg.requests,
            count,
            failed=result.failed if load_cfg.keep_going else None,
        )
        return count


def main(
    argv: list[str] | None = None,
    connector: Connector = mysql.connector.connect,
    out: Optional[TextIO] = None,
) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        db_cfg = DBConfig.from_args(args.user, args.hosts, args.port, args.database)
        load_cfg = LoadConfig(
            requests=args.requests,
            parallel=args.parallel,
            debug=args.debug,
            keep_going=args.keep_going,
            create_table=args.create_table,
        )
        run_load(db_cfg, load_cfg, connector=connector, out=out)
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except (HarnessError, MySQLError) as e:
        logging.error(f"Load run failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
