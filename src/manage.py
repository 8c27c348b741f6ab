"""Checkout database management CLI.

Creates or drops the relational schema for the ordering domain. Only does
anything when the active PROTEAN_ENV overlay configures a relational
database; the default in-memory setup needs no schema.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db
    PROTEAN_ENV=production python src/manage.py drop-db
"""

import argparse
import sys

import structlog

from ordering.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def _initialized_domain():
    from ordering.domain import ordering

    ordering.init()
    return ordering


def setup_database():
    from ordering.utils.db import setup_db

    domain = _initialized_domain()
    logger.info("Creating database schema", domain=domain.name)
    setup_db(domain)
    logger.info("Schema ready", domain=domain.name)


def drop_database():
    from ordering.utils.db import drop_db

    domain = _initialized_domain()
    logger.info("Dropping database schema", domain=domain.name)
    drop_db(domain)
    logger.info("Schema dropped", domain=domain.name)


def main():
    parser = argparse.ArgumentParser(description="Checkout database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()
    configure_logging()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
