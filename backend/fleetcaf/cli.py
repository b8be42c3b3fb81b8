#!/usr/bin/env python3
"""
fleetcaf/cli.py - Administrative command-line interface

Usage:
    fleetcaf-admin init-db
    fleetcaf-admin serve --host 0.0.0.0 --port 8000

Exit Codes:
    0 = success
    1 = command failed
"""
import argparse
import logging
import sys

from fleetcaf.config import settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetcaf-admin",
        description="Fleet compliance CAF service administration"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create all database tables")

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=settings.API_HOST, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=settings.API_PORT, help="Bind port")
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)"
    )

    return parser


def main(argv=None) -> int:
    """Parse arguments and dispatch the fleetcaf-admin subcommand."""
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    args = build_parser().parse_args(argv)

    if args.command == "init-db":
        return run_init_db()
    if args.command == "serve":
        return run_serve(args)
    return 1


def run_init_db() -> int:
    """Create every table from the models, including the signature trigger on PostgreSQL."""
    from sqlalchemy.exc import SQLAlchemyError

    from fleetcaf import models  # noqa: F401  registers every table on Base.metadata
    from fleetcaf.database import Base, engine

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        print(f"Error: Database initialization failed: {e}", file=sys.stderr)
        return 1

    logger.info("Database tables created")
    return 0


def run_serve(args) -> int:
    import uvicorn

    uvicorn.run("fleetcaf.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
