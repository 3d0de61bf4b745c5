"""Fund Ledger CLI: scheduled jobs and database setup.

Commands:
  fund-ledger run-recurring [--date YYYY-MM-DD]     post due recurring templates
  fund-ledger run-depreciation [--date YYYY-MM-DD]  book monthly depreciation
  fund-ledger upgrade-db [--revision REV]           apply Alembic migrations
  fund-ledger init-db                               create all tables directly
  fund-ledger serve                                 run the HTTP API with uvicorn

Both batch commands are safe to run from cron: every item is
processed in its own transaction and a failure is reported, not
fatal to the run. The exit status is 1 when any item failed.
"""

import argparse
import logging
import sys
from datetime import date
from pathlib import Path

import uvicorn
from alembic import command
from alembic.config import Config

from fund_ledger import __version__
from fund_ledger.config import get_settings
from fund_ledger.logging_config import configure_logging
from fund_ledger.models import Base
from fund_ledger.models.base import SessionLocal, engine
from fund_ledger.services.asset_service import AssetService
from fund_ledger.services.recurring_service import RecurringService

logger = logging.getLogger(__name__)

# alembic.ini and migrations/ live beside the package in a source checkout
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value} (expected YYYY-MM-DD)")


def _report(result) -> int:
    if not result.success:
        print(result.model_dump_json(exclude={"data"}))
        return 1
    print(result.data.model_dump_json(indent=2))
    return 1 if result.data.failed else 0


def cmd_run_recurring(args: argparse.Namespace) -> int:
    """Post every recurring template that is due."""
    db = SessionLocal()
    try:
        return _report(RecurringService(db).process_due(args.date))
    finally:
        db.close()


def cmd_run_depreciation(args: argparse.Namespace) -> int:
    """Book one month of depreciation on every active asset."""
    db = SessionLocal()
    try:
        return _report(AssetService(db).process_all_depreciation(args.date))
    finally:
        db.close()


def cmd_upgrade_db(args: argparse.Namespace) -> int:
    """Bring the schema up to the given Alembic revision."""
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    alembic_cfg.attributes["logging_configured"] = True
    command.upgrade(alembic_cfg, args.revision)
    logger.info("Database upgraded to %s", args.revision)
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create any missing tables without migration history (tests, demos)."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Serve the HTTP API on HOST:PORT from settings."""
    settings = get_settings()
    uvicorn.run(
        "fund_ledger.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="fund-ledger",
        description="Fund Ledger command line",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # run-recurring
    p_recurring = subparsers.add_parser("run-recurring", help="Post due recurring transactions")
    p_recurring.add_argument("--date", type=_parse_date, default=None,
                             help="Process as of this date (default: today)")
    p_recurring.set_defaults(func=cmd_run_recurring)

    # run-depreciation
    p_depreciation = subparsers.add_parser("run-depreciation", help="Record monthly depreciation")
    p_depreciation.add_argument("--date", type=_parse_date, default=None,
                                help="Depreciation date (default: today)")
    p_depreciation.set_defaults(func=cmd_run_depreciation)

    # upgrade-db
    p_upgrade = subparsers.add_parser("upgrade-db", help="Apply database migrations")
    p_upgrade.add_argument("--revision", default="head",
                           help="Target revision (default: head)")
    p_upgrade.set_defaults(func=cmd_upgrade_db)

    # init-db
    p_init = subparsers.add_parser("init-db", help="Create database tables")
    p_init.set_defaults(func=cmd_init_db)

    # serve
    p_serve = subparsers.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind address (default: HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Port (default: PORT)")
    p_serve.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging()
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
