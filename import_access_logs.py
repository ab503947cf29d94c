"""
import_access_logs.py
=====================
Command line entry point that seeds the visitor store from Apache combined
access logs, using the modular components of ``visitor_import``:

* ``visitor_import.file_selection`` – directory / file list / prefix glob
* ``visitor_import.log_parser`` – combined log format parsing
* ``visitor_import.noise_filter`` – static asset filtering
* ``visitor_import.registry`` – visitors, visit counts and ignore lists
* ``visitor_import.agent_ledger`` – user-agent counts
* ``visitor_import.batching`` – batched commits
* ``visitor_import.pipeline`` – per-line orchestration

EXIT CODES:
- 0 import finished, final batch committed
- 1 declined confirmation, storage failure or unexpected error
- 2 invalid log directory or no files to import
- 130 interrupted
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from config_manager import get_import_config, get_logging_settings, get_storage_config
from visitor_import.agent_ledger import UserAgentLedger
from visitor_import.batching import BatchTransactionManager
from visitor_import.errors import FatalInputError, RegistryCreationError, UserDeclinedError
from visitor_import.file_selection import resolve_log_files
from visitor_import.logging_config import setup_logging, stop_logging
from visitor_import.noise_filter import NoiseFilter
from visitor_import.pipeline import ImportPipeline
from visitor_import.progress import TqdmProgress
from visitor_import.registry import VisitorRegistry
from visitor_import.storage import create_store_engine, lazy_session_factory

__version__ = "0.3.0"
_LOG = logging.getLogger("log_import")


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

def _prompt_confirm(total: int, input_fn: Callable[[str], str] = input) -> bool:
    """Ask the operator whether *total* records should be imported."""
    try:
        answer = input_fn(f"Do you want to import {total} records? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    import_config = get_import_config()
    storage_config = get_storage_config()

    p = argparse.ArgumentParser(
        description="Import Apache access logs into the visitor store"
    )
    p.add_argument(
        "log_dir",
        nargs="?",
        default=import_config.log_dir,
        help=f"Directory holding the access logs (default: {import_config.log_dir})",
    )
    p.add_argument(
        "--list",
        dest="file_list",
        help="Comma separated list of log files inside log_dir",
    )
    p.add_argument(
        "--prefix",
        default=import_config.file_prefix,
        help=f"File name prefix used when no list is given (default: {import_config.file_prefix})",
    )
    p.add_argument(
        "--database-url",
        default=storage_config.database_url,
        help="SQLAlchemy database URL of the visitor store",
    )
    p.add_argument(
        "--batch-size",
        type=int,
        default=import_config.batch_size,
        help=f"Records per commit (default: {import_config.batch_size})",
    )
    p.add_argument(
        "--noise-prefix",
        dest="noise_prefixes",
        action="append",
        help="Request path prefix to ignore; repeatable, replaces the configured set",
    )
    p.add_argument(
        "--exempt",
        dest="exempt_addresses",
        action="append",
        default=[],
        help="Address whose visits are not logged; repeatable",
    )
    p.add_argument("-y", "--yes", action="store_true", help="Skip the confirmation prompt")
    p.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    p.add_argument("--log-file", help="Also write log records to this file")
    p.add_argument("--debug", action="store_true", help="Verbose logging")
    args = p.parse_args(argv)

    if args.batch_size < 1:
        p.error("--batch-size must be at least 1")
    if args.noise_prefixes is None:
        args.noise_prefixes = import_config.noise_prefixes
    args.exempt_addresses = list(dict.fromkeys(import_config.exempt_addresses + args.exempt_addresses))
    return args


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: List[str] | None = None) -> int:  # noqa: D401

    args = _parse_args(argv)
    logging_settings = get_logging_settings()
    setup_logging(args.debug or logging_settings.debug, args.log_file or logging_settings.log_file)

    _LOG.info("🚀  import_access_logs %s", __version__)

    try:
        files = resolve_log_files(args.log_dir, args.file_list, args.prefix)
    except FatalInputError as exc:
        _LOG.error("%s", exc)
        stop_logging()
        return 2

    engine = create_store_engine(args.database_url, echo=get_storage_config().echo)
    try:
        session_factory = lazy_session_factory(engine)
        pipeline = ImportPipeline(
            batches=BatchTransactionManager(session_factory, batch_size=args.batch_size),
            noise_filter=NoiseFilter(args.noise_prefixes),
            registry=VisitorRegistry(),
            ledger=UserAgentLedger(),
            reporter=TqdmProgress(desc=str(args.log_dir), disable=args.no_progress),
            confirm=None if args.yes else _prompt_confirm,
            exempt_addresses=args.exempt_addresses,
        )

        try:
            summary = pipeline.run(files)
        except UserDeclinedError:
            _LOG.warning("🛑  User cancelled")
            return 1
        except FatalInputError as exc:
            _LOG.error("%s", exc)
            return 2
        except RegistryCreationError as exc:
            _LOG.error("💥  Storage failure, import aborted: %s", exc)
            return 1
        except SQLAlchemyError as exc:
            _LOG.error("💥  Commit failed, uncommitted batch discarded: %s", exc)
            return 1

        _LOG.info("✨  All done! %s", summary.to_dict())
        return 0
    finally:
        engine.dispose()
        stop_logging()


if __name__ == "__main__":  # pragma: no cover
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        _LOG.info("🛑  Process interrupted by user. Cleaning up...")
        stop_logging()
        sys.exit(130)  # Standard exit code for SIGINT
    except Exception as e:
        _LOG.error("💥  Fatal error: %s", e)
        stop_logging()
        sys.exit(1)
