from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence, TextIO

from pydantic import ValidationError

from config import LOG_LEVELS, config
from domain.ledger import AccountLedger
from domain.router import FatalTransactionError, TransactionRouter
from importers.csv_importer import TransactionCsvImporter, TransactionImportError
from utils.account_report import write_account_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_IMPORT_ERROR = 2


def configure_logging(level: str, log_format: str) -> None:
    logging.basicConfig(level=level, format=log_format, stream=sys.stderr, force=True)


def run(csv_path: Path, *, skip_malformed_rows: bool = False, output: TextIO | None = None) -> int:
    ledger = AccountLedger()
    router = TransactionRouter(ledger)
    importer = TransactionCsvImporter(csv_path, skip_malformed_rows=skip_malformed_rows)

    exit_code = EXIT_OK
    try:
        router.process(importer.iter_transactions())
    except TransactionImportError as err:
        logger.error("%s", err)
        return EXIT_IMPORT_ERROR
    except FatalTransactionError as err:
        # Balances applied before the fatal record are still reported.
        logger.info("Writing balances for %d clients after %d transactions", len(ledger), err.report.processed)
        exit_code = EXIT_FATAL

    write_account_report(ledger.snapshots(), output)
    return exit_code


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Apply a transactions CSV and print the final client balances.")
    parser.add_argument("csv", type=Path, help="input CSV with columns type, client, tx, amount")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS)
    parser.add_argument(
        "--skip-malformed-rows",
        action="store_true",
        help="log and skip rows that cannot be parsed instead of aborting",
    )
    try:
        settings = config()
    except ValidationError as err:
        parser.error(f"invalid PAYMENTS_* settings: {err}")
    parser.set_defaults(log_level=settings.log_level, skip_malformed_rows=settings.skip_malformed_rows)
    args = parser.parse_args(argv)

    configure_logging(args.log_level, settings.log_format)
    return run(args.csv, skip_malformed_rows=args.skip_malformed_rows)


if __name__ == "__main__":
    sys.exit(main())
