from __future__ import annotations

import csv
import logging
from csv import DictReader
from pathlib import Path
from typing import Iterator

from pydantic import BaseModel, Field, ValidationError, field_validator

from domain.amount import Amount
from domain.transactions import (
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    TRANSACTION_ADAPTER,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = frozenset({"type", "client", "tx"})
AMOUNT_TYPES = frozenset({TransactionType.DEPOSIT, TransactionType.WITHDRAWAL})


class TransactionImportError(Exception):
    def __init__(self, message: str, *, line_number: int | None = None, row: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.row = row


class TransactionRow(BaseModel):
    """One CSV row: ``type, client, tx, amount``."""

    type: TransactionType
    client: int = Field(ge=0, le=MAX_CLIENT_ID)
    tx: int = Field(ge=0, le=MAX_TRANSACTION_ID)
    amount: Amount | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("amount", mode="before")
    @classmethod
    def _empty_amount(cls, value: object) -> object:
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return None
        return value

    def to_transaction(self) -> Transaction:
        payload: dict[str, object] = {
            "type": self.type,
            "client_id": self.client,
            "transaction_id": self.tx,
        }
        # Dispute-family rows sometimes carry an amount; it has no meaning for them.
        if self.type in AMOUNT_TYPES and self.amount is not None:
            payload["amount"] = self.amount
        return TRANSACTION_ADAPTER.validate_python(payload)


def _normalize_row(row: dict[str | None, str | list[str] | None]) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for key, value in row.items():
        # Surplus fields land under the None key.
        if key is None or not isinstance(value, str):
            continue
        normalized[key.strip().lower()] = value.strip()
    return normalized


def _summarize(err: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(part) for part in error['loc']) or 'row'}: {error['msg']}" for error in err.errors())


class TransactionCsvImporter:
    def __init__(self, source_path: str | Path, *, skip_malformed_rows: bool = False) -> None:
        self._source_path = Path(source_path)
        self._skip_malformed_rows = skip_malformed_rows

    def load_transactions(self) -> list[Transaction]:
        return list(self.iter_transactions())

    def iter_transactions(self) -> Iterator[Transaction]:
        """Yield transaction records lazily, in file order.

        Undecodable bytes and broken CSV framing always abort the import, even
        when malformed rows are skipped: the reader cannot resume after them.
        """
        try:
            handle = self._source_path.open(encoding="utf-8", newline="")
        except OSError as err:
            raise TransactionImportError(f"Cannot open {self._source_path}: {err}") from err

        read = 0
        skipped = 0
        with handle:
            reader = DictReader(handle, skipinitialspace=True)
            try:
                fieldnames = reader.fieldnames
            except (UnicodeDecodeError, csv.Error) as err:
                raise self._unreadable(err, reader.line_num or 1) from err
            if fieldnames is None:
                logger.info("%s is empty", self._source_path)
                return
            columns = {name.strip().lower() for name in fieldnames if name}
            missing = REQUIRED_COLUMNS - columns
            if missing:
                raise TransactionImportError(
                    f"{self._source_path} is missing required columns: {', '.join(sorted(missing))}",
                    line_number=1,
                )

            for raw_row in self._rows(reader):
                row = _normalize_row(raw_row)
                try:
                    transaction = TransactionRow.model_validate(row).to_transaction()
                except ValidationError as err:
                    message = f"Malformed row at line {reader.line_num} of {self._source_path}: {_summarize(err)}"
                    if not self._skip_malformed_rows:
                        raise TransactionImportError(message, line_number=reader.line_num, row=row) from err
                    logger.warning("Skipping %s", message)
                    skipped += 1
                    continue
                read += 1
                yield transaction

        logger.info("Read %d transactions from %s (%d malformed rows skipped)", read, self._source_path, skipped)

    def _rows(self, reader: DictReader[str]) -> Iterator[dict[str | None, str | list[str] | None]]:
        try:
            yield from reader
        except (UnicodeDecodeError, csv.Error) as err:
            raise self._unreadable(err, reader.line_num) from err

    def _unreadable(self, err: UnicodeDecodeError | csv.Error, line_number: int) -> TransactionImportError:
        if isinstance(err, UnicodeDecodeError):
            problem = f"is not valid UTF-8 near line {line_number}"
        else:
            problem = f"has broken CSV at line {line_number}"
        return TransactionImportError(f"{self._source_path} {problem}: {err}", line_number=line_number)
