import csv
import logging
from pathlib import Path

import pytest

from domain.amount import Amount
from domain.transactions import Chargeback, Deposit, Dispute, Resolve, Withdrawal
from importers.csv_importer import TransactionCsvImporter, TransactionImportError, TransactionRow
from tests.helpers.records import write_transactions_csv


def test_reads_all_kinds_in_file_order(tmp_path: Path) -> None:
    path = write_transactions_csv(
        tmp_path / "transactions.csv",
        [
            "deposit, 1, 1, 1.0",
            "withdrawal, 1, 2, 0.5",
            "dispute, 1, 1,",
            "resolve, 1, 1,",
            "chargeback, 1, 1,",
        ],
    )

    transactions = TransactionCsvImporter(path).load_transactions()

    assert [type(transaction) for transaction in transactions] == [Deposit, Withdrawal, Dispute, Resolve, Chargeback]
    assert transactions[0].amount == Amount.parse("1.0")
    assert transactions[1].amount == Amount.parse("0.5")
    assert all(transaction.client_id == 1 for transaction in transactions)


def test_whitespace_and_case_are_normalized(tmp_path: Path) -> None:
    path = write_transactions_csv(
        tmp_path / "transactions.csv",
        ["  DEPOSIT ,  7 ,  42 ,  2.5000  "],
        header=" Type ,Client, TX ,Amount ",
    )

    (transaction,) = TransactionCsvImporter(path).load_transactions()

    assert transaction == Deposit(client_id=7, transaction_id=42, amount=Amount.parse("2.5"))


def test_dispute_rows_may_omit_or_carry_an_amount(tmp_path: Path) -> None:
    path = write_transactions_csv(
        tmp_path / "transactions.csv",
        ["dispute, 1, 1", "resolve, 1, 1, ", "chargeback, 1, 1, 3.0"],
    )

    transactions = TransactionCsvImporter(path).load_transactions()

    assert transactions == [
        Dispute(client_id=1, transaction_id=1),
        Resolve(client_id=1, transaction_id=1),
        Chargeback(client_id=1, transaction_id=1),
    ]
    assert not hasattr(transactions[2], "amount")


def test_iteration_is_lazy(tmp_path: Path) -> None:
    path = write_transactions_csv(tmp_path / "transactions.csv", ["deposit, 1, 1, 1.0", "bogus, 1, 2, 1.0"])

    transactions = TransactionCsvImporter(path).iter_transactions()

    assert next(transactions) == Deposit(client_id=1, transaction_id=1, amount=Amount.parse("1"))
    with pytest.raises(TransactionImportError):
        next(transactions)


@pytest.mark.parametrize(
    "line",
    [
        "refund, 1, 1, 1.0",
        "deposit, -1, 1, 1.0",
        "deposit, 65536, 1, 1.0",
        "deposit, 1, 4294967296, 1.0",
        "deposit, 1, 1, abc",
        "deposit, 1, 1, 0.000000001",
        "deposit, 1, 1,",
        "withdrawal, x, 1, 1.0",
    ],
)
def test_malformed_row_aborts_by_default(tmp_path: Path, line: str) -> None:
    path = write_transactions_csv(tmp_path / "transactions.csv", ["deposit, 1, 10, 1.0", line])

    with pytest.raises(TransactionImportError) as excinfo:
        TransactionCsvImporter(path).load_transactions()

    assert excinfo.value.line_number == 3
    assert "line 3" in str(excinfo.value)


def test_malformed_rows_can_be_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = write_transactions_csv(
        tmp_path / "transactions.csv",
        ["deposit, 1, 1, 1.0", "deposit, 1, 2, abc", "withdrawal, 1, 3, 0.5"],
    )

    with caplog.at_level(logging.WARNING, logger="importers.csv_importer"):
        transactions = TransactionCsvImporter(path, skip_malformed_rows=True).load_transactions()

    assert [transaction.transaction_id for transaction in transactions] == [1, 3]
    assert any("Skipping" in record.getMessage() for record in caplog.records)


def test_largest_identifiers_are_accepted(tmp_path: Path) -> None:
    path = write_transactions_csv(tmp_path / "transactions.csv", ["deposit, 65535, 4294967295, 1"])

    (transaction,) = TransactionCsvImporter(path).load_transactions()

    assert transaction.client_id == 65535
    assert transaction.transaction_id == 4294967295


def test_missing_required_columns(tmp_path: Path) -> None:
    path = write_transactions_csv(tmp_path / "transactions.csv", ["deposit, 1, 1.0"], header="type, client, amount")

    with pytest.raises(TransactionImportError, match="tx"):
        TransactionCsvImporter(path).load_transactions()


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(TransactionImportError, match="Cannot open"):
        TransactionCsvImporter(tmp_path / "absent.csv").load_transactions()


def test_empty_file_yields_nothing(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    assert TransactionCsvImporter(path).load_transactions() == []


def test_header_only_yields_nothing(tmp_path: Path) -> None:
    path = write_transactions_csv(tmp_path / "transactions.csv", [])

    assert TransactionCsvImporter(path).load_transactions() == []


def test_transaction_row_drops_amount_for_dispute() -> None:
    row = TransactionRow.model_validate({"type": "Dispute", "client": "3", "tx": "9", "amount": "1.5"})

    assert row.amount == Amount.parse("1.5")
    assert row.to_transaction() == Dispute(client_id=3, transaction_id=9)


@pytest.mark.parametrize("skip_malformed_rows", [False, True])
def test_invalid_utf8_aborts_even_when_skipping(tmp_path: Path, skip_malformed_rows: bool) -> None:
    path = tmp_path / "transactions.csv"
    path.write_bytes(b"type, client, tx, amount\ndeposit, 1, 1, 1.0\ndeposit, \xff\xfe, 2, 1.0\n")

    importer = TransactionCsvImporter(path, skip_malformed_rows=skip_malformed_rows)
    with pytest.raises(TransactionImportError, match="not valid UTF-8") as excinfo:
        importer.load_transactions()

    assert excinfo.value.line_number is not None
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)


@pytest.mark.parametrize("skip_malformed_rows", [False, True])
def test_oversized_field_aborts_even_when_skipping(tmp_path: Path, skip_malformed_rows: bool) -> None:
    oversized = "1" * (csv.field_size_limit() + 1)
    path = write_transactions_csv(tmp_path / "transactions.csv", ["deposit, 1, 1, 1.0", f"deposit, 1, 2, {oversized}"])

    transactions = TransactionCsvImporter(path, skip_malformed_rows=skip_malformed_rows).iter_transactions()

    assert next(transactions).transaction_id == 1
    with pytest.raises(TransactionImportError, match="broken CSV") as excinfo:
        next(transactions)
    assert isinstance(excinfo.value.__cause__, csv.Error)
