from __future__ import annotations

import csv
import sys
from typing import Iterable, TextIO

from domain.account import AccountSnapshot

from .formatting import format_decimal, format_flag

HEADER = ("client", "available", "held", "total", "locked")


def snapshot_row(snapshot: AccountSnapshot) -> tuple[str, str, str, str, str]:
    return (
        str(snapshot.client_id),
        format_decimal(snapshot.available),
        format_decimal(snapshot.held),
        format_decimal(snapshot.total),
        format_flag(snapshot.locked),
    )


def write_account_report(snapshots: Iterable[AccountSnapshot], stream: TextIO | None = None) -> int:
    """Write the snapshot CSV and return the number of client rows written."""
    writer = csv.writer(stream if stream is not None else sys.stdout, lineterminator="\n")
    writer.writerow(HEADER)
    written = 0
    for snapshot in snapshots:
        writer.writerow(snapshot_row(snapshot))
        written += 1
    return written
