"""Account-ledger engine for the payments processor.

This package holds the in-memory account state, the dispute lifecycle and the
fixed-precision ``Amount`` type. It performs no I/O so that business rules can
be exercised in isolation from the CSV importer and the report writer.
"""

__all__ = [
    "account",
    "amount",
    "disputes",
    "ledger",
    "outcome",
    "router",
    "transactions",
]
