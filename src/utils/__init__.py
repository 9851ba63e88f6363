"""Output helpers: amount formatting and the account report writer."""

__all__ = [
    "account_report",
    "formatting",
]
