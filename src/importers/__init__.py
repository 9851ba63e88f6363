"""Readers that turn external transaction files into domain records."""

__all__ = [
    "csv_importer",
]
