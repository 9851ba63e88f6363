from __future__ import annotations

from decimal import Decimal

from domain.amount import OUTPUT_DIGITS


def format_decimal(value: Decimal) -> str:
    """Fixed-point text with exactly OUTPUT_DIGITS fractional digits, never scientific notation."""
    return f"{value:.{OUTPUT_DIGITS}f}"


def format_flag(value: bool) -> str:
    return "true" if value else "false"
