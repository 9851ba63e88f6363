from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Any, cast

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

# Amounts are stored as integer counts of 10^-SCALE_DIGITS.
SCALE_DIGITS = 8
OUTPUT_DIGITS = 4
MAX_UNITS = 2**63 - 1

_OUTPUT_QUANTUM = Decimal(1).scaleb(-OUTPUT_DIGITS)
# Largest decimal exponent whose leading digit can still fit into MAX_UNITS.
_MAX_ADJUSTED_EXPONENT = len(str(MAX_UNITS)) - SCALE_DIGITS - 1


class AmountError(ValueError):
    pass


class AmountOverflowError(AmountError):
    def __init__(self, *, units: int | None = None, value: Decimal | None = None) -> None:
        self.units = units
        self.value = value
        shown = value if value is not None else units
        super().__init__(f"Amount {shown} is outside the representable range (max {MAX_UNITS} units of 1e-{SCALE_DIGITS})")


class AmountPrecisionError(AmountError):
    def __init__(self, value: Decimal) -> None:
        self.value = value
        super().__init__(f"Amount {value} has more than {SCALE_DIGITS} fractional digits")


@dataclass(frozen=True, order=True, slots=True)
class Amount:
    """Signed fixed-point money value.

    Arithmetic is exact on the integer ``units``; rounding only happens in
    ``round_to_output_precision``.
    """

    units: int = 0

    def __post_init__(self) -> None:
        if abs(self.units) > MAX_UNITS:
            raise AmountOverflowError(units=self.units)

    @classmethod
    def zero(cls) -> Amount:
        return cls(0)

    @classmethod
    def from_decimal(cls, value: Decimal) -> Amount:
        if not value.is_finite():
            raise AmountError(f"Amount must be a finite number, got {value}")
        if value and value.adjusted() > _MAX_ADJUSTED_EXPONENT:
            raise AmountOverflowError(value=value)

        sign, digits, exponent = value.as_tuple()
        coefficient = int("".join(str(digit) for digit in digits) or "0")
        if coefficient == 0:
            return cls.zero()
        shift = cast(int, exponent) + SCALE_DIGITS
        if shift >= 0:
            units = coefficient * 10**shift
        else:
            units, remainder = divmod(coefficient, 10**-shift)
            if remainder:
                raise AmountPrecisionError(value)
        return cls(-units if sign else units)

    @classmethod
    def parse(cls, text: str) -> Amount:
        try:
            value = Decimal(text.strip())
        except InvalidOperation as err:
            raise AmountError(f"Invalid amount {text!r}") from err
        return cls.from_decimal(value)

    def to_decimal(self) -> Decimal:
        return Decimal(self.units).scaleb(-SCALE_DIGITS)

    def add(self, other: Amount) -> Amount:
        return Amount(self.units + other.units)

    def sub(self, other: Amount) -> Amount:
        return Amount(self.units - other.units)

    def round_to_output_precision(self) -> Decimal:
        """Round half to even at OUTPUT_DIGITS, e.g. 1.00005 -> 1.0000 and 1.00015 -> 1.0002."""
        return self.to_decimal().quantize(_OUTPUT_QUANTUM, rounding=ROUND_HALF_EVEN)

    def is_positive(self) -> bool:
        return self.units > 0

    def __add__(self, other: Amount) -> Amount:
        return self.add(other)

    def __sub__(self, other: Amount) -> Amount:
        return self.sub(other)

    def __str__(self) -> str:
        return format(self.to_decimal().normalize(), "f")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: GetCoreSchemaHandler) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def _validate(cls, value: Any) -> Amount:
        if isinstance(value, Amount):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, (Decimal, int)) and not isinstance(value, bool):
            return cls.from_decimal(Decimal(value))
        raise AmountError(f"Cannot build an Amount from {type(value).__name__}")
