from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def quantize_money(value: Decimal | float | int | str | None) -> Decimal | None:
    if value is None:
        return None
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_decimal(value: Decimal | float | int | str | None) -> Decimal:
    """Coerce a nullable numeric column value to Decimal, treating None as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def safe_div(num: Decimal, denom: Decimal) -> Decimal:
    if denom == 0:
        return ZERO
    return num / denom


def percent(part: Decimal, whole: Decimal) -> Decimal:
    return safe_div(part, whole) * HUNDRED


@dataclass(frozen=True)
class MoneyRange:
    """Two-sided amount such as an item's cost or sales price range.

    A missing bound falls back to the other bound, and a range with both
    bounds missing is zero. Use :meth:`from_bounds` to build one from
    nullable columns.
    """

    min: Decimal = ZERO
    max: Decimal = ZERO

    @classmethod
    def from_bounds(cls, low, high) -> "MoneyRange":
        if low is None and high is None:
            return cls(ZERO, ZERO)
        if low is None:
            low = high
        if high is None:
            high = low
        return cls(to_decimal(low), to_decimal(high))

    @classmethod
    def total(cls, ranges: Iterable["MoneyRange"]) -> "MoneyRange":
        result = cls()
        for value in ranges:
            result = result + value
        return result

    @property
    def preferred(self) -> Decimal:
        """The reference amount: the max bound, which already falls back to min."""
        return self.max

    @property
    def is_zero(self) -> bool:
        return self.min == 0 and self.max == 0

    def __add__(self, other: "MoneyRange") -> "MoneyRange":
        return MoneyRange(self.min + other.min, self.max + other.max)

    def subtract_from(self, amount: Decimal) -> "MoneyRange":
        """Return ``amount - self`` with bounds swapped so min stays the lower value."""
        return MoneyRange(amount - self.max, amount - self.min)

    def quantized(self) -> dict:
        return {"min": quantize_money(self.min), "max": quantize_money(self.max)}
