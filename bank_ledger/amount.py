"""
Amount Module

Non-negative monetary amounts with proper Decimal precision. NEVER uses float
for monetary values: floats are converted through their string form.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from dataclasses import dataclass
from typing import Iterable, Union

from .errors import InvalidAmount

# Set global decimal context for financial precision
getcontext().prec = 28

AMOUNT_PRECISION = 2  # Cents

AmountLike = Union['Amount', Decimal, int, float, str]


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert a numeric input to Decimal

    Args:
        value: Amount, Decimal, int, float or numeric string

    Returns:
        Decimal value (not rounded)

    Raises:
        InvalidAmount: If the value is not a finite number
    """
    if isinstance(value, Amount):
        return value.value
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise InvalidAmount(f"Cannot convert '{value}' to Decimal")
    if not result.is_finite():
        raise InvalidAmount(f"Amount must be finite, got {value}")
    return result


@dataclass(frozen=True, order=True)
class Amount:
    """
    Immutable non-negative amount rounded to cents.
    Constructing one from a negative number raises InvalidAmount.
    """
    value: Decimal

    def __post_init__(self):
        value = to_decimal(self.value)

        # Round to amount precision
        rounded = value.quantize(
            Decimal('0.1') ** AMOUNT_PRECISION,
            rounding=ROUND_HALF_UP
        )
        if rounded < Decimal('0'):
            raise InvalidAmount(f"Amount cannot be negative: {rounded}")
        if rounded.is_zero():
            rounded = abs(rounded)
        object.__setattr__(self, 'value', rounded)

    @classmethod
    def zero(cls) -> 'Amount':
        return cls(Decimal('0'))

    def __add__(self, other: 'Amount') -> 'Amount':
        return Amount(self.value + to_decimal(other))

    def __sub__(self, other: 'Amount') -> 'Amount':
        return Amount(self.value - to_decimal(other))

    def __mul__(self, multiplier) -> 'Amount':
        if not isinstance(multiplier, Decimal):
            multiplier = Decimal(str(multiplier))
        return Amount(self.value * multiplier)

    __rmul__ = __mul__

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.value == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is strictly positive"""
        return self.value > Decimal('0')

    def to_string(self) -> str:
        """Format for display"""
        return f"{self.value:,.{AMOUNT_PRECISION}f}"

    def __str__(self) -> str:
        return self.to_string()


def sum_amounts(amounts: Iterable[Amount]) -> Amount:
    """Sum amounts in iteration order; an empty iterable sums to zero"""
    total = Decimal('0')
    for amount in amounts:
        total += amount.value
    return Amount(total)
