"""
Money: fixed-point currency amounts stored as integer minor units.

Every engine works on minor units (paise for INR). Conversion to and from
decimal text happens only when reading user/OCR input or formatting messages.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import List, Union
import re

DEFAULT_CURRENCY = "INR"
MINOR_DIGITS = 2
MINOR_FACTOR = 10 ** MINOR_DIGITS
_QUANTUM = Decimal(1).scaleb(-MINOR_DIGITS)

# Currency markers accepted around typed or recognized amounts
_CURRENCY_MARKERS = re.compile(r'(₹|\brs\b\.?|\binr\b)', re.IGNORECASE)

AmountLike = Union["Money", Decimal, int, str]


class CurrencyMismatchError(ValueError):
    """Raised when arithmetic mixes two currencies."""


def round_half_up(value: Decimal) -> int:
    """Round a decimal to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Money:
    """Amount in integer minor units plus a currency tag."""
    minor_units: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise TypeError(f"Money needs integer minor units, got {type(self.minor_units).__name__}")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> "Money":
        return cls(0, currency)

    @classmethod
    def from_decimal(cls, value: Union[Decimal, int, str], currency: str = DEFAULT_CURRENCY) -> "Money":
        """
        Build Money from a major-unit value such as ``Decimal("333.34")``.

        Sub-minor fractions are rounded half-up. Floats are refused so that
        binary rounding never leaks into stored amounts.
        """
        if isinstance(value, float):
            raise TypeError("Use Decimal or str for currency values, not float")
        try:
            major = Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"Invalid amount: {value!r}") from e
        if not major.is_finite():
            raise ValueError(f"Invalid amount: {value!r}")
        return cls(round_half_up(major * MINOR_FACTOR), currency)

    @classmethod
    def parse(cls, text: str, currency: str = DEFAULT_CURRENCY) -> "Money":
        """
        Parse typed or recognized amount text.

        Handles currency markers (``₹``, ``Rs.``, ``INR``), thousands separators
        and surrounding whitespace, e.g. ``"₹1,00,000.50"`` or ``"1,250 Rs"``.
        """
        cleaned = _CURRENCY_MARKERS.sub("", text or "")
        cleaned = cleaned.replace(",", "").replace(" ", "").strip()
        if not cleaned:
            raise ValueError(f"Invalid amount: {text!r}")
        return cls.from_decimal(cleaned, currency)

    @classmethod
    def coerce(cls, value: AmountLike, currency: str = DEFAULT_CURRENCY) -> "Money":
        """Accept Money, Decimal, int (major units) or text."""
        if isinstance(value, Money):
            return value
        if isinstance(value, str):
            return cls.parse(value, currency)
        return cls.from_decimal(value, currency)

    def to_decimal(self) -> Decimal:
        """Major-unit value, e.g. ``Decimal("1000.00")``."""
        return (Decimal(self.minor_units) / MINOR_FACTOR).quantize(_QUANTUM)

    def format(self, symbol: str = "₹") -> str:
        """Display form used in field messages, e.g. ``₹1,000.00``."""
        sign = "-" if self.minor_units < 0 else ""
        return f"{sign}{symbol}{abs(self.to_decimal()):,.2f}"

    def is_zero(self) -> bool:
        return self.minor_units == 0

    def is_negative(self) -> bool:
        return self.minor_units < 0

    def percent_of(self, percentage: Decimal) -> "Money":
        """This amount scaled by ``percentage``/100, rounded half-up to a minor unit."""
        scaled = Decimal(self.minor_units) * Decimal(percentage) / Decimal(100)
        return Money(round_half_up(scaled), self.currency)

    def split_evenly(self, parts: int) -> List["Money"]:
        """
        Split into ``parts`` shares whose sum is exactly this amount.

        The leftover after integer division is handed out one minor unit at a
        time to the first shares, so ``₹1000.00 / 3`` gives
        ``[333.34, 333.33, 333.33]``.
        """
        if parts <= 0:
            return []
        base, remainder = divmod(self.minor_units, parts)
        return [
            Money(base + (1 if index < remainder else 0), self.currency)
            for index in range(parts)
        ]

    def _check_currency(self, other: "Money") -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot combine Money with {type(other).__name__}")
        if other.currency != self.currency:
            raise CurrencyMismatchError(f"Currency mismatch: {self.currency} vs {other.currency}")

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.minor_units + other.minor_units, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.minor_units - other.minor_units, self.currency)

    def __neg__(self) -> "Money":
        return Money(-self.minor_units, self.currency)

    def __abs__(self) -> "Money":
        return Money(abs(self.minor_units), self.currency)

    def __lt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units < other.minor_units

    def __le__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units <= other.minor_units

    def __gt__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units > other.minor_units

    def __ge__(self, other: "Money") -> bool:
        self._check_currency(other)
        return self.minor_units >= other.minor_units

    def __str__(self) -> str:
        return f"{self.to_decimal()} {self.currency}"


def sum_money(amounts, currency: str = DEFAULT_CURRENCY) -> Money:
    """Sum Money values; an empty iterable sums to zero in ``currency``."""
    total = Money.zero(currency)
    for amount in amounts:
        total = total + amount
    return total
