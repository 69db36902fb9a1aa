"""
Ordered field alias lookup.

Exchanges spell the same logical field differently depending on the
channel (Binance sends the last price as "c" on tickers, "p" on trades and
"k.c" inside klines). Each logical field is described by a FieldAliases
table whose keys are tried in order; the first key holding a usable number
wins.

A value is usable when it is present, not an empty string, not a boolean
and parses to a finite number. Keys may be dotted paths into nested
objects.

Example:
    >>> PRICE = FieldAliases("price", ("c", "p", "k.c"))
    >>> PRICE.resolve({"k": {"c": "101.5"}})
    Decimal('101.5')
    >>> PRICE.resolve({})
    Decimal('0')
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Tuple

ZERO = Decimal("0")


def to_decimal(value: Any) -> Optional[Decimal]:
    """
    Convert a raw field value to Decimal.

    Returns:
        Optional[Decimal]: The value, or None if it is missing or not a
            finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if not isinstance(value, (str, int, float, Decimal)):
        return None
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        return None
    if not result.is_finite():
        return None
    return result


def ms_to_datetime(ms: Decimal | int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(int(ms) / 1000, tz=timezone.utc)


def get_path(message: Any, path: str) -> Any:
    """Look up a dotted path in nested mappings. Missing segments yield None."""
    value = message
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


@dataclass(frozen=True)
class FieldAliases:
    """
    Ordered alias list for one logical field.

    Attributes:
        name: Logical field name (for logging and tests).
        keys: Source keys or dotted paths, in priority order.
    """

    name: str
    keys: Tuple[str, ...]

    def lookup(self, message: Any) -> Optional[Decimal]:
        """Return the first usable value, or None."""
        for key in self.keys:
            value = to_decimal(get_path(message, key))
            if value is not None:
                return value
        return None

    def resolve(self, message: Any, default: Decimal = ZERO) -> Decimal:
        """Return the first usable value, or the default."""
        value = self.lookup(message)
        return default if value is None else value

    def resolve_int(self, message: Any) -> Optional[int]:
        """Return the first usable integral value, or None."""
        value = self.lookup(message)
        if value is None or value != value.to_integral_value():
            return None
        return int(value)

    def resolve_timestamp(self, message: Any) -> datetime:
        """
        Resolve an epoch-millisecond field to a UTC datetime.

        Falls back to the current time only when no alias holds a value
        that converts to a valid datetime.
        """
        value = self.lookup(message)
        if value is not None:
            try:
                return ms_to_datetime(value)
            except (OverflowError, OSError, ValueError):
                pass
        return datetime.now(timezone.utc)
