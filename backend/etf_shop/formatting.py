"""Display conventions shared with the presentation layer."""
from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOL = "₹"


def _group_indian(digits: str) -> str:
    # Last three digits, then groups of two: 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Decimal | float, symbol: str = CURRENCY_SYMBOL) -> str:
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    return f"{sign}{symbol}{_group_indian(whole)}.{fraction}"


def format_percent(value: Decimal | float) -> str:
    number = Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if number == 0:
        number = abs(number)
    prefix = "+" if number >= 0 else ""
    return f"{prefix}{number:.2f}%"


def format_date(value: date) -> str:
    return f"{value.day:02d} {value.strftime('%b')} {value.year}"


__all__ = ["format_currency", "format_date", "format_percent"]
