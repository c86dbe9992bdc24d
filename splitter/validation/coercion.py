"""
Lenient numeric coercion for user-entered prices and quantities.

Editing must never raise: a half-typed price such as "3." or a stray
letter in the quantity box is normalized to the nearest sensible value
instead of being rejected. Parsing reads the leading number and ignores
whatever follows it.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

ZERO = Decimal("0")
CENT = Decimal("0.01")

_LEADING_DECIMAL = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")
_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")
_NOT_PRICE_CHAR = re.compile(r"[^0-9.]")
_NOT_DIGIT = re.compile(r"\D")

PriceInput = Union[str, int, float, Decimal, None]
QuantityInput = Union[str, int, float, Decimal, None]


def parse_price(value: PriceInput) -> Decimal:
    """
    Parse a unit price, falling back to zero.

    Blank, unparsable, non-finite and negative input all yield 0.
    """
    if value is None or isinstance(value, bool):
        return ZERO

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return ZERO
        # str() keeps the shortest float repr, so 2.39 stays 2.39
        parsed = Decimal(str(value))
    else:
        match = _LEADING_DECIMAL.match(str(value))
        if match is None:
            return ZERO
        try:
            parsed = Decimal(match.group(1))
        except InvalidOperation:
            return ZERO

    if not parsed.is_finite() or parsed < 0:
        return ZERO
    return parsed


def parse_quantity(value: QuantityInput) -> int:
    """Parse a quantity, falling back to 1 for anything below one."""
    if value is None or isinstance(value, bool):
        return 1

    if isinstance(value, int):
        parsed = value
    elif isinstance(value, (float, Decimal)):
        try:
            parsed = int(value)
        except (OverflowError, ValueError, InvalidOperation):
            return 1
    else:
        match = _LEADING_INTEGER.match(str(value))
        if match is None:
            return 1
        try:
            parsed = int(match.group(1))
        except ValueError:
            return 1

    return parsed if parsed >= 1 else 1


def clean_price_text(text: str) -> str:
    """Keep only digits and dots, as the price box does while typing: "$3.50" -> "3.50"."""
    return _NOT_PRICE_CHAR.sub("", text or "")


def clean_quantity_text(text: str) -> str:
    """Keep only digits: "1,000" -> "1000"."""
    return _NOT_DIGIT.sub("", text or "")


def price_to_text(value: PriceInput) -> str:
    """Render a recognizer/number price as the raw text stored on an item."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return format(parse_price(value), "f")


def round_currency(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Union[Decimal, int, float], symbol: str = "") -> str:
    """
    Format an amount for display with two decimals.

    Rounding happens here and only here; totals are accumulated unrounded.
    """
    if not isinstance(amount, Decimal):
        amount = parse_price(amount)
    return f"{symbol}{round_currency(amount):,.2f}"
