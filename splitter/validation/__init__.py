"""Input coercion package."""

from splitter.validation.coercion import (
    clean_price_text,
    clean_quantity_text,
    format_currency,
    parse_price,
    parse_quantity,
    price_to_text,
    round_currency,
)

__all__ = [
    "clean_price_text",
    "clean_quantity_text",
    "format_currency",
    "parse_price",
    "parse_quantity",
    "price_to_text",
    "round_currency",
]
