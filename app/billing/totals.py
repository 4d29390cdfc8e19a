# app/billing/totals.py

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Tuple

CENT = Decimal("0.01")


def round_money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def line_amount(qty, rate) -> Decimal:
    return round_money(Decimal(str(qty)) * Decimal(str(rate)))


def compute_totals(items: Iterable[Mapping], tax, packaging) -> Tuple[Decimal, Decimal]:
    """
    Return (total, grand_total) for persisted line items.

    total is the sum of unrounded qty * rate, rounded once at the end;
    grand_total adds tax and packaging on top.
    """
    subtotal = Decimal("0")
    for item in items:
        subtotal += Decimal(str(item["qty"])) * Decimal(str(item["rate"]))

    total = round_money(subtotal)
    grand_total = round_money(subtotal + round_money(tax) + round_money(packaging))
    return total, grand_total
