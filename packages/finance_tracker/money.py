"""Amount helpers: Decimal coercion, quantization and display formatting.

Amounts are carried as :class:`~decimal.Decimal` quantized to two places
(``ROUND_HALF_UP``) everywhere in the package. Floats are accepted on input
but converted through ``str`` first so ``0.1`` stays ``Decimal("0.10")``.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
CURRENCY_SYMBOL = "¥"


def quantize(d: Decimal) -> Decimal:
    return d.quantize(CENT, rounding=ROUND_HALF_UP)


def to_amount(raw: object) -> Decimal:
    """Coerce ``raw`` into a positive two-place ``Decimal``.

    Accepts ``Decimal``, ``int``, ``float`` and numeric strings (thousands
    separators allowed). Booleans are rejected explicitly.

    Raises
    ------
    ValueError
        When ``raw`` is not numeric, not finite, or not strictly positive.
    """

    if raw is None or isinstance(raw, bool):
        raise ValueError(f"invalid amount: {raw!r}")
    if isinstance(raw, Decimal):
        d = raw
    else:
        s = str(raw).strip().replace(",", "")
        if not s:
            raise ValueError("amount is empty")
        try:
            d = Decimal(s)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {raw!r}") from exc
    if not d.is_finite():
        raise ValueError(f"invalid amount: {raw!r}")
    q = quantize(d)
    if q <= 0:
        raise ValueError(f"amount must be positive: {raw!r}")
    return q


def total(amounts: Iterable[Decimal]) -> Decimal:
    """Sum ``amounts`` starting from a two-place zero."""

    return quantize(sum(amounts, ZERO))


def format_currency(amount: Decimal, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format as e.g. ``'¥1,234.56'``."""
    return f"{symbol}{quantize(amount):,.2f}"


def format_signed(amount: Decimal, symbol: str = CURRENCY_SYMBOL) -> str:
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{symbol}{quantize(abs(amount)):,.2f}"


__all__ = [
    "CENT",
    "CURRENCY_SYMBOL",
    "ZERO",
    "format_currency",
    "format_signed",
    "quantize",
    "to_amount",
    "total",
]
