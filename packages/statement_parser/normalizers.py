"""Field normalizers for the pipe-delimited statement extract.

Raw extract values are fixed-width text. Dates come as ``ddMMyyyy`` with
``00000000`` meaning "no date", and amounts may use trailing-minus notation
(``123.45-``). Some amount fields encode thousandths as whole numbers when
no decimal point is present, which ``normalize_scaled_amount`` undoes.
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext
from typing import Optional

EMPTY_DATE = "00000000"
SCALE_DIVISOR = Decimal(1000)
THREE_PLACES = Decimal("0.001")

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def normalize_date(raw: str) -> Optional[str]:
    """Convert ``ddMMyyyy`` to ``dd/MM/yyyy``.

    Returns None for the ``00000000`` sentinel. Raises ValueError for
    anything that is not eight digits forming a real calendar date.
    """
    if raw == EMPTY_DATE:
        return None
    if len(raw) != 8 or not raw.isdigit():
        raise ValueError(f"Invalid date {raw!r}: expected ddMMyyyy")
    try:
        parsed = datetime.strptime(raw, "%d%m%Y")
    except ValueError:
        raise ValueError(f"Invalid calendar date {raw!r}") from None
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year:04d}"


def normalize_signed_decimal(raw: str) -> Decimal:
    """Parse a signed decimal, accepting trailing-minus notation.

    Everything except digits, ``.`` and ``-`` is dropped before parsing,
    so ``"1,234.50-"`` reads as ``-1234.50``.
    """
    if raw is None or not raw.strip():
        raise ValueError("Amount is empty")

    cleaned = raw.strip()
    if cleaned.endswith("-"):
        cleaned = "-" + cleaned[:-1]
    cleaned = _NON_NUMERIC.sub("", cleaned)

    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount {raw!r}") from None


def normalize_scaled_amount(raw: str) -> Decimal:
    """Parse an amount that may be encoded in thousandths.

    Whole numbers are divided by 1000; values that already carry a
    fractional part are kept as-is. The result always has 3 decimal places
    (half-up).
    """
    value = normalize_signed_decimal(raw)
    # room for every input digit plus the three fixed places
    precision = max(getcontext().prec, len(value.as_tuple().digits) + 6)
    try:
        with localcontext() as ctx:
            ctx.prec = precision
            if value == value.to_integral_value():
                value = value / SCALE_DIVISOR
            return value.quantize(THREE_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"Amount {raw!r} out of range") from None
