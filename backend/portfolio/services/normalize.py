import math
import numbers
import re
from typing import Any

# Upper bound for a fetched quote to be trusted (exclusive).
MAX_VALID_PRICE = 100_000

_CURRENCY_RE = re.compile(r"₹|Rs\.?|INR", re.IGNORECASE)
_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")

def _is_real(v: Any) -> bool:
    return isinstance(v, numbers.Real) and not isinstance(v, bool)

def parse_number(raw: Any) -> float:
    """
    Coerce a spreadsheet cell into a number.
    - None / blanks / garbage -> 0
    - numbers pass through (NaN and inf -> 0)
    - strings: currency markers and thousands separators dropped, then the
      leading signed decimal is read ("₹1,234.50" -> 1234.5)
    """
    if raw is None:
        return 0.0
    if _is_real(raw):
        return float(raw) if math.isfinite(raw) else 0.0
    if not isinstance(raw, str):
        return 0.0

    s = _CURRENCY_RE.sub("", raw).replace(",", "")
    s = _NON_NUMERIC_RE.sub("", s)
    m = _LEADING_NUMBER_RE.match(s)
    if not m:
        return 0.0
    try:
        return float(m.group(0))
    except ValueError:
        return 0.0

def to_int(raw: Any) -> int:
    # half-up, so 2.5 -> 3 rather than banker's rounding
    return math.floor(parse_number(raw) + 0.5)

def is_valid_price(p: Any) -> bool:
    return _is_real(p) and math.isfinite(p) and 0 < p < MAX_VALID_PRICE

def text_cell(raw: Any) -> str:
    """Passthrough text for free-form columns."""
    if raw is None:
        return ""
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    return str(raw)
