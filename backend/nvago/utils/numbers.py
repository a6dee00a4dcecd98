import math
import re
from typing import Any, Optional

# Leading numeric prefix, read the way form inputs are read ("12abc" -> 12, "2,5" -> 2.5)
_DECIMAL_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def parse_decimal(value: Any) -> Optional[float]:
    """Parse a locale-tolerant decimal. Returns None when the value is empty or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    txt = str(value).replace(",", ".", 1)
    m = _DECIMAL_RE.match(txt)
    if not m:
        return None
    n = float(m.group(1))
    return n if math.isfinite(n) else None


def parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None

    m = _INT_RE.match(str(value))
    return int(m.group(1)) if m else None


def is_whole_number(value: Any) -> bool:
    """True for input that is entirely a non-negative integer ("4", 4), used for counts like eyelets."""
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, float):
        return math.isfinite(value) and value >= 0 and value.is_integer()
    return bool(re.fullmatch(r"\s*\d+\s*", str(value)))
