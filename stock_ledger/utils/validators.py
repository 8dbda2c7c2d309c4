# stock_ledger/utils/validators.py

def non_empty(text) -> bool:
    """
    True if `text` is not None/empty after stripping whitespace.
    """
    return bool(text and str(text).strip())


# ---- Numeric parsing & validators ----

# SQLite INTEGER is a signed 64-bit value
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


def try_parse_float(x):
    """
    Best-effort parse to float.

    Returns:
        (ok: bool, value: float|None)

    ok == False means parsing failed and value is None. Booleans and NaN are
    rejected: a checkbox value is never a price.
    """
    if isinstance(x, bool):
        return False, None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return False, None
    if v != v:  # NaN
        return False, None
    return True, v


def try_parse_int(x):
    """
    Best-effort parse to a whole number.

    Accepts ints, integral floats (3.0) and numeric strings ("3") that fit a
    SQLite INTEGER. Returns (ok, value) like try_parse_float().
    """
    if isinstance(x, int) and not isinstance(x, bool):
        v = x
    else:
        ok, f = try_parse_float(x)
        if not ok or f is None or f in (float("inf"), float("-inf")) or not f.is_integer():
            return False, None
        v = int(f)
    if not INT_MIN <= v <= INT_MAX:
        return False, None
    return True, v


def is_non_negative_number(x) -> bool:
    """
    True iff x parses to a float and value >= 0.
    """
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and val >= 0)


def is_non_negative_int(x) -> bool:
    ok, val = try_parse_int(x)
    return bool(ok and val is not None and val >= 0)


def is_percentage(x) -> bool:
    """True iff x parses to a float within [0, 100]."""
    ok, val = try_parse_float(x)
    return bool(ok and val is not None and 0 <= val <= 100)
