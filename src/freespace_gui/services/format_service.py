from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

BINARY_PREFIXES = ("", "Ki", "Mi", "Gi", "Ti")
DECIMAL_PREFIXES = ("", "K", "M", "G", "T")

_ONE_DECIMAL = Decimal("0.1")


def _scale(n: int, base: int, steps: int) -> int:
    i = 0
    while i < steps - 1 and n >= base ** (i + 1):
        i += 1
    return i


def format_bytes(n: int, binary_units: bool = True, condensed: bool = False) -> str:
    """Human readable size, e.g. ``1.5 GiB`` or, condensed, ``1.5Gi``.

    The value always carries one decimal, rounded half away from zero.
    Sizes past the tera range stay in tera units.
    """
    n = int(n)
    if n < 0:
        raise ValueError(f"byte count must not be negative: {n}")
    if n == 0:
        return "0" if condensed else "0 B"

    base = 1024 if binary_units else 1000
    prefixes = BINARY_PREFIXES if binary_units else DECIMAL_PREFIXES
    i = _scale(n, base, len(prefixes))

    value = (Decimal(n) / Decimal(base**i)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    if condensed:
        return f"{value}{prefixes[i]}"
    return f"{value} {prefixes[i]}B"
