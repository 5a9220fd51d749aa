"""Parsing of memory sizes with metric and IEC suffixes."""

from __future__ import annotations

__all__ = ["parse_number"]

_METRIC = {"k": 1000, "m": 1000000, "g": 1000000000, "t": 1000000000000}
_IEC_SHIFT = {"k": 10, "m": 20, "g": 30, "t": 40}
_DIGITS = "0123456789"


def parse_number(text: str) -> int:
    """Parse a number such as ``10k``, ``1Mi`` or ``3G``.

    A one-letter suffix (k, m, g, t) is a power of 1000; the same letter
    followed by ``i`` is a power of 1024. Letters are case-insensitive.
    Raises ValueError when the text is not of that form.
    """
    n_digits = 0
    while n_digits < len(text) and text[n_digits] in _DIGITS:
        n_digits += 1
    if n_digits == 0:
        raise ValueError(f"no leading digits in {text!r}")

    value = int(text[:n_digits])
    suffix = text[n_digits:].lower()
    if not suffix:
        return value
    if len(suffix) > 2:
        raise ValueError(f"suffix too long in {text!r}")
    if len(suffix) == 2 and suffix[1] != "i":
        raise ValueError(f"invalid suffix in {text!r}")

    unit = suffix[0]
    if unit not in _METRIC:
        raise ValueError(f"unknown unit in {text!r}")
    if len(suffix) == 1:
        return value * _METRIC[unit]
    return value << _IEC_SHIFT[unit]