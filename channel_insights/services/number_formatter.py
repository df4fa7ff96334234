"""Abbreviated display of large counts"""

from typing import Optional, Union


def _to_int(value: Union[int, str, None]) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def format_number(value: Union[int, str, None]) -> str:
    """
    Abbreviate a count for display.

    Values of a million or more get one decimal and an ``M`` suffix, values of
    a thousand or more get one decimal and a ``K`` suffix, smaller values are
    printed with comma thousands separators. Missing or unparsable input
    renders as ``"0"``.

    >>> format_number(1500000)
    '1.5M'
    >>> format_number("2500")
    '2.5K'
    """
    n = _to_int(value)
    if n is None:
        return "0"
    if n >= 1_000_000:
        return f"{n / 1_000_000:.1f}M"
    if n >= 1_000:
        return f"{n / 1_000:.1f}K"
    return f"{n:,}"
