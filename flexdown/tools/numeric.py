"""Built-in number formatting tools.

Inputs are coerced leniently: falsy values count as 0, ``True`` as 1,
numeric strings are parsed and anything else becomes 0.
"""

import math

from ..values import to_text
from . import Tools

SIZE_UNITS = ("bytes", "KB", "MB", "GB", "TB", "PB")


def to_number(value):
    if not value:
        return 0
    if value is True:
        return 1
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
        return int(number) if number.is_integer() else number
    if isinstance(value, (int, float)) and value == value:
        return value
    return 0


def _half_up(number) -> int:
    return math.floor(number + 0.5)


def _trim_zero(text: str) -> str:
    return text[:-2] if text.endswith(".0") else text


@Tools.register("round")
def round_(value) -> int:
    """Round half up: 6.5 -> 7, -6.5 -> -6."""
    return _half_up(to_number(value))


@Tools.register("floor")
def floor(value) -> int:
    return math.floor(to_number(value))


@Tools.register("pad")
def pad(value, length: int = 2) -> str:
    """Left-pad the absolute value with zeros: 9 -> '09'."""
    return to_text(abs(to_number(value))).rjust(length, "0")


@Tools.register("percent")
def percent(value) -> str:
    return f"{to_text(to_number(value))}%"


@Tools.register("comma")
def comma(value) -> str:
    """Thousands separators, at most three decimals: 1234567.891 -> '1,234,567.891'."""
    number = to_number(value)
    if isinstance(number, int):
        return f"{number:,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


@Tools.register("shorten")
def shorten(value) -> str:
    """Compact large numbers: 2100 -> '2.1k', 3000000 -> '3m'."""
    number = to_number(value)

    if number < 1_000:
        return to_text(number)
    if number < 1_000_000:
        return f"{_trim_zero(f'{number / 1_000:.1f}')}k"
    if number < 1_000_000_000:
        return f"{_trim_zero(f'{number / 1_000_000:.1f}')}m"
    return f"{_trim_zero(f'{number / 1_000_000_000:.1f}')}b"


@Tools.register("size")
def size(value) -> str:
    """Readable byte size: 1536 -> '1.50 KB'."""
    number = to_number(value)
    index = 0

    while number >= 1024 and index < len(SIZE_UNITS) - 1:
        number /= 1024
        index += 1

    if index == 0:
        return f"{_half_up(number)} {SIZE_UNITS[0]}"
    return f"{number:.2f} {SIZE_UNITS[index]}"


@Tools.register("float")
def to_float(value) -> str:
    """One decimal place: 4 -> '4.0', 4.26 -> '4.3'."""
    return f"{_half_up(to_number(value) * 10) / 10:.1f}"


@Tools.register("avg")
def avg(votes, stars) -> str:
    """Average rating from a vote count and a star total."""
    votes = to_number(votes)
    if votes == 0:
        return "0.0"
    return f"{to_number(stars) / votes:.1f}"
