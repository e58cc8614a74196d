"""Built-in type check tools: @arr, @obj, @str, @num, @int, @flo."""

from collections.abc import Mapping

from . import Tools


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value


@Tools.register("arr")
def is_full_list(value) -> bool:
    """True for a non-empty list or tuple."""
    return isinstance(value, (list, tuple)) and len(value) > 0


@Tools.register("obj")
def is_full_mapping(value) -> bool:
    """True for a non-empty mapping."""
    return isinstance(value, Mapping) and len(value) > 0


@Tools.register("str")
def is_full_string(value) -> bool:
    """True for a string with at least one non-space character."""
    return isinstance(value, str) and value.strip() != ""


@Tools.register("num")
def is_number(value) -> bool:
    return _is_number(value)


@Tools.register("int")
def is_integer(value) -> bool:
    return _is_number(value) and float(value).is_integer()


@Tools.register("flo")
def is_float(value) -> bool:
    return _is_number(value) and not float(value).is_integer()
