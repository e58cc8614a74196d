"""Built-in text tools."""

import html as html_lib

from ..values import UNDEFINED, to_text
from . import Tools

# escaped on top of what html.escape covers
EXTRA_HTML_ESCAPES = str.maketrans({"/": "&#x2F;", "`": "&#x60;", "=": "&#x3D;"})


def _check_text(text):
    if not isinstance(text, str):
        raise TypeError(f"Invalid text: {to_text(text)}")


def _check_index(index):
    if isinstance(index, bool) or not isinstance(index, int):
        raise TypeError(f"Invalid index: {to_text(index)}")


@Tools.register("upper")
def upper(text: str) -> str:
    _check_text(text)
    return text.upper()


@Tools.register("lower")
def lower(text: str) -> str:
    _check_text(text)
    return text.lower()


@Tools.register("upperat")
def upper_at(text: str, index: int) -> str:
    """Upper-case the character at ``index``; out of range leaves the text alone."""
    _check_text(text)
    _check_index(index)
    if index < 0 or index >= len(text):
        return text
    return text[:index] + text[index].upper() + text[index + 1:]


@Tools.register("lowerat")
def lower_at(text: str, index: int) -> str:
    _check_text(text)
    _check_index(index)
    if index < 0 or index >= len(text):
        return text
    return text[:index] + text[index].lower() + text[index + 1:]


@Tools.register("header")
def header(text: str) -> str:
    """Title-case each space separated word: 'hello  world' -> 'Hello World'."""
    _check_text(text)
    return " ".join(word[0].upper() + word[1:] for word in text.split(" ") if word)


@Tools.register("snap")
def snap(text: str, length: int) -> str:
    """Cut ``text`` to ``length`` characters, adding '...' when it was longer."""
    _check_text(text)
    if isinstance(length, bool) or not isinstance(length, int) or length <= 0:
        raise TypeError(f"Invalid length: {to_text(length)}")
    return text if len(text) <= length else text[:length].strip() + "..."


@Tools.register("html")
def html(text) -> str:
    if not isinstance(text, str):
        return ""
    return html_lib.escape(text, quote=True).translate(EXTRA_HTML_ESCAPES)


@Tools.register("trim")
def trim(value) -> str:
    if value is None or value is UNDEFINED:
        return ""
    return to_text(value).strip()


@Tools.register("join")
def join(items, separator: str = ", ") -> str:
    if not isinstance(items, (list, tuple)):
        return ""
    return separator.join("" if item is None or item is UNDEFINED else to_text(item) for item in items)
