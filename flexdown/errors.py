"""Exception classes for flexdown.

Three kinds of failure are distinguished:

- FlexdownUsageError: the engine's own API was called with arguments of the
  wrong type. Always raised synchronously, before any I/O.
- FlexdownSyntaxError: a template could not be parsed. Carries the component
  name and a 1-based line number.
- FlexdownComponentError: a parsed template could not be evaluated (missing
  component file, undefined global or tool, bad foreach collection, missing
  replacement).
"""

from typing import Optional


class FlexdownError(Exception):
    """Base class for every error raised by flexdown."""


class FlexdownUsageError(FlexdownError, TypeError):
    """Invalid arguments passed to a flexdown function or constructor."""

    def __init__(self, message: str = "Invalid arguments provided"):
        super().__init__(message)


class FlexdownSyntaxError(FlexdownError, SyntaxError):
    """Malformed directive grammar in a component template."""

    def __init__(self, message: str, component: Optional[str] = None, line: Optional[int] = None):
        self.message = message
        self.component = component
        self.line = line
        super().__init__(message)

    def __str__(self):
        text = self.message
        if self.component is not None:
            text += f" in '{self.component}'"
        if self.line is not None:
            text += f" at line number {self.line}"
        return text

    def __repr__(self):
        return f"FlexdownSyntaxError({self.message!r}, component={self.component!r}, line={self.line})"


class FlexdownComponentError(FlexdownError):
    """Evaluation of a component failed."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None):
        self.path = path
        self.line = line
        super().__init__(message)


def check_line(line) -> None:
    """Raise FlexdownUsageError unless line is a real int (bools excluded)."""
    if isinstance(line, bool) or not isinstance(line, int):
        raise FlexdownUsageError()


def check_str(*values) -> None:
    """Raise FlexdownUsageError unless every value is a str."""
    if not all(isinstance(value, str) for value in values):
        raise FlexdownUsageError()
