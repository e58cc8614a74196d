"""Expression tokenizer for flexdown directives.

Splits directive argument text on a separator pattern while treating quoted
string literals as atomic, so that commas or parentheses inside strings are
never taken as separators.
"""

import re
import uuid
from typing import List

from .errors import FlexdownSyntaxError, FlexdownUsageError, check_line

# capturing group keeps the separators in the token stream
DEFAULT_SEPARATOR = re.compile(r"([(),])")

QUOTED_PATTERN = re.compile(r"'[^']*'|\"[^\"]*\"")


def tokenize(expression: str, separator: re.Pattern = DEFAULT_SEPARATOR) -> List[str]:
    """Split an expression into trimmed, non-empty tokens.

    Args:
        expression: Raw expression text, e.g. ``@join(items, ', ')``
        separator: Compiled pattern to split on. Use a capturing group to keep
            the separators as tokens.

    Returns:
        List of tokens with quoted literals restored

    Raises:
        FlexdownUsageError: If expression is not a string or separator is not
            a compiled pattern

    Example:
        >>> tokenize("@join(items, ', ')")
        ['@join', '(', 'items', ',', "', '", ')']
    """
    if not isinstance(expression, str) or not isinstance(separator, re.Pattern):
        raise FlexdownUsageError()

    strings = {}

    def hide(match: re.Match) -> str:
        key = f"__str_{uuid.uuid4().hex}__"
        strings[key] = match.group(0)
        return key

    masked = QUOTED_PATTERN.sub(hide, expression)

    tokens = []
    for token in separator.split(masked):
        if token is None:
            continue
        token = token.strip()
        if not token:
            continue
        for key, literal in strings.items():
            if key in token:
                token = token.replace(key, literal)
        tokens.append(token)

    return tokens


def parse_arguments(tokens: List[str], name: str, line: int) -> List[str]:
    """Consume a parenthesised token run from the front of ``tokens``.

    The list is consumed in place: on return it holds whatever followed the
    matching closing parenthesis (a tool result path, for instance).

    Args:
        tokens: Token list whose first element must be ``(``
        name: Component name for error messages
        line: Line number for error messages

    Returns:
        Tokens between the outer parentheses (empty list for ``()``)

    Raises:
        FlexdownSyntaxError: If the run does not start with ``(`` or the
            parentheses are unbalanced
    """
    if not isinstance(tokens, list) or not tokens or not isinstance(name, str):
        raise FlexdownUsageError()
    check_line(line)

    if tokens.pop(0) != "(":
        raise FlexdownSyntaxError("Unexpected token", name, line)

    args = []
    level = 1

    while tokens:
        token = tokens.pop(0)

        if token == "(":
            level += 1
        elif token == ")":
            level -= 1

        if level == 0:
            break

        args.append(token)

    if level != 0:
        raise FlexdownSyntaxError("Unexpected token", name, line)

    return args
