"""Tag scanning for flexdown templates.

Finds the top-level directive tags in a template, validates that block tags
are balanced and properly nested, and swaps each directive for a unique
placeholder so the evaluator can splice rendered output back in later.

Only top-level statements are returned. The bodies of block statements are
scanned again, recursively, when the builder parses them.
"""

import logging
import re
import uuid
from typing import List, NamedTuple, Optional, Tuple

from .errors import FlexdownSyntaxError, FlexdownUsageError, check_line, check_str

logger = logging.getLogger(__name__)

TAG_PATTERN = re.compile(
    r"\$if|\$endif|\$foreach|\$endforeach|\$render|\$endrender"
    r"|\$include|\$print|\$\(|\$log|\$place|\$replace"
)

PAREN_PATTERN = re.compile(r"[()]")
QUOTED_PATTERN = re.compile(r"'[^']*'|\"[^\"]*\"")

BLOCK_TAGS = {"$if": "$endif", "$foreach": "$endforeach", "$render": "$endrender"}
CLOSING_TAGS = {closing: opening for opening, closing in BLOCK_TAGS.items()}

STANDALONE_TAGS = {
    "$include": "include",
    "$print": "print",
    "$(": "short-print",
    "$log": "log",
    "$place": "place",
}

STATEMENT_TYPES = ("if", "foreach", "render", "include", "print", "short-print", "log", "place")


class Statement(NamedTuple):
    """Raw capture of one directive occurrence."""

    definition: str
    type: str
    line: int
    offset: int = 0
    placeholder: Optional[str] = None


class Layout(NamedTuple):
    """A template with its top-level statements swapped for placeholders."""

    name: str
    layout: str
    statements: List[Statement]

    def restore(self) -> str:
        """Put the original statement text back in place of each placeholder."""
        text = self.layout
        for statement in self.statements:
            text = text.replace(statement.placeholder, statement.definition, 1)
        return text


def parse_line(template: str, pos: int, at: int = 1) -> int:
    """Return the 1-based line number of character offset ``pos``.

    Args:
        template: Text being scanned
        pos: Character offset within ``template``
        at: Line number of the first character of ``template``

    Raises:
        FlexdownUsageError: On wrong argument types or ``pos`` past the end
    """
    check_str(template)
    check_line(pos)
    check_line(at)

    if pos > len(template) or pos < 0:
        raise FlexdownUsageError("Invalid position provided")

    return at + template.count("\n", 0, pos)


def _mask_quotes(text: str) -> str:
    """Blank out quoted literals without moving any offsets."""
    return QUOTED_PATTERN.sub(lambda m: m.group(0)[0] + " " * (len(m.group(0)) - 2) + m.group(0)[0], text)


def match_arguments(name: str, statement: str, line: int, type: str) -> Tuple[str, int]:
    """Locate the argument text of a directive.

    Like ``extract_arguments`` but also reports where the arguments end, so
    callers can find the body that follows.

    Returns:
        (trimmed argument text, offset just past the closing parenthesis)
    """
    if type != "short-print":
        opening = re.match(rf"\${re.escape(type)}\s*\(", statement)
        if not opening:
            raise FlexdownSyntaxError("Invalid statement", name, line)

    masked = _mask_quotes(statement)
    start = None
    depth = []

    for match in PAREN_PATTERN.finditer(masked):
        paren = match.group(0)
        index = match.start()

        if start is None:
            start = index

        if paren == "(":
            depth.append(index)
        elif depth:
            depth.pop()
        else:
            raise FlexdownSyntaxError(
                "Unexpected closing parentheses found", name, parse_line(statement, index, line)
            )

        if not depth:
            following = PAREN_PATTERN.search(masked, index + 1)
            if following and following.group(0) == ")":
                raise FlexdownSyntaxError(
                    "Unexpected closing parentheses found",
                    name,
                    parse_line(statement, following.start(), line),
                )
            return statement[start + 1:index].strip(), index + 1

    if depth:
        raise FlexdownSyntaxError(
            "Unexpected opening parentheses found", name, parse_line(statement, depth[-1], line)
        )

    raise FlexdownSyntaxError("Missing statement arguments", name, line)


def extract_arguments(name: str, statement: str, line: int, type: str) -> str:
    """Return the trimmed text inside a directive's outer parentheses.

    Args:
        name: Component name for error messages
        statement: Directive text starting at the tag, e.g. ``$if(a && b) ...``
        line: Line number of the directive's first character
        type: Statement type (``if``, ``elseif``, ``foreach``, ``print`` ...)

    Raises:
        FlexdownSyntaxError: If the directive does not start with ``$<type>(``
            or its parentheses are unbalanced
    """
    check_str(name, statement, type)
    check_line(line)
    return match_arguments(name, statement, line, type)[0]


def scan_statements(name: str, template: str, place: bool = False, at: int = 1) -> List[Statement]:
    """Find the top-level statements of a template.

    Args:
        name: Component name for error messages
        template: Template text (comments already stripped)
        place: Whether ``$place`` tags are allowed here
        at: Line number of the template's first character

    Returns:
        Statements in scan order (empty list when there are none)

    Raises:
        FlexdownSyntaxError: On unbalanced or misplaced tags
    """
    check_str(name, template)
    check_line(at)
    if not isinstance(place, bool):
        raise FlexdownUsageError()

    opened: List[Tuple[str, int]] = []
    statements: List[Statement] = []
    consumed = 0

    for match in TAG_PATTERN.finditer(template):
        tag = match.group(0)
        index = match.start()

        # tags inside a standalone statement's arguments belong to it
        if index < consumed:
            continue

        if tag in BLOCK_TAGS:
            opened.append((tag, index))

        elif tag in CLOSING_TAGS:
            opening = opened.pop() if opened else None

            if opening is None or opening[0] != CLOSING_TAGS[tag]:
                raise FlexdownSyntaxError(f"Unexpected {tag} tag", name, parse_line(template, index, at))

            if not opened:
                start = opening[1]
                statements.append(
                    Statement(
                        definition=template[start:match.end()],
                        type=opening[0][1:],
                        line=parse_line(template, start, at),
                        offset=start,
                    )
                )

        elif tag == "$place" and not place:
            raise FlexdownSyntaxError("Unexpected $place tag", name, parse_line(template, index, at))

        elif tag == "$replace":
            if not opened or opened[-1][0] != "$render":
                raise FlexdownSyntaxError("Unexpected $replace tag", name, parse_line(template, index, at))

        elif not opened:
            kind = STANDALONE_TAGS[tag]
            line = parse_line(template, index, at)
            _, end = match_arguments(name, template[index:], line, kind)
            consumed = index + end
            statements.append(
                Statement(
                    definition=template[index:index + end],
                    type=kind,
                    line=line,
                    offset=index,
                )
            )

    if opened:
        tag, index = opened.pop()
        raise FlexdownSyntaxError(f"Invalid {tag[1:]} statement", name, parse_line(template, index, at))

    return statements


def parse_template(name: str, template: str, place: bool = False, at: int = 1) -> Layout:
    """Swap every top-level statement for a unique placeholder.

    Placeholders look like ``{{ print: <uuid> }}`` and are unique across the
    whole template.

    Returns:
        Layout holding the placeholder text and the placed statements
    """
    statements = scan_statements(name, template, place, at)

    if not statements:
        return Layout(name=name, layout=template, statements=[])

    pieces = []
    placed = []
    cursor = 0

    for statement in statements:
        placeholder = f"{{{{ {statement.type}: {uuid.uuid4()} }}}}"
        pieces.append(template[cursor:statement.offset])
        pieces.append(placeholder)
        cursor = statement.offset + len(statement.definition)
        placed.append(statement._replace(placeholder=placeholder))

    pieces.append(template[cursor:])

    logger.debug(f"Parsed {len(placed)} top-level statements in '{name}'")
    return Layout(name=name, layout="".join(pieces), statements=placed)
