"""Turns component template text into a layout and a tree of nodes.

    parser = ComponentParser("pages.home", template)
    parser.layout   # template with each top-level directive swapped for a placeholder
    parser.nodes    # one node per placeholder, block bodies parsed recursively

Comments are removed first (each replaced by the newlines it spanned, so line
numbers stay correct), then the template is scanned with ``$place`` allowed at
the top level only.
"""

import logging
import re
from typing import List, Optional

from .conditions import Condition
from .errors import FlexdownSyntaxError, check_str
from .nodes import (
    Block,
    ForEachNode,
    IfNode,
    IncludeNode,
    Local,
    LogNode,
    Node,
    PlaceNode,
    PrintNode,
    RenderNode,
    ReplaceNode,
)
from .scanner import Statement, extract_arguments, match_arguments, parse_line, parse_template
from .tokenizer import parse_arguments, tokenize
from .values import Global, Reference, Scalar, Tool, parse_value

logger = logging.getLogger(__name__)

COMMENT_PATTERN = re.compile(r"\$comment|\$endcomment")
BRANCH_PATTERN = re.compile(r"\$if|\$elseif|\$else|\$endif")
REPLACE_PATTERN = re.compile(r"\$replace|\$endreplace")

QUOTED_PATH_PATTERN = re.compile(r"^\s*(?:'([^']+)'|\"([^\"]+)\")\s*$")
RENDER_ARGS_PATTERN = re.compile(r"^\s*(?:'([^']+)'|\"([^\"]+)\")\s*(,[\s\S]*)?$")
LOCAL_PATTERN = re.compile(r"^(?P<key>[A-Za-z_$][A-Za-z0-9_$]*)\s*=\s*(?P<value>[\s\S]*)$")
FOREACH_ARGS_PATTERN = re.compile(
    r"^(?P<item>[A-Za-z_$][A-Za-z0-9_$]*)\s*"
    r"(?:,\s*(?P<index>[A-Za-z_$][A-Za-z0-9_$]*))?\s*,\s*(?P<collection>[\s\S]+)$"
)
REPLACEMENT_PATTERN = re.compile(
    r"^\s*\$replace\s*\(\s*['\"]\s*([A-Za-z_$][A-Za-z0-9_$]*)\s*['\"]\s*\)([\s\S]*)\$endreplace\s*$"
)


def strip_comments(name: str, template: str) -> str:
    """Remove ``$comment ... $endcomment`` spans, keeping their newlines.

    Comments do not nest.

    Raises:
        FlexdownSyntaxError: On a nested, unopened or unclosed comment tag
    """
    check_str(name, template)

    spans = []
    opening: Optional[int] = None

    for match in COMMENT_PATTERN.finditer(template):
        tag = match.group(0)
        index = match.start()

        if tag == "$comment":
            if opening is not None:
                raise FlexdownSyntaxError("Unexpected $comment tag", name, parse_line(template, index))
            opening = index
        else:
            if opening is None:
                raise FlexdownSyntaxError("Unexpected $endcomment tag", name, parse_line(template, index))
            spans.append((opening, match.end()))
            opening = None

    if opening is not None:
        raise FlexdownSyntaxError("Unexpected $comment tag", name, parse_line(template, opening))

    if not spans:
        return template

    pieces = []
    cursor = 0
    for start, end in spans:
        pieces.append(template[cursor:start])
        pieces.append("\n" * template.count("\n", start, end))
        cursor = end
    pieces.append(template[cursor:])
    return "".join(pieces)


def _quoted(match: re.Match) -> str:
    return match.group(1) if match.group(1) is not None else match.group(2)


class ComponentParser:
    """Parse a component template into ``layout`` and ``nodes``."""

    def __init__(self, name: str, template: str):
        check_str(name, template)
        self.name = name

        layout = parse_template(name, strip_comments(name, template), place=True)
        self.layout = layout.layout
        self.nodes: List[Node] = self.build(layout.statements)

        logger.debug(f"Built {len(self.nodes)} nodes for component '{name}'")

    def error(self, message: str, line: int) -> FlexdownSyntaxError:
        return FlexdownSyntaxError(message, self.name, line)

    def build(self, statements: List[Statement]) -> List[Node]:
        builders = {
            "if": self.if_node,
            "foreach": self.foreach_node,
            "render": self.render_node,
            "include": self.include_node,
            "print": self.print_node,
            "short-print": self.print_node,
            "log": self.log_node,
            "place": self.place_node,
        }
        return [builders[statement.type](statement) for statement in statements]

    def parse_body(self, body: str, line: int):
        """Parse a nested body; ``$place`` is not allowed below the top level."""
        layout = parse_template(self.name, body, place=False, at=line)
        return layout.layout, self.build(layout.statements)

    # $if

    def if_node(self, statement: Statement) -> IfNode:
        branches = self.split_branches(statement)

        if_block = None
        elseif_blocks = []
        else_block = None

        for sign, start, end in branches:
            block = self.branch_block(statement, sign, start, end)
            if sign == "$if":
                if_block = block
            elif sign == "$elseif":
                elseif_blocks.append(block)
            else:
                else_block = block

        return IfNode(
            placeholder=statement.placeholder,
            line=statement.line,
            if_block=if_block,
            elseif_blocks=elseif_blocks,
            else_block=else_block,
        )

    def split_branches(self, statement: Statement):
        """Split an ``$if`` span into (tag, start, end) branches, skipping nested ifs."""
        definition = statement.definition
        branches = []
        level = 0
        previous = None

        for match in BRANCH_PATTERN.finditer(definition):
            tag = match.group(0)
            index = match.start()

            if previous is not None and tag == "$if":
                level += 1
            elif level > 0:
                if tag == "$endif":
                    level -= 1
            elif tag == "$if":
                previous = (tag, index)
            elif previous is None or (previous[0] == "$else" and tag != "$endif"):
                raise self.error(f"Unexpected '{tag}' tag", parse_line(definition, index, statement.line))
            else:
                branches.append((previous[0], previous[1], index))
                previous = None if tag == "$endif" else (tag, index)

        if previous is not None or not branches:
            raise self.error("Invalid if statement", statement.line)

        return branches

    def branch_block(self, statement: Statement, sign: str, start: int, end: int) -> Block:
        definition = statement.definition
        line = parse_line(definition, start, statement.line)
        content = definition[start:end]
        kind = sign[1:]
        condition = None

        if sign == "$else":
            body_start = len("$else")
        else:
            args, body_start = match_arguments(self.name, content, line, kind)
            condition = Condition.parse(args, self.name, line)

        body = content[body_start:]
        if not body.strip():
            raise self.error(f"Missing {kind} statement body", line)

        layout, nodes = self.parse_body(body, parse_line(content, body_start, line))
        return Block(line=line, body=layout, nodes=nodes, condition=condition)

    # $foreach

    def foreach_node(self, statement: Statement) -> ForEachNode:
        line = statement.line
        args, body_start = match_arguments(self.name, statement.definition, line, "foreach")

        match = FOREACH_ARGS_PATTERN.match(args)
        if not match:
            raise self.error("Missing or invalid foreach statement arguments", line)

        collection = self.foreach_collection(match.group("collection").strip(), line)

        body = statement.definition[body_start:-len("$endforeach")]
        if not body.strip():
            raise self.error("Missing foreach statement body", line)

        layout, nodes = self.parse_body(body, parse_line(statement.definition, body_start, line))

        return ForEachNode(
            placeholder=statement.placeholder,
            line=line,
            item=match.group("item"),
            index=match.group("index"),
            collection=collection,
            body=layout,
            nodes=nodes,
        )

    def foreach_collection(self, text: str, line: int):
        tokens = tokenize(text)

        if len(tokens) == 1:
            if Global.check(tokens[0]):
                return Global.parse(tokens[0], self.name, line)
            if Reference.check(tokens[0]):
                return Reference.parse(tokens[0], self.name, line)
        elif tokens and Tool.check_head(tokens[0]):
            return Tool.parse(text, self.name, line)

        raise self.error("Missing or invalid foreach statement collection", line)

    # $render

    def render_node(self, statement: Statement) -> RenderNode:
        line = statement.line
        args = extract_arguments(self.name, statement.definition, line, "render")

        match = RENDER_ARGS_PATTERN.match(args)
        if not match:
            raise self.error("Missing or invalid render path", line)

        locals = self.render_locals(match.group(3), line) if match.group(3) else []

        return RenderNode(
            placeholder=statement.placeholder,
            line=line,
            path=_quoted(match),
            locals=locals,
            replacements=self.replacements(statement),
        )

    def render_locals(self, text: str, line: int) -> List[Local]:
        """Parse ``, key=value, key=@tool(args)`` into locals."""
        tokens = tokenize(text)
        locals = []
        structure = []

        while tokens:
            token = tokens.pop(0)

            if token == ",":
                structure.append(",")
                continue

            match = LOCAL_PATTERN.match(token)
            if not match:
                raise self.error("Invalid local key value pairs provided", line)

            key, value = match.group("key"), match.group("value").strip()

            if Tool.check_head(value):
                # the tokenizer split the call on its parentheses and commas
                if not tokens:
                    raise self.error("Invalid local value provided", line)
                inner = parse_arguments(tokens, self.name, line)
                path = tokens.pop(0) if tokens and tokens[0][0] in ".[" else ""
                local = Tool.parse(f"{value}({''.join(inner)}){path}", self.name, line)
            elif Scalar.check(value):
                local = Scalar.parse(value, self.name, line)
            elif Global.check(value):
                local = Global.parse(value, self.name, line)
            elif Reference.check(value):
                local = Reference.parse(value, self.name, line)
            else:
                raise self.error("Invalid local value provided", line)

            structure.append("local")
            locals.append(Local(key=key, value=local))

        if not re.fullmatch(r"(?:,local)+", "".join(structure)):
            raise self.error("Invalid local key value pairs provided", line)

        return locals

    def replacements(self, statement: Statement) -> List[ReplaceNode]:
        definition = statement.definition
        replacements = []
        opened = []

        for match in REPLACE_PATTERN.finditer(definition):
            index = match.start()

            if match.group(0) == "$replace":
                opened.append(index)
                continue

            if not opened:
                raise self.error("Unexpected $endreplace tag", parse_line(definition, index, statement.line))

            start = opened.pop()
            if not opened:
                replacements.append(
                    self.replacement(
                        definition[start:match.end()], parse_line(definition, start, statement.line)
                    )
                )

        if opened:
            raise self.error("Unexpected $replace tag", parse_line(definition, opened[-1], statement.line))

        return replacements

    def replacement(self, definition: str, line: int) -> ReplaceNode:
        match = REPLACEMENT_PATTERN.match(definition)
        if not match:
            raise self.error("Missing or invalid replace key", line)

        body = match.group(2)
        if not body.strip():
            raise self.error("Missing replace body", line)

        layout, nodes = self.parse_body(body, parse_line(definition, match.start(2), line))
        return ReplaceNode(key=match.group(1), body=layout, nodes=nodes)

    # standalone statements

    def include_node(self, statement: Statement) -> IncludeNode:
        args = extract_arguments(self.name, statement.definition, statement.line, "include")
        match = QUOTED_PATH_PATTERN.match(args)
        if not match:
            raise self.error("Missing or invalid include statement path", statement.line)
        return IncludeNode(placeholder=statement.placeholder, line=statement.line, path=_quoted(match))

    def place_node(self, statement: Statement) -> PlaceNode:
        args = extract_arguments(self.name, statement.definition, statement.line, "place")
        match = QUOTED_PATH_PATTERN.match(args)
        if not match:
            raise self.error("Missing or invalid place statement key", statement.line)
        return PlaceNode(placeholder=statement.placeholder, line=statement.line, key=_quoted(match))

    def statement_value(self, statement: Statement, kind: str):
        args = extract_arguments(self.name, statement.definition, statement.line, statement.type)
        if not args:
            raise self.error(f"Missing or invalid {kind} statement value provided", statement.line)
        return parse_value(args, self.name, statement.line)

    def print_node(self, statement: Statement) -> PrintNode:
        value = self.statement_value(statement, "print")
        return PrintNode(placeholder=statement.placeholder, line=statement.line, value=value)

    def log_node(self, statement: Statement) -> LogNode:
        value = self.statement_value(statement, "log")
        return LogNode(placeholder=statement.placeholder, line=statement.line, value=value)
