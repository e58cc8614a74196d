"""Condition expressions for ``$if`` / ``$elseif``.

Grammar, loosest binding first:

    condition := logical
    logical   := comparison ( ("&&" | "||") logical )?
    comparison:= unary ( ("===" | "==" | "!==" | "!=" | "<=" | ">=" | "<" | ">") unary )?
    unary     := "!" unary | "(" condition ")" | value

Operators are found by scanning the token slice left to right at
parenthesis depth zero, logical operators first. The leftmost match splits
the slice, so ``a && b || c`` groups as ``a && (b || c)``.
"""

import re
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from .errors import FlexdownSyntaxError, check_line, check_str
from .tokenizer import parse_arguments, tokenize
from .values import Global, Reference, Scalar, Tool, Value

CONDITION_SEPARATOR = re.compile(r"([()]|={2,3}|[|&]{2}|[><!]={0,2})")

LOGICAL_OPERATORS = ("&&", "||")
COMPARISON_OPERATORS = ("===", "==", "!==", "!=", "<=", ">=", "<", ">")


class Condition(BaseModel):
    """Base of the condition tree. Use ``Condition.parse`` to build one."""

    model_config = ConfigDict(frozen=True)

    parenthesized: bool = False

    @classmethod
    def parse(cls, expression: str, name: str, line: int) -> "ConditionNode":
        """Parse condition text into a Binary / Unary / Operand tree.

        Raises:
            FlexdownUsageError: On wrong argument types
            FlexdownSyntaxError: On empty operands, unbalanced parentheses or
                tokens that are not values
        """
        check_str(expression, name)
        check_line(line)
        tokens = tokenize(expression, CONDITION_SEPARATOR)
        return _ConditionParser(name, line).parse(tokens)


class Binary(Condition):
    type: Literal["binary"] = "binary"
    operator: str
    left: "ConditionNode"
    right: "ConditionNode"


class Unary(Condition):
    type: Literal["unary"] = "unary"
    operator: Literal["!"] = "!"
    operand: "ConditionNode"


class Operand(Condition):
    type: Literal["operand"] = "operand"
    value: Value


ConditionNode = Union[Binary, Unary, Operand]
Binary.model_rebuild()
Unary.model_rebuild()


class _ConditionParser:
    def __init__(self, name: str, line: int):
        self.name = name
        self.line = line

    def error(self, message: str = "Invalid condition") -> FlexdownSyntaxError:
        return FlexdownSyntaxError(message, self.name, self.line)

    def find_operator(self, tokens: List[str], operators) -> Optional[int]:
        depth = 0
        for index, token in enumerate(tokens):
            if token == "(":
                depth += 1
            elif token == ")":
                depth -= 1
            elif depth == 0 and token in operators:
                return index
        return None

    def parse(self, tokens: List[str], parenthesized: bool = False) -> ConditionNode:
        if not tokens:
            raise self.error()

        index = self.find_operator(tokens, LOGICAL_OPERATORS)
        if index is None:
            index = self.find_operator(tokens, COMPARISON_OPERATORS)

        if index is not None:
            left, right = tokens[:index], tokens[index + 1:]
            if not left or not right:
                raise self.error(f"Missing operand for '{tokens[index]}'")
            return Binary(
                operator=tokens[index],
                left=self.parse(left),
                right=self.parse(right),
                parenthesized=parenthesized,
            )

        head = tokens[0]

        if head == "(":
            rest = list(tokens)
            inner = parse_arguments(rest, self.name, self.line)
            if rest:
                raise self.error("Unexpected token")
            return self.parse(inner, parenthesized=True)

        if head == "!":
            return Unary(operand=self.parse(tokens[1:]), parenthesized=parenthesized)

        if Tool.check_head(head):
            rest = list(tokens[1:])
            if not rest:
                raise self.error("Invalid tool reference")
            args = parse_arguments(rest, self.name, self.line)
            pattern = f"{head}({''.join(args)}){''.join(rest)}"
            return Operand(value=Tool.parse(pattern, self.name, self.line), parenthesized=parenthesized)

        if len(tokens) != 1:
            raise self.error(f"Unexpected token '{tokens[1]}'")

        for kind in (Scalar, Global, Reference):
            if kind.check(head):
                return Operand(value=kind.parse(head, self.name, self.line), parenthesized=parenthesized)

        raise self.error(f"Invalid operand '{head}'")
