"""Value descriptors: the four kinds of expression usable inside directives.

- Scalar: ``'text'``, ``"text"``, ``42``, ``-1.5``, ``true``, ``false``,
  ``null``, ``undefined``
- Reference: ``user.name``, ``items[0].title`` -- resolved against scopes
  and caller locals
- Global: ``#app_name``, ``#users[1].age`` -- resolved against the
  configured globals
- Tool: ``@upper(user.name)``, ``@fetchUser().name`` -- a registered
  callable, arguments evaluated recursively

Tool calls nest arbitrarily, so their grammar is handled by a small lark
parser; the three flat grammars are plain regular expressions.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Literal, Optional, Tuple, Union

from lark import Lark, Token, Transformer
from lark.exceptions import LarkError
from pydantic import BaseModel, ConfigDict

from .errors import FlexdownSyntaxError, check_line, check_str

logger = logging.getLogger(__name__)


class _Undefined:
    """Value of anything that could not be resolved. Falsy, prints as ``undefined``."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __str__(self):
        return "undefined"

    def __repr__(self):
        return "UNDEFINED"

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()

IDENT = r"[A-Za-z_$][A-Za-z0-9_$]*"
PATH = rf"(?:\.{IDENT}|\[[0-9]+\])"

STRING_PATTERN = re.compile(r"^(?:'[^']*'|\"[^\"]*\")$")
NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
REFERENCE_PATTERN = re.compile(rf"^(?P<key>{IDENT})(?P<path>{PATH}*)$")
GLOBAL_PATTERN = re.compile(rf"^#(?P<key>{IDENT})(?P<path>{PATH}*)$")
TOOL_HEAD_PATTERN = re.compile(rf"^@(?P<key>{IDENT})$")
TOOL_PATTERN = re.compile(rf"^@{IDENT}\s*\(")
PATH_PATTERN = re.compile(rf"^{PATH}+$")

KEYWORDS = {"true": True, "false": False, "null": None, "undefined": UNDEFINED}

# Mini-grammar for tool calls. Arguments are any value kind, tools included.
_value_grammar = r"""
?start: value

?value: STRING       -> string
      | NUMBER       -> number
      | WORD         -> word
      | GLOBAL       -> global_ref
      | tool

tool: TOOL "(" [value ("," value)*] ")" TOOL_PATH?

TOOL: /@[A-Za-z_$][A-Za-z0-9_$]*/
GLOBAL: /#[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*|\[[0-9]+\])*/
WORD: /[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*|\[[0-9]+\])*/
TOOL_PATH: /(\.[A-Za-z_$][A-Za-z0-9_$]*|\[[0-9]+\])+/
STRING: /'[^']*'|"[^"]*"/
NUMBER: /[+-]?(\d+(\.\d*)?|\.\d+)/

%import common.WS
%ignore WS
"""

_cached_value_parser = None


def _get_value_parser() -> Lark:
    """Get cached parser for tool expressions."""
    global _cached_value_parser
    if _cached_value_parser is None:
        _cached_value_parser = Lark(_value_grammar, parser="lalr")
    return _cached_value_parser


class Describer(BaseModel):
    """Common fields of every value descriptor."""

    model_config = ConfigDict(frozen=True, strict=True)

    name: str
    line: int


def _cast_scalar(token: str) -> Any:
    if STRING_PATTERN.match(token):
        return token[1:-1]
    if NUMBER_PATTERN.match(token):
        if re.match(r"^[+-]?\d+$", token):
            return int(token)
        return float(token)
    return KEYWORDS[token]


class Scalar(Describer):
    """A literal fixed at parse time."""

    kind: Literal["scalar"] = "scalar"
    value: Any = None

    @staticmethod
    def check(token: str) -> bool:
        return isinstance(token, str) and bool(
            STRING_PATTERN.match(token) or NUMBER_PATTERN.match(token) or token in KEYWORDS
        )

    @classmethod
    def parse(cls, token: str, name: str, line: int) -> "Scalar":
        check_str(token, name)
        check_line(line)
        if not cls.check(token):
            raise FlexdownSyntaxError("Invalid scalar value", name, line)
        return cls(value=_cast_scalar(token), name=name, line=line)


class Reference(Describer):
    """A local name with an optional dotted / indexed path."""

    kind: Literal["reference"] = "reference"
    key: str
    path: Optional[str] = None

    @staticmethod
    def check(token: str) -> bool:
        return isinstance(token, str) and bool(REFERENCE_PATTERN.match(token))

    @classmethod
    def parse(cls, token: str, name: str, line: int) -> "Reference":
        check_str(token, name)
        check_line(line)
        match = REFERENCE_PATTERN.match(token)
        if not match:
            raise FlexdownSyntaxError("Invalid reference", name, line)
        return cls(key=match.group("key"), path=match.group("path") or None, name=name, line=line)


class Global(Describer):
    """A ``#`` prefixed name resolved against the configured globals."""

    kind: Literal["global"] = "global"
    key: str
    path: Optional[str] = None

    @staticmethod
    def check(token: str) -> bool:
        return isinstance(token, str) and bool(GLOBAL_PATTERN.match(token))

    @classmethod
    def parse(cls, token: str, name: str, line: int) -> "Global":
        check_str(token, name)
        check_line(line)
        match = GLOBAL_PATTERN.match(token)
        if not match:
            raise FlexdownSyntaxError("Invalid global reference", name, line)
        return cls(key=match.group("key"), path=match.group("path") or None, name=name, line=line)


class Tool(Describer):
    """A call to a registered tool, e.g. ``@join(items, ', ')[0]``."""

    kind: Literal["tool"] = "tool"
    key: str
    args: Tuple["Value", ...] = ()
    path: Optional[str] = None

    @staticmethod
    def check(pattern: str) -> bool:
        """True when ``pattern`` is a complete, well-formed tool call."""
        if not isinstance(pattern, str) or not TOOL_PATTERN.match(pattern.strip()):
            return False
        try:
            _get_value_parser().parse(pattern.strip())
        except LarkError:
            return False
        return True

    @staticmethod
    def check_head(token: str) -> bool:
        """True when ``token`` is a bare tool name such as ``@upper``."""
        return isinstance(token, str) and bool(TOOL_HEAD_PATTERN.match(token))

    @classmethod
    def parse(cls, pattern: str, name: str, line: int) -> "Tool":
        check_str(pattern, name)
        check_line(line)
        pattern = pattern.strip()

        if not TOOL_PATTERN.match(pattern):
            raise FlexdownSyntaxError("Invalid tool reference", name, line)

        try:
            tree = _get_value_parser().parse(pattern)
        except LarkError as e:
            logger.debug(f"Tool grammar rejected {pattern!r}: {e}")
            raise FlexdownSyntaxError("Invalid tool arguments provided", name, line) from e

        tool = ValueTransformer(name, line).transform(tree)
        if not isinstance(tool, Tool):
            raise FlexdownSyntaxError("Invalid tool reference", name, line)
        return tool


Value = Union[Scalar, Reference, Global, Tool]
Tool.model_rebuild()


class ValueTransformer(Transformer):
    """Turns a tool-expression parse tree into descriptors."""

    def __init__(self, name: str, line: int):
        super().__init__()
        self.name = name
        self.line = line

    def string(self, items):
        return Scalar(value=str(items[0])[1:-1], name=self.name, line=self.line)

    def number(self, items):
        return Scalar(value=_cast_scalar(str(items[0])), name=self.name, line=self.line)

    def word(self, items):
        token = str(items[0])
        if token in KEYWORDS:
            return Scalar(value=KEYWORDS[token], name=self.name, line=self.line)
        return Reference.parse(token, self.name, self.line)

    def global_ref(self, items):
        return Global.parse(str(items[0]), self.name, self.line)

    def tool(self, items):
        head = items[0]
        path = None
        args = []
        for item in items[1:]:
            if item is None:
                continue
            if isinstance(item, Token) and item.type == "TOOL_PATH":
                path = str(item)
            else:
                args.append(item)
        return Tool(key=str(head)[1:], args=tuple(args), path=path, name=self.name, line=self.line)


def parse_value(text: str, name: str, line: int) -> Value:
    """Parse any of the four value kinds.

    Raises:
        FlexdownSyntaxError: If ``text`` matches none of the grammars
    """
    check_str(text, name)
    check_line(line)
    text = text.strip()

    if Scalar.check(text):
        return Scalar.parse(text, name, line)
    if Global.check(text):
        return Global.parse(text, name, line)
    if Reference.check(text):
        return Reference.parse(text, name, line)
    if TOOL_PATTERN.match(text):
        return Tool.parse(text, name, line)

    raise FlexdownSyntaxError("Invalid value", name, line)


def to_text(value: Any) -> str:
    """String form of a value as it appears in rendered output.

    ``None`` prints as ``null``, booleans as ``true``/``false``, integral
    floats without a trailing ``.0`` and sequences comma-joined. Mappings
    print as JSON (``{"name": "Ann"}``), with values JSON cannot hold
    written in their text form. Any other object prints as ``str(value)``.
    """
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join("" if item is None or item is UNDEFINED else to_text(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(dict(value), ensure_ascii=False, default=to_text)
    return str(value)
