"""Parsed node types for flexdown components.

Each top-level directive of a template becomes one node. The node carries the
placeholder that stands in for it in the component layout; block bodies hold
their own layout and nodes, parsed recursively.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict

from .conditions import ConditionNode
from .values import Global, Reference, Tool, Value


class Block(BaseModel):
    """One branch of an ``$if``: its body layout, nodes and condition."""

    model_config = ConfigDict(frozen=True)

    line: int
    body: str
    nodes: List["Node"] = []
    condition: Optional[ConditionNode] = None


class IfNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["if"] = "if"
    placeholder: str
    line: int
    if_block: Block
    elseif_blocks: List[Block] = []
    else_block: Optional[Block] = None


class ForEachNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["foreach"] = "foreach"
    placeholder: str
    line: int
    item: str
    index: Optional[str] = None
    collection: Union[Global, Reference, Tool]
    body: str
    nodes: List["Node"] = []


class Local(BaseModel):
    """A ``key=value`` argument passed to a rendered child component."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: Value


class ReplaceNode(BaseModel):
    """A ``$replace('key') ... $endreplace`` block inside ``$render``."""

    model_config = ConfigDict(frozen=True)

    key: str
    body: str
    nodes: List["Node"] = []


class RenderNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["render"] = "render"
    placeholder: str
    line: int
    path: str
    locals: List[Local] = []
    replacements: List[ReplaceNode] = []


class IncludeNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["include"] = "include"
    placeholder: str
    line: int
    path: str


class PrintNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["print"] = "print"
    placeholder: str
    line: int
    value: Value


class LogNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["log"] = "log"
    placeholder: str
    line: int
    value: Value


class PlaceNode(BaseModel):
    """Marks where a parent's replacement for ``key`` is spliced in."""

    model_config = ConfigDict(frozen=True)

    type: Literal["place"] = "place"
    placeholder: str
    line: int
    key: str


Node = Union[IfNode, ForEachNode, RenderNode, IncludeNode, PrintNode, LogNode, PlaceNode]

Block.model_rebuild()
IfNode.model_rebuild()
ForEachNode.model_rebuild()
ReplaceNode.model_rebuild()
RenderNode.model_rebuild()
