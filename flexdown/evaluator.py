"""Renders flexdown components.

A render call runs four steps: resolve the component file, parse it (or take
the cached parse), evaluate its nodes into the layout, and clean up the
result. Evaluation is strictly sequential: every node, every loop iteration
and every tool argument finishes before the next one starts, so tools with
side effects observe template order.
"""

import inspect
import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Dict, List, Optional, Tuple

import anyio

from .builder import ComponentParser
from .cache import Parsed, Unparsed, template_cache
from .conditions import Binary, ConditionNode, Operand, Unary
from .config import FlexdownConfig, get_config
from .errors import FlexdownComponentError, FlexdownUsageError
from .lookup import NOT_FOUND, ScopeStack, lookup, resolve_path
from .nodes import (
    ForEachNode,
    IfNode,
    IncludeNode,
    LogNode,
    Node,
    PlaceNode,
    PrintNode,
    RenderNode,
)
from .values import UNDEFINED, Global, Scalar, Tool, Value, to_text

logger = logging.getLogger(__name__)

# $log output goes here so applications can route it separately
template_logger = logging.getLogger("flexdown.templates")


def clean(text: str) -> str:
    """Trim every line, drop blank lines, rejoin with single newlines."""
    return "\n".join(line.strip() for line in text.split("\n") if line.strip())


def _js_type(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def _strict_equal(left: Any, right: Any) -> bool:
    return _js_type(left) == _js_type(right) and left == right


def _is_missing(value: Any) -> bool:
    return value is None or value is UNDEFINED


def _loose_equal(left: Any, right: Any) -> bool:
    if _is_missing(left) or _is_missing(right):
        return _is_missing(left) and _is_missing(right)
    return left == right


def compare(operator: str, left: Any, right: Any) -> bool:
    """Apply a comparison operator. Ordering between incomparable values is false."""
    if operator == "===":
        return _strict_equal(left, right)
    if operator == "!==":
        return not _strict_equal(left, right)
    if operator == "==":
        return _loose_equal(left, right)
    if operator == "!=":
        return not _loose_equal(left, right)

    if _is_missing(left) or _is_missing(right):
        return False

    try:
        if operator == "<":
            return left < right
        if operator == ">":
            return left > right
        if operator == "<=":
            return left <= right
        if operator == ">=":
            return left >= right
    except TypeError:
        return False

    raise FlexdownUsageError(f"Unknown operator '{operator}'")


class Component:
    """One render of one component file.

    Args:
        path: Dotted component name, e.g. ``'pages.home'`` for ``<views>/pages/home.fx``
        locals: Values visible to references in the template
        replacements: Text spliced in at ``$place('key')``
        config: Engine configuration (defaults to the process configuration)

    Raises:
        FlexdownUsageError: On wrong argument types, before any file is touched
    """

    def __init__(
        self,
        path: str,
        locals: Optional[Mapping] = None,
        replacements: Optional[Mapping] = None,
        config: Optional[FlexdownConfig] = None,
    ):
        if not isinstance(path, str) or not path.strip():
            raise FlexdownUsageError(f"Invalid component path: {path!r}")
        if locals is not None and not isinstance(locals, Mapping):
            raise FlexdownUsageError(f"Invalid locals: {locals!r}")
        if replacements is not None and not (
            isinstance(replacements, Mapping) and all(isinstance(v, str) for v in replacements.values())
        ):
            raise FlexdownUsageError(f"Invalid replacements: {replacements!r}")
        if config is not None and not isinstance(config, FlexdownConfig):
            raise FlexdownUsageError(f"Invalid config: {config!r}")

        self.path = path
        self.locals: Dict[str, Any] = dict(locals or {})
        self.replacements: Dict[str, str] = dict(replacements or {})
        self.config = config if config is not None else get_config()
        self.file = self.config.resolve_component_path(path).absolute()
        self.name = self.file.name

    # source

    def parse(self, template: str) -> Tuple[str, List[Node]]:
        parser = ComponentParser(self.name, template)
        return parser.layout, parser.nodes

    async def read(self, file) -> str:
        logger.debug(f"Reading component file {file}")
        return await anyio.Path(file).read_text(encoding="utf-8")

    async def load(self) -> Tuple[str, List[Node]]:
        key = str(self.file)

        if self.config.cache:
            entry = template_cache.get(key)
            if isinstance(entry, Parsed):
                return entry.layout, entry.nodes
            if isinstance(entry, Unparsed):
                parsed = template_cache.upgrade(key, self.parse)
                return parsed.layout, parsed.nodes

        try:
            template = await self.read(self.file)
        except FileNotFoundError as e:
            raise FlexdownComponentError(f"Undefined component '{self.file}'", path=key) from e

        layout, nodes = self.parse(template)

        if self.config.cache:
            template_cache.set(key, Parsed(template=template, layout=layout, nodes=nodes))

        return layout, nodes

    async def render(self) -> str:
        """Render the component to its final, cleaned text."""
        layout, nodes = await self.load()
        result = await self.eval_nodes(nodes, layout, ScopeStack())
        return clean(result)

    # values

    def notice(self, line: int):
        def report(segment: str, parent: Any) -> None:
            if self.config.env == "dev":
                logger.warning(
                    f"Heads up: '{segment}' was accessed, but its parent is {to_text(parent)} "
                    f"({self.file}:{line})"
                )

        return report

    async def eval_value(self, value: Value, scopes: ScopeStack) -> Any:
        if isinstance(value, Scalar):
            return value.value

        if isinstance(value, Global):
            found = lookup(self.config.globals, value.key)
            if found is NOT_FOUND:
                raise FlexdownComponentError(
                    f"Undefined global reference '{value.key}' in '{value.name}' at line number {value.line}",
                    path=str(self.file),
                    line=value.line,
                )
            return resolve_path(found.value, value.path, self.notice(value.line))

        if isinstance(value, Tool):
            return await self.call_tool(value, scopes)

        found = scopes.lookup(value.key)
        if found is NOT_FOUND:
            found = lookup(self.locals, value.key)
        if found is NOT_FOUND:
            return UNDEFINED
        return resolve_path(found.value, value.path, self.notice(value.line))

    async def call_tool(self, tool: Tool, scopes: ScopeStack) -> Any:
        args = []
        for arg in tool.args:
            args.append(await self.eval_value(arg, scopes))

        found = lookup(self.config.all_tools(), tool.key)
        if found is NOT_FOUND:
            raise FlexdownComponentError(
                f"Undefined tool reference '{tool.key}' in '{tool.name}' at line number {tool.line}",
                path=str(self.file),
                line=tool.line,
            )

        result = found.value(*args)
        if inspect.isawaitable(result):
            result = await result

        return resolve_path(result, tool.path, self.notice(tool.line))

    # conditions

    async def eval_condition(self, condition: ConditionNode, scopes: ScopeStack) -> Any:
        if isinstance(condition, Operand):
            return await self.eval_value(condition.value, scopes)

        if isinstance(condition, Unary):
            return not await self.eval_condition(condition.operand, scopes)

        return await self.eval_binary(condition, scopes)

    async def eval_binary(self, condition: Binary, scopes: ScopeStack) -> bool:
        # a parenthesized right operand is evaluated first, unless both are
        swapped = condition.right.parenthesized and not condition.left.parenthesized
        first, second = (condition.right, condition.left) if swapped else (condition.left, condition.right)

        first_value = await self.eval_condition(first, scopes)

        if condition.operator == "&&" and not first_value:
            return False
        if condition.operator == "||" and first_value:
            return True

        second_value = await self.eval_condition(second, scopes)

        if condition.operator in ("&&", "||"):
            return bool(second_value)

        left, right = (second_value, first_value) if swapped else (first_value, second_value)
        return compare(condition.operator, left, right)

    # nodes

    async def eval_nodes(self, nodes: List[Node], body: str, scopes: ScopeStack) -> str:
        for node in nodes:
            result = await self.eval_node(node, scopes)
            body = body.replace(node.placeholder, result, 1)
        return body

    async def eval_node(self, node: Node, scopes: ScopeStack) -> str:
        if isinstance(node, IfNode):
            return await self.eval_if(node, scopes)
        if isinstance(node, ForEachNode):
            return await self.eval_foreach(node, scopes)
        if isinstance(node, RenderNode):
            return await self.eval_render(node, scopes)
        if isinstance(node, IncludeNode):
            return await self.eval_include(node)
        if isinstance(node, PlaceNode):
            return self.eval_place(node)
        if isinstance(node, LogNode):
            value = await self.eval_value(node.value, scopes)
            template_logger.info(to_text(value))
            return ""
        if isinstance(node, PrintNode):
            return to_text(await self.eval_value(node.value, scopes))
        raise FlexdownUsageError(f"Unknown node type: {type(node).__name__}")

    async def eval_if(self, node: IfNode, scopes: ScopeStack) -> str:
        for block in [node.if_block, *node.elseif_blocks]:
            if await self.eval_condition(block.condition, scopes):
                return await self.eval_nodes(block.nodes, block.body, scopes)

        if node.else_block is not None:
            return await self.eval_nodes(node.else_block.nodes, node.else_block.body, scopes)

        return ""

    async def eval_foreach(self, node: ForEachNode, scopes: ScopeStack) -> str:
        collection = await self.eval_value(node.collection, scopes)

        if not isinstance(collection, (list, tuple)):
            raise FlexdownComponentError(
                f"Invalid collection type in '{self.file}:{node.line}'", path=str(self.file), line=node.line
            )

        scope: Dict[str, Any] = {}
        parts = []
        scopes.push(scope)
        try:
            for index, item in enumerate(collection):
                scope[node.item] = item
                if node.index:
                    scope[node.index] = index
                parts.append(await self.eval_nodes(node.nodes, node.body, scopes))
        finally:
            scopes.pop()

        return "".join(parts)

    async def eval_render(self, node: RenderNode, scopes: ScopeStack) -> str:
        locals = {}
        for local in node.locals:
            locals[local.key] = await self.eval_value(local.value, scopes)

        replacements = {}
        for replacement in node.replacements:
            replacements[replacement.key] = await self.eval_nodes(replacement.nodes, replacement.body, scopes)

        return await Component(node.path, locals, replacements, self.config).render()

    async def eval_include(self, node: IncludeNode) -> str:
        file = self.config.resolve_component_path(node.path).absolute()
        key = str(file)

        if self.config.cache:
            entry = template_cache.get(key)
            if entry is not None:
                return entry.template

        try:
            template = await self.read(file)
        except FileNotFoundError as e:
            raise FlexdownComponentError(
                f"Undefined component '{file.name}' included in '{self.file}:{node.line}'",
                path=key,
                line=node.line,
            ) from e

        if self.config.cache:
            template_cache.remember_template(key, template)

        return template

    def eval_place(self, node: PlaceNode) -> str:
        found = lookup(self.replacements, node.key)
        if found is NOT_FOUND:
            raise FlexdownComponentError(
                f"No replacement found for '{node.key}' in '{self.file}:{node.line}'",
                path=str(self.file),
                line=node.line,
            )
        return found.value


def render_async(
    path: str,
    locals: Optional[Mapping] = None,
    replacements: Optional[Mapping] = None,
    config: Optional[FlexdownConfig] = None,
) -> Awaitable[str]:
    """Render a component; await the result.

    Argument checking happens at call time, so a bad call raises
    FlexdownUsageError immediately rather than when awaited.

    Example:
        html = await render_async("pages.home", {"user": user})
    """
    return Component(path, locals, replacements, config).render()


def render(
    path: str,
    locals: Optional[Mapping] = None,
    replacements: Optional[Mapping] = None,
    config: Optional[FlexdownConfig] = None,
) -> str:
    """Synchronous wrapper for render_async."""
    component = Component(path, locals, replacements, config)
    return anyio.run(component.render)
