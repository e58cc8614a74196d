"""Flexdown -- component templates with conditionals, loops and composition."""

import logging

# Version - reads from package metadata (set in pyproject.toml)
try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("flexdown")
except PackageNotFoundError:
    __version__ = "0.0.0+dev"

logger = logging.getLogger(__name__)

from .builder import ComponentParser, strip_comments
from .cache import clear_cache, template_cache
from .conditions import Binary, Condition, Operand, Unary
from .config import FlexdownConfig, get_config, set_config
from .errors import (
    FlexdownComponentError,
    FlexdownError,
    FlexdownSyntaxError,
    FlexdownUsageError,
)
from .evaluator import Component, render, render_async
from .tools import Tools, load_tool_file, load_tools
from .values import UNDEFINED, Global, Reference, Scalar, Tool, parse_value, to_text

__all__ = [
    "Binary",
    "Component",
    "ComponentParser",
    "Condition",
    "FlexdownComponentError",
    "FlexdownConfig",
    "FlexdownError",
    "FlexdownSyntaxError",
    "FlexdownUsageError",
    "Global",
    "Operand",
    "Reference",
    "Scalar",
    "Tool",
    "Tools",
    "UNDEFINED",
    "Unary",
    "__version__",
    "clear_cache",
    "get_config",
    "load_tool_file",
    "load_tools",
    "parse_value",
    "render",
    "render_async",
    "set_config",
    "strip_comments",
    "template_cache",
    "to_text",
]
