"""Flexdown tools.

Tools are plain Python callables that templates call with ``@name(args)``.
Arguments arrive already evaluated; the return value (awaited first when it
is awaitable) is printed, compared or iterated like any other value.

Built-in tools:
    type checks  - arr, obj, str, num, int, flo
    text         - upper, lower, trim, header, upperat, lowerat, snap, html, join
    numbers      - round, floor, pad, percent, comma, shorten, size, float, avg
    dates (UTC)  - year, month, day, hour, minute, second, date, time,
                   chrono, diff, fresh

Example usage in templates:
    $print(@upper(user.name))
    $foreach(post, @latest_posts(5)) ... $endforeach

Registering your own:
    from flexdown.tools import Tools

    @Tools.register("greet")
    def greet(name):
        return f"Hello, {name}!"

Tool files (for the CLI --tools option, or load_tools) need no registration:
every public top-level function becomes a tool of the same name.
"""

import importlib.util
import inspect
import logging
import sys
import uuid
from pathlib import Path
from typing import Callable, Dict, Iterable

logger = logging.getLogger(__name__)


class Tools:
    """Registry of callables available to templates as ``@name(...)``.

    Example:
        @Tools.register('initials')
        def initials(name):
            return "".join(part[0] for part in name.split())

        # Template usage:
        # $print(@initials(user.name))
    """

    _registry: dict[str, Callable] = {}

    @classmethod
    def register(cls, tool_name: str):
        """Decorator to register a function as a template tool.

        Args:
            tool_name: Name used in templates, e.g. 'initials' for @initials(...)

        Returns:
            Decorator function
        """

        def decorator(func: Callable) -> Callable:
            cls._registry[tool_name] = func
            return func

        return decorator

    @classmethod
    def get(cls, tool_name: str) -> Callable:
        if tool_name not in cls._registry:
            raise KeyError(f"Tool '{tool_name}' not registered")
        return cls._registry[tool_name]

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered tool names."""
        return list(cls._registry.keys())

    @classmethod
    def is_registered(cls, tool_name: str) -> bool:
        return tool_name in cls._registry

    @classmethod
    def as_dict(cls) -> dict[str, Callable]:
        """Snapshot of the registry, for merging into a configuration."""
        return dict(cls._registry)


def _is_tool(name: str, value, module_name: str) -> bool:
    return inspect.isfunction(value) and value.__module__ == module_name and not name.startswith("_")


def load_tool_file(path: Path) -> Dict[str, Callable]:
    """Import a tool file and collect its public functions.

    Every function defined at the top level of the file becomes a tool named
    after the function, unless its name starts with ``_``. Functions imported
    from elsewhere are ignored. The global ``Tools`` registry is left alone;
    hand the result to ``FlexdownConfig(tools=...)``.

    Raises:
        FileNotFoundError: If ``path`` is not a file
        ValueError: If ``path`` is not a ``.py`` file
    """
    if not path.is_file():
        raise FileNotFoundError(f"Tool file not found: {path}")
    if path.suffix != ".py":
        raise ValueError(f"Tool files must be Python modules: {path}")

    # unique per load
    module_name = f"flexdown_user_tools_{path.stem}_{uuid.uuid4().hex[:8]}"
    module_spec = importlib.util.spec_from_file_location(module_name, path)
    module = importlib.util.module_from_spec(module_spec)
    # dataclasses and pickle look the module up by name
    sys.modules[module_name] = module
    module_spec.loader.exec_module(module)

    tools = {name: value for name, value in vars(module).items() if _is_tool(name, value, module_name)}
    logger.debug(f"Collected tools from {path}: {sorted(tools)}")
    return tools


def load_tools(paths: Iterable[Path]) -> Dict[str, Callable]:
    """Collect tools from files and directories.

    Directories contribute their ``*.py`` files in name order, skipping
    ``_``-prefixed ones. When two files define the same name the later one
    wins.

    Example:
        config = FlexdownConfig(tools=load_tools([Path("tools")]))
    """
    tools: Dict[str, Callable] = {}

    for path in paths:
        if path.is_dir():
            files = sorted(file for file in path.glob("*.py") if not file.name.startswith("_"))
        else:
            files = [path]

        for file in files:
            tools.update(load_tool_file(file))

    return tools


__all__ = ["Tools", "load_tool_file", "load_tools"]


# =============================================================================
# Import built-in tools to register them
# =============================================================================

from . import checks, dates, numeric, text  # noqa: E402,F401
