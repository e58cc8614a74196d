"""Process-wide cache of component sources and their parsed form.

An entry starts life either as ``Unparsed`` (raw text, written when a
component is included) or ``Parsed`` (text plus layout and nodes, written
when a component is rendered). Rendering a component whose entry is still
``Unparsed`` upgrades it in place.

Entries are replaced wholesale, never mutated, so a concurrent reader only
ever sees a complete entry.
"""

import logging
from typing import Callable, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .nodes import Node

logger = logging.getLogger(__name__)


class Unparsed(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["unparsed"] = "unparsed"
    template: str


class Parsed(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal["parsed"] = "parsed"
    template: str
    layout: str
    nodes: List[Node] = []


CacheEntry = Union[Unparsed, Parsed]


class TemplateCache:
    """Mapping of absolute component path to cache entry."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, path: str) -> Optional[CacheEntry]:
        entry = self._entries.get(path)
        logger.debug(f"Template cache {'hit' if entry else 'miss'} for {path}")
        return entry

    def set(self, path: str, entry: CacheEntry) -> None:
        self._entries[path] = entry

    def remember_template(self, path: str, template: str) -> None:
        """Store raw text unless a richer entry already exists."""
        if path not in self._entries:
            self._entries[path] = Unparsed(template=template)

    def upgrade(self, path: str, parser: Callable[[str], Tuple[str, List[Node]]]) -> Parsed:
        """Parse an entry's text if needed and return the ``Parsed`` entry.

        Args:
            path: Cache key of an existing entry
            parser: Called with the template text, returns (layout, nodes)
        """
        entry = self._entries[path]
        if isinstance(entry, Parsed):
            return entry

        layout, nodes = parser(entry.template)
        parsed = Parsed(template=entry.template, layout=layout, nodes=nodes)
        self._entries[path] = parsed
        logger.debug(f"Upgraded cached template {path}")
        return parsed

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)


template_cache = TemplateCache()


def clear_cache() -> None:
    """Empty the process-wide template cache."""
    template_cache.clear()
