"""Engine configuration.

Settings can be given explicitly or read from the environment (or a ``.env``
file) via python-decouple:

    FLEXDOWN_VIEWS  directory holding ``.fx`` components (default: views)
    FLEXDOWN_CACHE  cache parsed components across renders (default: true)
    FLEXDOWN_ENV    ``dev`` logs undefined/null path notices, ``pro`` does not
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Literal, Optional

from decouple import config as env_config
from pydantic import BaseModel, ConfigDict, Field

from .tools import Tools

logger = logging.getLogger(__name__)

COMPONENT_SUFFIX = ".fx"


class FlexdownConfig(BaseModel):
    """Where components live, whether to cache them, and what templates can reach."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    views: Path = Path("views")
    root: Path = Field(default_factory=Path.cwd)
    cache: bool = True
    env: Literal["dev", "pro"] = "dev"
    globals: Dict[str, Any] = Field(default_factory=dict)
    tools: Dict[str, Callable] = Field(default_factory=dict)

    @classmethod
    def from_env(cls, **overrides) -> "FlexdownConfig":
        """Build a configuration from FLEXDOWN_* settings, then apply overrides."""
        settings = {
            "views": env_config("FLEXDOWN_VIEWS", default="views", cast=Path),
            "cache": env_config("FLEXDOWN_CACHE", default=True, cast=bool),
            "env": env_config("FLEXDOWN_ENV", default="dev"),
        }
        settings.update(overrides)
        return cls(**settings)

    def views_dir(self) -> Path:
        if self.views.is_absolute():
            return self.views
        return self.root / self.views

    def resolve_component_path(self, dotted: str) -> Path:
        """Map ``'pages.home'`` to ``<views>/pages/home.fx``."""
        return self.views_dir().joinpath(*dotted.split(".")).with_suffix(COMPONENT_SUFFIX)

    def all_tools(self) -> Dict[str, Callable]:
        """Registered tools with this configuration's own tools taking precedence."""
        return {**Tools.as_dict(), **self.tools}


_current_config: Optional[FlexdownConfig] = None


def get_config() -> FlexdownConfig:
    """Return the process default configuration, reading the environment on first use."""
    global _current_config
    if _current_config is None:
        _current_config = FlexdownConfig.from_env()
        logger.debug(f"Loaded flexdown config from environment: views={_current_config.views}")
    return _current_config


def set_config(config: Optional[FlexdownConfig]) -> None:
    """Replace the process default configuration (``None`` re-reads the environment)."""
    global _current_config
    _current_config = config
