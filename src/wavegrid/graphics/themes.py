"""
Themes and theme loading utilities.

A theme is the background fill plus the stroke used for grid rows.
Themes are selected by name; an unknown name resolves to ``default``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
import logging

import yaml

from wavegrid.graphics.surface import RGBA, parse_color

logger = logging.getLogger(__name__)

DEFAULT_THEME = "default"


@dataclass(frozen=True)
class Theme:
    """Colors and stroke for one look.

    Attributes:
        name: Theme name
        background_color: Surface fill, CSS-style color
        line_color: Row stroke color, CSS-style color
        line_width: Stroke width; falls back to the engine config if None
        alpha: Extra opacity multiplier for the stroke
    """

    name: str = DEFAULT_THEME
    background_color: str = "#0a0a0a"
    line_color: str = "rgba(139, 76, 246, 0.3)"
    line_width: Optional[float] = None
    alpha: float = 1.0

    # Parsed once; the renderer reads these every frame
    background_rgba: RGBA = field(init=False, repr=False, compare=False)
    line_rgba: RGBA = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        r, g, b, a = parse_color(self.line_color)
        object.__setattr__(self, "background_rgba", parse_color(self.background_color))
        object.__setattr__(self, "line_rgba", (r, g, b, max(0.0, min(1.0, a * self.alpha))))

    @classmethod
    def from_yaml(cls, name: str, data: dict[str, Any]) -> "Theme":
        """Create theme from YAML data."""
        return cls(
            name=data.get("name", name),
            background_color=data.get("background_color", cls.background_color),
            line_color=data.get("line_color", cls.line_color),
            line_width=data.get("line_width"),
            alpha=float(data.get("alpha", 1.0)),
        )


BUILTIN_THEMES: dict[str, Theme] = {
    "default": Theme(
        name="default",
        background_color="#0a0a0a",
        line_color="rgba(139, 76, 246, 0.3)",
    ),
    "classicfm": Theme(
        name="classicfm",
        background_color="#1a0000",
        line_color="rgba(255, 215, 0, 0.4)",
        line_width=0.7,
    ),
    "reprezent": Theme(
        name="reprezent",
        background_color="#0a0a0a",
        line_color="rgba(255, 255, 255, 0.25)",
        line_width=0.9,
    ),
    "no-selection": Theme(
        name="no-selection",
        background_color="#0f3460",
        line_color="#667eea",
        line_width=0.8,
        alpha=0.6,
    ),
}


class ThemeRegistry:
    """Name -> Theme lookup with a guaranteed default."""

    def __init__(self, themes: Optional[dict[str, Theme]] = None):
        self._themes: dict[str, Theme] = dict(BUILTIN_THEMES)
        if themes:
            self._themes.update(themes)

    def register(self, theme: Theme) -> None:
        """Add or replace a theme."""
        if theme.name == DEFAULT_THEME:
            logger.info("Replacing default theme")
        self._themes[theme.name] = theme

    def resolve(self, name: Optional[str]) -> Theme:
        """Get a theme by name, falling back to the default theme."""
        theme = self._themes.get(name) if name else None
        if theme is None:
            logger.debug(f"Unknown theme '{name}', using {DEFAULT_THEME}")
            theme = self._themes[DEFAULT_THEME]
        return theme

    def names(self) -> list[str]:
        return list(self._themes.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._themes

    def load_file(self, path: Path) -> int:
        """Load themes from a YAML file.

        The file maps theme names to their fields::

            midnight:
              background_color: "#000010"
              line_color: "rgba(80, 120, 255, 0.4)"
              line_width: 1.2

        Entries that fail to parse are skipped with a warning.

        Returns:
            Number of themes loaded
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            logger.warning(f"Theme file {path} is not a mapping, ignoring")
            return 0

        loaded = 0
        for name, entry in data.items():
            try:
                self.register(Theme.from_yaml(str(name), entry or {}))
                loaded += 1
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping theme '{name}' from {path}: {e}")

        logger.info(f"Loaded {loaded} themes from {path}")
        return loaded
