# -*- coding: utf-8 -*-
"""Severity palette: map a log level to an attachment color."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from slack_log_handler.models import SeverityColorRule

# Slack reserved color tokens
WARNING_COLOR = "warning"
DANGER_COLOR = "danger"

_DEFAULT_LEVEL_COLORS: dict[str, str] = {
    "warn": WARNING_COLOR,
    "error": DANGER_COLOR,
    "fatal": DANGER_COLOR,
}

# Common CSS/X11 color names (lowercase) -> #RRGGBB
NAMED_COLORS: dict[str, str] = {
    "aqua": "#00FFFF",
    "black": "#000000",
    "blue": "#0000FF",
    "brown": "#A52A2A",
    "chartreuse": "#7FFF00",
    "coral": "#FF7F50",
    "crimson": "#DC143C",
    "cyan": "#00FFFF",
    "darkblue": "#00008B",
    "darkgray": "#A9A9A9",
    "darkgreen": "#006400",
    "darkorange": "#FF8C00",
    "darkred": "#8B0000",
    "deepskyblue": "#00BFFF",
    "dodgerblue": "#1E90FF",
    "firebrick": "#B22222",
    "forestgreen": "#228B22",
    "fuchsia": "#FF00FF",
    "gold": "#FFD700",
    "goldenrod": "#DAA520",
    "gray": "#808080",
    "green": "#008000",
    "grey": "#808080",
    "hotpink": "#FF69B4",
    "indigo": "#4B0082",
    "khaki": "#F0E68C",
    "lightblue": "#ADD8E6",
    "lightgray": "#D3D3D3",
    "lightgreen": "#90EE90",
    "lime": "#00FF00",
    "limegreen": "#32CD32",
    "magenta": "#FF00FF",
    "maroon": "#800000",
    "navy": "#000080",
    "olive": "#808000",
    "orange": "#FFA500",
    "orangered": "#FF4500",
    "orchid": "#DA70D6",
    "pink": "#FFC0CB",
    "purple": "#800080",
    "red": "#FF0000",
    "royalblue": "#4169E1",
    "salmon": "#FA8072",
    "seagreen": "#2E8B57",
    "silver": "#C0C0C0",
    "skyblue": "#87CEEB",
    "slategray": "#708090",
    "steelblue": "#4682B4",
    "teal": "#008080",
    "tomato": "#FF6347",
    "turquoise": "#40E0D0",
    "violet": "#EE82EE",
    "white": "#FFFFFF",
    "yellow": "#FFFF00",
    "yellowgreen": "#9ACD32",
}


def resolve_color(color: str) -> str:
    """Return #RRGGBB for a known color name; anything else passes through unchanged."""
    return NAMED_COLORS.get(color.strip().lower(), color)


class SeverityPalette:
    """Resolve log levels to colors: user rules first, then built-in defaults."""

    def __init__(self, rules: Iterable[SeverityColorRule] = ()) -> None:
        self._rules: tuple[SeverityColorRule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[SeverityColorRule, ...]:
        return self._rules

    def color_for(self, level: str) -> Optional[str]:
        """Return the color for ``level`` or None when no color applies."""
        for rule in self._rules:
            if rule.matches(level):
                return resolve_color(rule.color)
        return _DEFAULT_LEVEL_COLORS.get(level.lower())
