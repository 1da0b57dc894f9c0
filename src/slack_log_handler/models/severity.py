# -*- coding: utf-8 -*-
"""Severity to color override rule."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SeverityColorRule:
    """Map one log level (matched case-insensitively) to an attachment color.

    The color is a named color (``"red"``), a hex code (``"#FF0000"``) or a
    Slack token (``"good"``, ``"warning"``, ``"danger"``).
    """

    level: str
    color: str

    def matches(self, level: str) -> bool:
        return self.level.casefold() == level.casefold()
