"""Application-level theme state passed explicitly to the render pass."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Tuple

LOGGER = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]
ThemeObserver = Callable[["Theme"], None]


class Theme(str, Enum):
    """Light or dark colour scheme."""

    LIGHT = "light"
    DARK = "dark"


@dataclass(frozen=True)
class ThemePalette:
    """Colours that depend on the active theme."""

    background: str
    edge: str
    label_backing: RGBA
    label_text: str


PALETTES: Dict[Theme, ThemePalette] = {
    Theme.LIGHT: ThemePalette(
        background="#f8fafc",
        edge="#cbd5e1",
        label_backing=(255, 255, 255, round(0.9 * 255)),
        label_text="#334155",
    ),
    Theme.DARK: ThemePalette(
        background="#0a0a0a",
        edge="#475569",
        label_backing=(15, 23, 42, round(0.95 * 255)),
        label_text="#e2e8f0",
    ),
}


def palette_for(theme: Theme) -> ThemePalette:
    return PALETTES[theme]


class ThemeContext:
    """Holds the current theme and notifies observers when it changes."""

    def __init__(self, theme: Theme = Theme.LIGHT) -> None:
        self._theme = theme
        self._observers: List[ThemeObserver] = []

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def set_theme(self, theme: Theme) -> None:
        """Switch to ``theme`` and notify observers if the value changed."""

        if theme is self._theme:
            return
        self._theme = theme
        LOGGER.info("Theme switched to %s", theme.value)
        for observer in list(self._observers):
            observer(theme)

    def subscribe(self, observer: ThemeObserver) -> Callable[[], None]:
        """Register ``observer`` and return a callable that removes it."""

        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe


__all__ = ["PALETTES", "Theme", "ThemeContext", "ThemePalette", "palette_for"]
