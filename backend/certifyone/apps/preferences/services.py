from __future__ import annotations

import enum
import logging
from typing import Type, TypeVar

from ..storage.services import SlotStore
from .schemas import FontSize, Preferences, PreferencesUpdate, Theme

logger = logging.getLogger(__name__)

THEME_SLOT = "theme"
FONT_SIZE_SLOT = "fontSize"

E = TypeVar("E", bound=enum.Enum)


class PreferencesStore:
    """UI preferences kept as plain strings in their own slots."""

    def __init__(self, slots: SlotStore) -> None:
        self._slots = slots

    def _read(self, slot: str, enum_cls: Type[E], default: E) -> E:
        raw = self._slots.get(slot)
        if raw is None:
            return default
        try:
            return enum_cls(raw)
        except ValueError:
            logger.warning("Ignoring unknown preference value", extra={"slot": slot, "value": raw})
            return default

    def load(self) -> Preferences:
        return Preferences(
            theme=self._read(THEME_SLOT, Theme, Theme.LIGHT),
            font_size=self._read(FONT_SIZE_SLOT, FontSize, FontSize.MEDIUM),
        )

    def set_theme(self, theme: Theme) -> Preferences:
        self._slots.set(THEME_SLOT, Theme(theme).value)
        return self.load()

    def set_font_size(self, size: FontSize) -> Preferences:
        self._slots.set(FONT_SIZE_SLOT, FontSize(size).value)
        return self.load()

    def toggle_theme(self) -> Preferences:
        current = self.load().theme
        return self.set_theme(Theme.DARK if current == Theme.LIGHT else Theme.LIGHT)

    def apply(self, update: PreferencesUpdate) -> Preferences:
        if update.theme is not None:
            self.set_theme(update.theme)
        if update.font_size is not None:
            self.set_font_size(update.font_size)
        return self.load()
