from __future__ import annotations

import os
from typing import Callable, List, Optional

from db.database import LocalStorage
from utils.logger import get_logger

_logger = get_logger(__name__)

THEME_KEY = "theme_v1"

ThemeListener = Callable[[bool], None]


def terminal_prefers_dark() -> bool:
    """
    Best guess at the system preference from COLORFGBG ("fg;bg"), which many
    terminals export. Background colours 0-6 and 8 are dark.
    """
    colorfgbg = os.getenv("COLORFGBG", "")
    if not colorfgbg:
        return False
    bg = colorfgbg.split(";")[-1]
    return bg in {"0", "1", "2", "3", "4", "5", "6", "8"}


class ThemeStore:
    """
    Dark/light preference shared by every screen.

    Construct once, call load(), then subscribe. The initial value is the
    stored preference, else the system preference, else light. Explicit
    choices are persisted; system changes are followed only while there is
    no explicit choice.
    """

    def __init__(
        self,
        storage: LocalStorage,
        system_prefers_dark: Callable[[], bool] = terminal_prefers_dark,
    ) -> None:
        self._storage = storage
        self._system_prefers_dark = system_prefers_dark
        self._listeners: List[ThemeListener] = []
        self._is_dark = False
        self._explicit = False

    @property
    def is_dark(self) -> bool:
        return self._is_dark

    @property
    def theme(self) -> str:
        return "dark" if self._is_dark else "light"

    async def _stored(self) -> Optional[str]:
        stored = await self._storage.read(THEME_KEY, "")
        return stored if stored in ("dark", "light") else None

    async def load(self) -> bool:
        stored = await self._stored()
        self._explicit = stored is not None
        if stored is not None:
            self._is_dark = stored == "dark"
        else:
            self._is_dark = bool(self._system_prefers_dark())
        _logger.debug(f"Theme resolved to {self.theme}.")
        return self._is_dark

    def subscribe(self, listener: ThemeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: ThemeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _apply(self, is_dark: bool) -> None:
        self._is_dark = is_dark
        for listener in list(self._listeners):
            listener(is_dark)

    async def set_dark(self, is_dark: bool) -> None:
        """Explicit user choice: persisted, then broadcast."""
        self._explicit = True
        await self._storage.write(THEME_KEY, "dark" if is_dark else "light")
        self._apply(is_dark)

    async def toggle(self) -> bool:
        await self.set_dark(not self._is_dark)
        return self._is_dark

    async def system_preference_changed(self, prefers_dark: bool) -> bool:
        """Follow the system unless the user picked a theme. Returns whether it applied."""
        if self._explicit or await self._stored() is not None:
            return False
        self._apply(prefers_dark)
        return True

    async def clear_preference(self) -> None:
        """Forget the explicit choice and fall back to the system preference."""
        self._explicit = False
        await self._storage.remove(THEME_KEY)
        self._apply(bool(self._system_prefers_dark()))
