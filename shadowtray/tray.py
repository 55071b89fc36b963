# -*- coding: utf-8 -*-
"""
System tray integration via pystray.

Menu labels and the Start/Stop entry are callables, so the menu reflects the
current language and engine state every time it is opened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import pystray
from pystray import Menu as TrayMenu
from pystray import MenuItem as TrayMenuItem

logger = logging.getLogger(__name__)


@dataclass
class TrayActions:
    open_panel: Callable[[], None]
    toggle_engine: Callable[[], None]
    switch_language: Callable[[], None]
    exit_app: Callable[[], None]


class TrayController:
    def __init__(
        self,
        image,
        tr: Callable[[str], str],
        is_running: Callable[[], bool],
        actions: TrayActions,
    ):
        self.tr = tr
        self.is_running = is_running
        self.actions = actions
        self.icon = pystray.Icon(self.tr("app_name"), image, self.tr("tooltip"), self._build_menu())

    def _build_menu(self) -> TrayMenu:
        def label(key: str):
            return lambda item: self.tr(key)

        def toggle_label(item) -> str:
            return self.tr("menu_stop" if self.is_running() else "menu_start")

        return TrayMenu(
            TrayMenuItem(label("menu_open_panel"), lambda _icon, _item: self.actions.open_panel(), default=True),
            TrayMenuItem(toggle_label, lambda _icon, _item: self.actions.toggle_engine()),
            TrayMenu.SEPARATOR,
            TrayMenuItem(label("menu_switch_lang"), lambda _icon, _item: self.actions.switch_language()),
            TrayMenuItem(label("menu_exit"), lambda _icon, _item: self.actions.exit_app()),
        )

    def update(self, image=None) -> None:
        if image is not None:
            self.icon.icon = image
        self.icon.title = self.tr("tooltip")
        self.icon.menu = self._build_menu()
        try:
            self.icon.update_menu()
        except NotImplementedError:
            # Some backends rebuild the menu on open and don't support this.
            logger.debug("tray backend has no update_menu")

    def run_detached(self) -> None:
        self.icon.run_detached()

    def stop(self) -> None:
        self.icon.stop()
