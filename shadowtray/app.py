# -*- coding: utf-8 -*-
"""
Core application orchestration.

- Loads shadowtray.json and configures logging
- Builds the ShadowService (rules, servers, generator, lifecycle controller)
- Runs a tray icon (pystray) and the control panel (tkinter)
- Uses plyer for notifications

Engine start/stop can block (stop waits up to the shutdown timeout), so the
panel runs them on a worker thread and marshals the result back through the
GUI queue.
"""

from __future__ import annotations

import logging
import queue
import threading
from pathlib import Path
from typing import Callable, Optional

import tkinter as tk

from .config import DEFAULT_SETTINGS_FILENAME, ConfigManager
from .errors import ShadowError
from .i18n import LANG_EN, LANG_ZH, detect_language, t as i18n_t
from .icon import make_shadow_icon
from .log import setup_logging
from .notify import notify
from .service import ShadowService
from .tray import TrayActions, TrayController
from .ui import ControlPanel, ControlPanelCallbacks, show_error, show_info

logger = logging.getLogger(__name__)


class ShadowTrayApp:
    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        settings_path = base_dir / DEFAULT_SETTINGS_FILENAME
        self.cfg_mgr = ConfigManager(settings_path)
        self.cfg = self.cfg_mgr.load()
        if not settings_path.exists():
            self.cfg.language = detect_language()

        setup_logging(
            level=self.cfg.log_level,
            log_file=(base_dir / self.cfg.log_file) if self.cfg.log_file else None,
        )

        self.service = ShadowService(base_dir, self.cfg, report_error=self.report_error)

        self.root: Optional[tk.Tk] = None
        self.panel: Optional[ControlPanel] = None
        self.tray: Optional[TrayController] = None
        self.gui_queue: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._busy = threading.Lock()

    # --------- i18n / reporting ---------
    def tr(self, key: str, **kwargs) -> str:
        return i18n_t(self.cfg.language, key, **kwargs)

    def notify_i18n(self, msg_key: str, **kwargs) -> None:
        if not self.cfg.notifications_enabled:
            return
        title = self.tr("app_name")
        notify(title=title, message=self.tr(msg_key, **kwargs), timeout=5, app_name=title)

    def report_error(self, err: BaseException) -> None:
        """Error sink for every thread; the dialog is shown on the tkinter thread."""
        logger.error("%s", err)
        self.notify_i18n("ntf_error", msg=str(err))
        self.enqueue_ui(lambda: self._show_error(err))

    def _show_error(self, err: BaseException) -> None:
        if self.root is not None:
            show_error(self.root, self.tr("error_title"), str(err))

    # --------- queue / tkinter thread bridge ---------
    def enqueue_ui(self, func: Callable[[], None]) -> None:
        self.gui_queue.put(func)

    def _process_gui_queue(self) -> None:
        if self.root is None:
            return
        try:
            while True:
                task = self.gui_queue.get_nowait()
                try:
                    task()
                except Exception:
                    logger.exception("UI task failed")
        except queue.Empty:
            pass
        self.root.after(120, self._process_gui_queue)

    def _render_state(self) -> None:
        running = self.service.is_running
        if self.panel is not None:
            self.panel.render_state()
        if self.tray is not None:
            self.tray.update(make_shadow_icon(64, running=running))

    # --------- actions ---------
    def action_toggle_engine(self) -> None:
        # Called on tkinter thread.
        if not self._busy.acquire(blocking=False):
            return
        if self.panel is not None:
            self.panel.set_busy()

        def work() -> None:
            try:
                state = self.service.toggle()
                self.notify_i18n("ntf_started" if self.service.is_running else "ntf_stopped")
                logger.debug("engine state now %s", state.value)
            except ShadowError as e:
                self.report_error(e)
            finally:
                self._busy.release()
                self.enqueue_ui(self._render_state)

        threading.Thread(target=work, name="ShadowToggle", daemon=True).start()

    def action_generate(self, server: str, mode: str) -> None:
        if self.root is None:
            return
        try:
            self.service.generate(server, mode)
        except ShadowError as e:
            self.report_error(e)
            return
        show_info(self.root, self.tr("info_title"), self.tr("msg_generated", server=server, mode=mode))

    def action_reload(self) -> None:
        try:
            self.service.reload()
        except ShadowError as e:
            self.report_error(e)
        if self.panel is not None:
            self.panel.refresh()

    def action_about(self) -> None:
        if self.root is not None:
            show_info(self.root, self.tr("about_title"), self.tr("about_info"))

    def action_switch_language(self) -> None:
        self.cfg.language = LANG_EN if self.cfg.language == LANG_ZH else LANG_ZH
        self.cfg_mgr.save(self.cfg)
        if self.panel is not None:
            self.panel.apply_texts()
        if self.tray is not None:
            self.tray.update()

    def action_hide_to_tray(self) -> None:
        if self.root is not None:
            self.root.withdraw()

    def action_show_panel(self) -> None:
        if self.root is None:
            return
        self.root.deiconify()
        self.root.lift()
        self.root.focus_force()
        if self.panel is not None:
            self.panel.render_state()

    def action_exit(self) -> None:
        # Called on tkinter thread; may block for the shutdown timeout.
        self.service.shutdown()
        self.cfg_mgr.save(self.cfg)
        if self.tray is not None:
            self.tray.stop()
        if self.root is not None:
            self.root.quit()

    # --------- lifecycle ---------
    def run(self) -> None:
        self.root = tk.Tk()
        self.root.after(120, self._process_gui_queue)
        # Close button hides to tray
        self.root.protocol("WM_DELETE_WINDOW", self.action_hide_to_tray)

        try:
            self.service.reload()
        except ShadowError as e:
            self.report_error(e)

        callbacks = ControlPanelCallbacks(
            tr=lambda key, **kwargs: self.tr(key, **kwargs),
            get_servers=self.service.servers,
            get_modes=self.service.modes,
            is_running=lambda: self.service.is_running,
            toggle_engine=self.action_toggle_engine,
            generate=self.action_generate,
            reload=self.action_reload,
            about=self.action_about,
            switch_language=self.action_switch_language,
        )
        self.panel = ControlPanel(self.root, cb=callbacks)

        actions = TrayActions(
            open_panel=lambda: self.enqueue_ui(self.action_show_panel),
            toggle_engine=lambda: self.enqueue_ui(self.action_toggle_engine),
            switch_language=lambda: self.enqueue_ui(self.action_switch_language),
            exit_app=lambda: self.enqueue_ui(self.action_exit),
        )
        self.tray = TrayController(
            image=make_shadow_icon(64, running=False),
            tr=lambda key: self.tr(key),
            is_running=lambda: self.service.is_running,
            actions=actions,
        )
        self.tray.run_detached()

        self.root.mainloop()

        # Window closed without going through Exit
        self.service.shutdown()
        self.cfg_mgr.save(self.cfg)
