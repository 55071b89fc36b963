# -*- coding: utf-8 -*-
"""
tkinter control panel.

One small window, as the tray has always had:
- Server / Mode pickers
- Start/Stop toggle and Generate
- a status line showing whether the engine runs

All work is delegated to callbacks; the panel only reads widgets and
renders state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

import tkinter as tk
from tkinter import messagebox, ttk


def show_info(root: tk.Tk, title: str, message: str) -> None:
    messagebox.showinfo(title, message, parent=root)


def show_error(root: tk.Tk, title: str, message: str) -> None:
    messagebox.showerror(title, message, parent=root)


@dataclass
class ControlPanelCallbacks:
    # Translation function. Must accept (key, **kwargs).
    tr: Callable[..., str]
    get_servers: Callable[[], Sequence[str]]
    get_modes: Callable[[], Sequence[str]]
    is_running: Callable[[], bool]

    toggle_engine: Callable[[], None]
    generate: Callable[[str, str], None]
    reload: Callable[[], None]
    about: Callable[[], None]
    switch_language: Callable[[], None]


class ControlPanel:
    def __init__(self, root: tk.Tk, cb: ControlPanelCallbacks):
        self.root = root
        self.cb = cb

        self.server_var = tk.StringVar(value="")
        self.mode_var = tk.StringVar(value="")
        self.status_var = tk.StringVar(value="")

        self._build()
        self.apply_texts()
        self.refresh()

    def _build(self) -> None:
        self.root.geometry("450x190")
        self.root.resizable(False, False)

        outer = ttk.Frame(self.root, padding=10)
        outer.pack(fill=tk.BOTH, expand=True)

        self.box = ttk.LabelFrame(outer, text="", padding=(10, 6))
        self.box.pack(fill=tk.X)
        self.box.columnconfigure(1, weight=1)

        self.lbl_server = ttk.Label(self.box, text="")
        self.lbl_server.grid(row=0, column=0, sticky="w", pady=2)
        self.cmb_server = ttk.Combobox(self.box, textvariable=self.server_var)
        self.cmb_server.grid(row=0, column=1, sticky="ew", padx=(8, 0), pady=2)

        self.lbl_mode = ttk.Label(self.box, text="")
        self.lbl_mode.grid(row=1, column=0, sticky="w", pady=2)
        self.cmb_mode = ttk.Combobox(self.box, textvariable=self.mode_var)
        self.cmb_mode.grid(row=1, column=1, sticky="ew", padx=(8, 0), pady=2)

        btns = ttk.Frame(outer)
        btns.pack(fill=tk.X, pady=(10, 4))

        self.btn_toggle = ttk.Button(btns, text="", command=self.cb.toggle_engine)
        self.btn_toggle.pack(side=tk.LEFT)

        self.btn_generate = ttk.Button(btns, text="", command=self._on_generate)
        self.btn_generate.pack(side=tk.LEFT, padx=(8, 0))

        self.btn_reload = ttk.Button(btns, text="", command=self.cb.reload)
        self.btn_reload.pack(side=tk.LEFT, padx=(8, 0))

        self.btn_about = ttk.Button(btns, text="", command=self.cb.about)
        self.btn_about.pack(side=tk.RIGHT)

        self.btn_switch_lang = ttk.Button(btns, text="", command=self.cb.switch_language)
        self.btn_switch_lang.pack(side=tk.RIGHT, padx=(0, 8))

        ttk.Separator(outer).pack(fill=tk.X, pady=(4, 2))
        self.lbl_status = ttk.Label(outer, textvariable=self.status_var)
        self.lbl_status.pack(anchor=tk.W)

    def apply_texts(self) -> None:
        tr = self.cb.tr
        self.root.title(tr("panel_title"))
        self.box.configure(text=tr("config_panel"))
        self.lbl_server.configure(text=tr("label_server"))
        self.lbl_mode.configure(text=tr("label_mode"))
        self.btn_generate.configure(text=tr("btn_generate"))
        self.btn_reload.configure(text=tr("btn_reload"))
        self.btn_about.configure(text=tr("btn_about"))
        self.btn_switch_lang.configure(text=tr("btn_switch_lang"))
        self.render_state()

    def render_state(self) -> None:
        tr = self.cb.tr
        running = self.cb.is_running()
        self.btn_toggle.configure(text=tr("btn_stop" if running else "btn_start"), state=tk.NORMAL)
        self.status_var.set(tr("status_on" if running else "status_off"))

    def set_busy(self) -> None:
        self.btn_toggle.configure(state=tk.DISABLED)
        self.status_var.set(self.cb.tr("status_busy"))

    def refresh(self) -> None:
        self.cmb_server.configure(values=list(self.cb.get_servers()))
        self.cmb_mode.configure(values=list(self.cb.get_modes()))
        self.render_state()

    def _on_generate(self) -> None:
        self.cb.generate(self.server_var.get(), self.mode_var.get())
