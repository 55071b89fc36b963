# -*- coding: utf-8 -*-
"""
UI strings in English and Simplified Chinese.

A single translation dict + a `t()` function, same as the panel has always used.
"""

from __future__ import annotations

import locale
from typing import Any, Dict

LANG_EN = "en"
LANG_ZH = "zh"

_ABOUT_EN = (
    "Shadow: A Transparent Proxy for Windows, Linux and macOS\n"
    "Developed by John Xiong (https://imgk.cc)\n"
    "https://github.com/imgk/shadow-windows"
)

_ABOUT_ZH = (
    "Shadow: 适用于 Windows, Linux and macOS 的透明代理\n"
    "由 John Xiong 开发 (https://imgk.cc)\n"
    "https://github.com/imgk/shadow-windows"
)

_TRANSLATIONS: Dict[str, Dict[str, str]] = {
    LANG_EN: {
        "app_name": "Shadow",
        "tooltip": "A Transparent Proxy for Windows, Linux and macOS",
        "panel_title": "Shadow: A Transparent Proxy for Windows, Linux and macOS",
        "config_panel": "Shadow Config",
        "label_server": "Server",
        "label_mode": "Mode",
        "btn_start": "Start",
        "btn_stop": "Stop",
        "btn_generate": "Generate",
        "btn_reload": "Reload",
        "btn_about": "About",
        "btn_switch_lang": "中文/English",
        "status_on": "Shadow is Running",
        "status_off": "Shadow is not Running",
        "status_busy": "Please wait...",
        "menu_open_panel": "Open",
        "menu_start": "Start",
        "menu_stop": "Stop",
        "menu_switch_lang": "Switch to Chinese / 切换到中文",
        "menu_exit": "Exit",
        "about_title": "About",
        "about_info": _ABOUT_EN,
        "info_title": "Info",
        "error_title": "Error",
        "msg_generated": "Config is generated for {server} / {mode}",
        "ntf_started": "Shadow is running",
        "ntf_stopped": "Shadow stopped",
        "ntf_error": "Error: {msg}",
    },
    LANG_ZH: {
        "app_name": "Shadow",
        "tooltip": "适用于 Windows, Linux and macOS 的透明代理",
        "panel_title": "Shadow: 适用于 Windows, Linux and macOS 的透明代理",
        "config_panel": "配置 Shadow",
        "label_server": "服务器",
        "label_mode": "模式",
        "btn_start": "开始",
        "btn_stop": "停止",
        "btn_generate": "生成配置",
        "btn_reload": "刷新",
        "btn_about": "关于",
        "btn_switch_lang": "中文/English",
        "status_on": "Shadow 正在运行",
        "status_off": "Shadow 已停止",
        "status_busy": "请稍候…",
        "menu_open_panel": "打开",
        "menu_start": "开始",
        "menu_stop": "停止",
        "menu_switch_lang": "切换到英文 / Switch to English",
        "menu_exit": "退出",
        "about_title": "关于",
        "about_info": _ABOUT_ZH,
        "info_title": "提示",
        "error_title": "错误",
        "msg_generated": "已为 {server} / {mode} 生成配置",
        "ntf_started": "Shadow 正在运行",
        "ntf_stopped": "Shadow 已停止",
        "ntf_error": "错误：{msg}",
    },
}


def detect_language() -> str:
    lang, _enc = locale.getlocale()
    if lang and lang.lower().startswith(("zh", "chinese")):
        return LANG_ZH
    return LANG_EN


def t(lang: str, key: str, **kwargs: Any) -> str:
    """
    Translate `key` under `lang`, formatting with kwargs.
    Falls back to English, then to key itself.
    """
    lang_map = _TRANSLATIONS.get(lang) or _TRANSLATIONS[LANG_EN]
    template = lang_map.get(key) or _TRANSLATIONS[LANG_EN].get(key) or key
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError, ValueError):
        return template
