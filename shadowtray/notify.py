# -*- coding: utf-8 -*-
"""
Desktop notifications through plyer.

Best effort: a broken notification backend is logged, never raised.
"""

from __future__ import annotations

import logging
from typing import Optional

from plyer import notification

logger = logging.getLogger(__name__)


def notify(title: str, message: str, timeout: int = 5, app_name: Optional[str] = None) -> None:
    try:
        notification.notify(
            title=title,
            message=message,
            app_name=app_name or title,
            timeout=timeout,
        )
    except Exception as e:
        logger.debug("notification failed: %s", e)
