# -*- coding: utf-8 -*-
from __future__ import annotations

import sys
from pathlib import Path

if sys.platform != "win32":
    print("shadowtray is Windows-only.")
    sys.exit(1)

from shadowtray.app import ShadowTrayApp


def main() -> None:
    base_dir = Path(__file__).resolve().parent
    app = ShadowTrayApp(base_dir)
    app.run()


if __name__ == "__main__":
    main()
