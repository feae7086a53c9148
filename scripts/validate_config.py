#!/usr/bin/env python3
"""Check every configured tax year (brackets and statutory rules) from a checkout.

Usage: ``python scripts/validate_config.py [YEAR ...]``
"""

from __future__ import annotations

import sys
from pathlib import Path

# Running from a Git checkout does not require an install; expose ``src`` the
# same way ``tests/conftest.py`` does.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from pesotax.backend.config.validator import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
