"""Resolve the PesoTax version for health and metadata endpoints."""

from __future__ import annotations

import re
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "pesotax"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"

_PROJECT_TABLE = re.compile(r"^\[project\]\s*$(?P<body>.*?)(?=^\[|\Z)", re.MULTILINE | re.DOTALL)
_VERSION_LINE = re.compile(r"^version\s*=\s*[\"'](?P<version>[^\"']+)[\"']", re.MULTILINE)


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version, or the one in ``pyproject.toml``.

    Source checkouts used without an install (tests, the validation script)
    have no distribution metadata, so the project table is read directly.
    """

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return _read_version_from_pyproject(PYPROJECT_PATH)


def _read_version_from_pyproject(path: Path) -> str:
    if not path.exists():  # pragma: no cover - repository invariant
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    table = _PROJECT_TABLE.search(path.read_text(encoding="utf-8"))
    match = _VERSION_LINE.search(table.group("body")) if table else None
    if match is None:
        raise RuntimeError("Unable to determine project version from pyproject.toml")
    return match.group("version")


__all__ = ["get_project_version"]
