"""Locate ``routemap.toml``.

``ROUTEMAP_CONFIG`` names the file directly. Otherwise the nearest
``routemap.toml`` in the start directory or one of its ancestors wins, the
way git finds ``.git/``. ``--config`` bypasses discovery entirely.
"""

from __future__ import annotations

import os
from pathlib import Path

CONFIG_FILENAME = "routemap.toml"
CONFIG_ENV_VAR = "ROUTEMAP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file that applies to *start* (default: cwd), if any.

    A ``ROUTEMAP_CONFIG`` that points at a missing file disables discovery
    rather than falling back to a walk-up.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    origin = (start or Path.cwd()).resolve()
    return next(
        (
            directory / CONFIG_FILENAME
            for directory in (origin, *origin.parents)
            if (directory / CONFIG_FILENAME).is_file()
        ),
        None,
    )
