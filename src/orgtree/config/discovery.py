"""Locate and read ``orgtree.toml``.

Lookup order: the ``ORGTREE_CONFIG`` environment variable, then the
start directory and each of its parents (the way git finds ``.git``).
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

from orgtree.config.models import OrgtreeConfig

CONFIG_FILENAME = "orgtree.toml"
CONFIG_ENV_VAR = "ORGTREE_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), or None.

    A set but dangling ``ORGTREE_CONFIG`` disables walk-up discovery.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        return path if path.is_file() else None

    here = (start or Path.cwd()).resolve()
    for directory in (here, *here.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> OrgtreeConfig:
    """Parse *path* (or the discovered file) into :class:`OrgtreeConfig`.

    No file means all defaults; a fresh project needs no config at all.
    """
    path = path or find_config(cwd)
    if path is None:
        return OrgtreeConfig()
    with path.open("rb") as fh:
        return OrgtreeConfig.model_validate(tomllib.load(fh))
