"""icpr.version — package version.

Resolution order: ICPR_VERSION env override → installed package metadata →
BASE_VERSION fallback (source checkouts).
"""

from __future__ import annotations

import os
from importlib import metadata as importlib_metadata

BASE_VERSION = "0.1.0"
DIST_NAME = "icpr-token"


def compute_version() -> str:
    env = os.getenv("ICPR_VERSION")
    if env:
        return env.strip()
    try:
        return importlib_metadata.version(DIST_NAME)
    except importlib_metadata.PackageNotFoundError:
        return BASE_VERSION


__version__ = compute_version()

__all__ = ["__version__", "BASE_VERSION", "compute_version"]
