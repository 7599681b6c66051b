"""
dollar_store.version — semantic version string.

If DSK_VERSION is set in the environment, that wins over BASE_VERSION.
"""

from __future__ import annotations

import os

# Bump this on intentional releases.
BASE_VERSION = "0.1.0"

__version__ = os.getenv("DSK_VERSION", BASE_VERSION)


def runtime_banner() -> str:
    return f"dollar-store-kids {__version__}"


__all__ = ["BASE_VERSION", "__version__", "runtime_banner"]
