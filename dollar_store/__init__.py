"""
dollar_store — Dollar Store Kids: a capped, stablecoin-backed collectible
controller on top of the capsule Vault Protocol, with a deterministic
in-process host to run it on.

    from dollar_store.devnet import deploy_local_stack
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
