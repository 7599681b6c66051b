# -*- coding: utf-8 -*-
"""
dollar_store.kids.gate
======================

Mint on/off switch. Defaults to *off*; only the governor flips it.

Every toggle flips the flag and emits ``MintToggled {enabled}`` with the new
value, including consecutive toggles in the same block of transactions.
"""
from __future__ import annotations

from typing import Final

from dollar_store.errors import MintingDisabled
from dollar_store.runtime.contract import Contract

from .access import require_governor

MINT_ENABLED_KEY: Final[bytes] = b"dsk:mint_enabled"
EVT_MINT_TOGGLED: Final[str] = "MintToggled"


def is_mint_enabled(contract: Contract) -> bool:
    return contract._get_bool(MINT_ENABLED_KEY)


def init_gate(contract: Contract) -> None:
    contract._set_bool(MINT_ENABLED_KEY, False)


def toggle(contract: Contract, caller: bytes) -> bool:
    require_governor(contract, caller)
    enabled = not is_mint_enabled(contract)
    contract._set_bool(MINT_ENABLED_KEY, enabled)
    contract._emit(EVT_MINT_TOGGLED, enabled=enabled)
    return enabled


def require_mint_enabled(contract: Contract) -> None:
    if not is_mint_enabled(contract):
        raise MintingDisabled()


__all__ = [
    "EVT_MINT_TOGGLED",
    "MINT_ENABLED_KEY",
    "init_gate",
    "is_mint_enabled",
    "require_mint_enabled",
    "toggle",
]
