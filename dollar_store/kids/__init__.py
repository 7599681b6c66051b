"""
dollar_store.kids — the Dollar Store Kids controller and its building blocks.

    access      governor guard
    gate        mint on/off switch
    ledger      one-mint-per-address participation ledger
    controller  DollarStoreKids
"""

from __future__ import annotations

from .controller import DEFAULT_NAME, DEFAULT_SYMBOL, EVT_BURNT, EVT_MINTED, DollarStoreKids
from .gate import EVT_MINT_TOGGLED

__all__ = [
    "DEFAULT_NAME",
    "DEFAULT_SYMBOL",
    "EVT_BURNT",
    "EVT_MINTED",
    "EVT_MINT_TOGGLED",
    "DollarStoreKids",
]
