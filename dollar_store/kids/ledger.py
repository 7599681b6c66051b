# -*- coding: utf-8 -*-
"""
dollar_store.kids.ledger
========================

Participation ledger: a permanent "used ticket" set keyed by address.

An entry only ever goes from absent to ``b"\\x01"``; nothing in the controller
clears it, burns included, and the module offers no way to reset one.
"""
from __future__ import annotations

from typing import Final

from dollar_store.errors import AlreadyMinted
from dollar_store.runtime.context import to_address, to_hex
from dollar_store.runtime.contract import Contract

MINTED_PREFIX: Final[bytes] = b"dsk:minted:"


def has_minted(contract: Contract, addr: bytes) -> bool:
    return contract._get_bool(MINTED_PREFIX + to_address(addr))


def require_not_minted(contract: Contract, addr: bytes) -> None:
    if has_minted(contract, addr):
        raise AlreadyMinted(details={"account": to_hex(addr)})


def mark_minted(contract: Contract, addr: bytes) -> None:
    contract._set_bool(MINTED_PREFIX + to_address(addr), True)


__all__ = ["MINTED_PREFIX", "has_minted", "mark_minted", "require_not_minted"]
