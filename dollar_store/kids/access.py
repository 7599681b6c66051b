# -*- coding: utf-8 -*-
"""
dollar_store.kids.access
========================

Single-principal guard for the controller.

The governor is stored once at construction under a fixed key and compared on
every guarded call. There is no rotation: the controller forwards ownership
changes for the *collection*, never for the guard itself.

Public API
----------
- ``init_governor(contract, governor)``: set the governor (construction only)
- ``get_governor(contract) -> bytes``
- ``require_governor(contract, caller)``: raise ``NotAuthorized`` unless equal
"""
from __future__ import annotations

from typing import Final

from dollar_store.errors import InvalidAddress, NotAuthorized
from dollar_store.runtime.context import ZERO_ADDRESS, to_hex
from dollar_store.runtime.contract import Contract

GOVERNOR_KEY: Final[bytes] = b"dsk:governor"


def get_governor(contract: Contract) -> bytes:
    return contract._get_addr(GOVERNOR_KEY)


def init_governor(contract: Contract, governor: bytes) -> None:
    """Store the governor. Refuses to overwrite one that is already set."""
    if governor == ZERO_ADDRESS:
        raise InvalidAddress("governor is the zero address")
    if get_governor(contract) != ZERO_ADDRESS:
        raise NotAuthorized("governor already initialized")
    contract._set_bytes(GOVERNOR_KEY, governor)


def require_governor(contract: Contract, caller: bytes) -> None:
    if caller != get_governor(contract):
        raise NotAuthorized(details={"caller": to_hex(caller)})


__all__ = ["GOVERNOR_KEY", "get_governor", "init_governor", "require_governor"]
