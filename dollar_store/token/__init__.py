# -*- coding: utf-8 -*-
"""
dollar_store.token
==================

Small, deterministic helpers and constants for fungible token contracts.
This package does not touch storage itself; it only provides prefixes, event
names and validation shared by token implementations.

Conventions
-----------
Storage keys (prefixed bytes):
  - balances:   BAL_PREFIX || <addr>
  - allowances: ALLOW_PREFIX || <owner> || b"|" || <spender>

Events:
  - "Transfer" with { "sender": bytes, "recipient": bytes, "value": int }
  - "Approval" with { "owner": bytes, "spender": bytes, "value": int }
"""
from __future__ import annotations

from typing import Final

from dollar_store.errors import InvalidAddress, InvalidAmount
from dollar_store.runtime.context import ADDRESS_LEN, ZERO_ADDRESS

BAL_PREFIX: Final[bytes] = b"tok:bal:"
ALLOW_PREFIX: Final[bytes] = b"tok:allow:"

EVT_TRANSFER: Final[str] = "Transfer"
EVT_APPROVAL: Final[str] = "Approval"

DEFAULT_DECIMALS: Final[int] = 18
MAX_DECIMALS: Final[int] = 36


def key_balance(addr: bytes) -> bytes:
    require_address(addr)
    return BAL_PREFIX + bytes(addr)


def key_allow(owner: bytes, spender: bytes) -> bytes:
    require_address(owner)
    require_address(spender)
    return ALLOW_PREFIX + bytes(owner) + b"|" + bytes(spender)


def require_address(addr: bytes) -> None:
    """Ensure `addr` is a 20-byte address."""
    if not isinstance(addr, (bytes, bytearray)) or len(addr) != ADDRESS_LEN:
        raise InvalidAddress(details={"address": repr(addr)})


def require_recipient(addr: bytes) -> None:
    """Like `require_address`, and the zero address is not a valid recipient."""
    require_address(addr)
    if bytes(addr) == ZERO_ADDRESS:
        raise InvalidAddress("transfer to the zero address")


def require_amount(n: int) -> None:
    """Ensure `n` is an integer amount in [0, 2**256-1]."""
    if not isinstance(n, int) or isinstance(n, bool) or n < 0 or n > (2**256 - 1):
        raise InvalidAmount(details={"amount": repr(n)})


def clamp_decimals(n: int) -> int:
    """Clamp decimals to [0, 36]."""
    if n < 0:
        return 0
    if n > MAX_DECIMALS:
        return MAX_DECIMALS
    return n


__all__ = [
    "ALLOW_PREFIX",
    "BAL_PREFIX",
    "DEFAULT_DECIMALS",
    "EVT_APPROVAL",
    "EVT_TRANSFER",
    "clamp_decimals",
    "key_allow",
    "key_balance",
    "require_address",
    "require_amount",
    "require_recipient",
]
