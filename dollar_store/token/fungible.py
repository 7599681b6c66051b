# -*- coding: utf-8 -*-
"""
ERC-20-like fungible token
==========================

Storage-backed token contract used on the local host for the reference
stablecoin (6 decimals, 1.000000 = 1_000_000 base units) and for any foreign
token that may land in the controller by mistake.

Highlights
----------
- Explicit `CallEnv` for mutating calls (no ambient msg.sender).
- Deterministic storage layout using prefixes from `dollar_store.token`.
- `transfer_from` draws the allowance down by the moved amount.
- The deployer is the *issuer*: only it may `mint` (a funding helper standing
  in for the real issuer's faucet). Holders may `burn` their own balance.

Public interface
----------------
# metadata / views
name() -> str, symbol() -> str, decimals() -> int, total_supply() -> int
balance_of(addr) -> int, allowance(owner, spender) -> int, issuer() -> bytes

# state-changing
transfer(env, to, amount) -> bool
approve(env, spender, amount) -> bool
transfer_from(env, owner, to, amount) -> bool
mint(env, to, amount) -> bool           # issuer only
burn(env, amount) -> bool
"""

from __future__ import annotations

from typing import Final

from dollar_store.errors import InsufficientAllowance, InsufficientCollateralBalance, NotAuthorized
from dollar_store.runtime.context import ZERO_ADDRESS, CallEnv
from dollar_store.runtime.contract import Contract

from . import (DEFAULT_DECIMALS, EVT_APPROVAL, EVT_TRANSFER, clamp_decimals, key_allow, key_balance,
               require_amount, require_recipient)

K_NAME: Final[bytes] = b"tok:meta:name"
K_SYMBOL: Final[bytes] = b"tok:meta:symbol"
K_DECIMALS: Final[bytes] = b"tok:meta:dec"
K_TOTAL: Final[bytes] = b"tok:meta:total"
K_ISSUER: Final[bytes] = b"tok:meta:issuer"


class FungibleToken(Contract):
    def __init__(
        self,
        host,
        address: bytes,
        env: CallEnv,
        name: str,
        symbol: str,
        decimals: int = DEFAULT_DECIMALS,
        initial_supply: int = 0,
    ) -> None:
        super().__init__(host, address, env)
        require_amount(initial_supply)
        self._set_str(K_NAME, name)
        self._set_str(K_SYMBOL, symbol.upper())
        self._set_u256(K_DECIMALS, clamp_decimals(decimals))
        self._set_bytes(K_ISSUER, env.sender)
        if initial_supply > 0:
            self._mint_to(env.sender, initial_supply)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def name(self) -> str:
        return self._get_str(K_NAME)

    def symbol(self) -> str:
        return self._get_str(K_SYMBOL)

    def decimals(self) -> int:
        return self._get_u256(K_DECIMALS)

    def total_supply(self) -> int:
        return self._get_u256(K_TOTAL)

    def issuer(self) -> bytes:
        return self._get_addr(K_ISSUER)

    def balance_of(self, addr: bytes) -> int:
        return self._get_u256(key_balance(addr))

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self._get_u256(key_allow(owner, spender))

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def transfer(self, env: CallEnv, to: bytes, amount: int) -> bool:
        self._move(env.sender, to, amount)
        return True

    def approve(self, env: CallEnv, spender: bytes, amount: int) -> bool:
        require_amount(amount)
        self._set_u256(key_allow(env.sender, spender), amount)
        self._emit(EVT_APPROVAL, owner=env.sender, spender=bytes(spender), value=amount)
        return True

    def transfer_from(self, env: CallEnv, owner: bytes, to: bytes, amount: int) -> bool:
        """Spender (`env.sender`) moves `amount` from `owner` to `to` using its allowance."""
        require_amount(amount)
        allow_key = key_allow(owner, env.sender)
        current = self._get_u256(allow_key)
        if current < amount:
            raise InsufficientAllowance(details={"allowance": current, "needed": amount})
        self._set_u256(allow_key, current - amount)
        self._move(owner, to, amount)
        return True

    def mint(self, env: CallEnv, to: bytes, amount: int) -> bool:
        if env.sender != self.issuer():
            raise NotAuthorized("not token issuer")
        require_recipient(to)
        require_amount(amount)
        if amount:
            self._mint_to(to, amount)
        return True

    def burn(self, env: CallEnv, amount: int) -> bool:
        require_amount(amount)
        bal_key = key_balance(env.sender)
        cur = self._get_u256(bal_key)
        if cur < amount:
            raise InsufficientCollateralBalance(details={"balance": cur, "needed": amount})
        self._set_u256(bal_key, cur - amount)
        self._set_u256(K_TOTAL, self.total_supply() - amount)
        self._emit(EVT_TRANSFER, sender=env.sender, recipient=ZERO_ADDRESS, value=amount)
        return True

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _move(self, frm: bytes, to: bytes, amount: int) -> None:
        require_recipient(to)
        require_amount(amount)
        from_key = key_balance(frm)
        from_bal = self._get_u256(from_key)
        if from_bal < amount:
            raise InsufficientCollateralBalance(details={"balance": from_bal, "needed": amount})
        self._set_u256(from_key, from_bal - amount)
        to_key = key_balance(to)
        self._set_u256(to_key, self._get_u256(to_key) + amount)
        self._emit(EVT_TRANSFER, sender=bytes(frm), recipient=bytes(to), value=amount)

    def _mint_to(self, to: bytes, amount: int) -> None:
        self._set_u256(K_TOTAL, self.total_supply() + amount)
        to_key = key_balance(to)
        self._set_u256(to_key, self._get_u256(to_key) + amount)
        self._emit(EVT_TRANSFER, sender=ZERO_ADDRESS, recipient=bytes(to), value=amount)


__all__ = ["FungibleToken"]
