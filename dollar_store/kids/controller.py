# -*- coding: utf-8 -*-
"""
Dollar Store Kids controller
============================

Capped, collateral-backed collectible line on top of a capsule collection:
one unit per participant, each unit backed by one face value of the reference
stablecoin escrowed by the Vault Protocol, redeemable by burning.

Lifecycle
---------
Construction (payable with exactly the collection tax, runs once):
  1. governor := deployer, mint gate := off
  2. register a private collection of exactly ``max_units`` units with the
     vault (base URI set, size locked)
  3. approve ``max_units * face_value`` of the stablecoin to the vault minter

``mint(env)``      gate -> tax -> ledger, then escrow one face value and issue
                   the next unit to the caller; emits ``Minted``
``burn(env, id)``  burn through the vault (caller must have approved this
                   contract for the unit), forward the released collateral to
                   the caller; emits ``Burnt``

Administrative entry points are governor-only and forward to the vault:
``toggle_mint``, ``transfer_collection_ownership``, ``update_meta_authority``,
``update_base_uri``, ``update_royalty_config``; ``sweep`` recovers any token
except the reserve stablecoin.

Read views are snake_case throughout: ``max_dsk`` (supply cap),
``capsule_collection``, ``capsule_minter``, ``is_mint_enabled``, ``has_minted``.

Storage
-------
    "dsk:governor"        governor address                (access)
    "dsk:mint_enabled"    gate flag                       (gate)
    "dsk:minted:" + addr  participation ledger            (ledger)
    "dsk:collection"      capsule collection address
    "dsk:minter"          vault minter address
    "dsk:stablecoin"      reserve token address
    "dsk:max_units"       supply cap
    "dsk:face_value"      collateral per unit (base units)
"""
from __future__ import annotations

import logging
from typing import Final

from dollar_store.capsule.interfaces import CollectionIssuance, FungibleTransfer
from dollar_store.errors import IncorrectTaxAmount, InvalidAmount, ProtectedCollateral
from dollar_store.runtime.context import CallEnv, to_address, to_hex
from dollar_store.runtime.contract import Contract

from . import access, gate, ledger

log = logging.getLogger(__name__)

DEFAULT_NAME: Final[str] = "Dollar Store Kids"
DEFAULT_SYMBOL: Final[str] = "DSK"

K_COLLECTION: Final[bytes] = b"dsk:collection"
K_MINTER: Final[bytes] = b"dsk:minter"
K_STABLECOIN: Final[bytes] = b"dsk:stablecoin"
K_MAX_UNITS: Final[bytes] = b"dsk:max_units"
K_FACE_VALUE: Final[bytes] = b"dsk:face_value"

EVT_MINTED: Final[str] = "Minted"
EVT_BURNT: Final[str] = "Burnt"


class DollarStoreKids(Contract):
    def __init__(
        self,
        host,
        address: bytes,
        env: CallEnv,
        vault: CollectionIssuance,
        stablecoin: FungibleTransfer,
        base_uri: str,
        *,
        max_units: int,
        face_value: int,
        name: str = DEFAULT_NAME,
        symbol: str = DEFAULT_SYMBOL,
    ) -> None:
        super().__init__(host, address, env)
        if not isinstance(max_units, int) or max_units <= 0:
            raise InvalidAmount("max_units must be a positive integer")
        if not isinstance(face_value, int) or face_value <= 0:
            raise InvalidAmount("face_value must be a positive integer")

        self.vault = vault
        access.init_governor(self, env.sender)
        gate.init_gate(self)
        self._set_u256(K_MAX_UNITS, max_units)
        self._set_u256(K_FACE_VALUE, face_value)
        self._set_bytes(K_STABLECOIN, stablecoin.address)
        self._set_bytes(K_MINTER, vault.minter_address)

        collection = vault.register_collection(self._env(env.value), name, symbol, max_units, base_uri)
        self._set_bytes(K_COLLECTION, collection)

        self._call(stablecoin, "approve", vault.minter_address, max_units * face_value)
        log.info(
            "controller %s: collection %s, cap %d x %d",
            to_hex(address),
            to_hex(collection),
            max_units,
            face_value,
        )

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def governor(self) -> bytes:
        return access.get_governor(self)

    def is_mint_enabled(self) -> bool:
        return gate.is_mint_enabled(self)

    def has_minted(self, addr: bytes) -> bool:
        return ledger.has_minted(self, addr)

    def max_dsk(self) -> int:
        return self._get_u256(K_MAX_UNITS)

    def capsule_collection(self) -> bytes:
        return self._get_addr(K_COLLECTION)

    def capsule_minter(self) -> bytes:
        return self._get_addr(K_MINTER)

    def stablecoin(self) -> bytes:
        return self._get_addr(K_STABLECOIN)

    def face_value(self) -> int:
        return self._get_u256(K_FACE_VALUE)

    def max_collateral(self) -> int:
        return self.max_dsk() * self.face_value()

    # ------------------------------------------------------------------ #
    # Mint / burn
    # ------------------------------------------------------------------ #

    def mint(self, env: CallEnv) -> int:
        gate.require_mint_enabled(self)
        tax = self.vault.mint_tax()
        if env.value != tax:
            raise IncorrectTaxAmount(expected=tax, actual=env.value)
        ledger.require_not_minted(self, env.sender)

        ledger.mark_minted(self, env.sender)
        collection = self.capsule_collection()
        unit_id = self.vault.next_unit_id(collection)
        self.vault.mint_unit(
            self._env(env.value),
            collection,
            self.stablecoin(),
            self.face_value(),
            env.sender,
        )
        self._emit(EVT_MINTED, account=env.sender, unit_id=unit_id)
        log.debug("minted unit %d to %s", unit_id, to_hex(env.sender))
        return unit_id

    def burn(self, env: CallEnv, unit_id: int) -> None:
        collection = self.capsule_collection()
        _, released = self.vault.escrow_of(collection, unit_id)
        self.vault.burn_unit(self._env(), collection, unit_id, env.sender, self.address)
        self._call(self.stablecoin(), "transfer", env.sender, released)
        self._emit(EVT_BURNT, account=env.sender, unit_id=unit_id)
        log.debug("burnt unit %d for %s, released %d", unit_id, to_hex(env.sender), released)

    # ------------------------------------------------------------------ #
    # Administration (governor only)
    # ------------------------------------------------------------------ #

    def toggle_mint(self, env: CallEnv) -> bool:
        enabled = gate.toggle(self, env.sender)
        log.info("mint %s", "enabled" if enabled else "disabled")
        return enabled

    def transfer_collection_ownership(self, env: CallEnv, new_owner: bytes) -> None:
        access.require_governor(self, env.sender)
        self.vault.transfer_collection_ownership(self._env(), self.capsule_collection(), new_owner)
        log.info("collection ownership transferred to %s", to_hex(new_owner))

    def update_meta_authority(self, env: CallEnv, authority: bytes) -> None:
        access.require_governor(self, env.sender)
        self.vault.update_meta_authority(self._env(), self.capsule_collection(), authority)
        log.info("meta authority updated to %s", to_hex(authority))

    def update_base_uri(self, env: CallEnv, uri: str) -> None:
        access.require_governor(self, env.sender)
        self.vault.update_base_uri(self._env(), self.capsule_collection(), uri)
        log.info("base URI updated to %r", uri)

    def update_royalty_config(self, env: CallEnv, receiver: bytes, rate_bps: int) -> None:
        access.require_governor(self, env.sender)
        self.vault.update_royalty_config(self._env(), self.capsule_collection(), receiver, rate_bps)
        log.info("royalty config: receiver=%s rate=%s bps", to_hex(receiver), rate_bps)

    def sweep(self, env: CallEnv, token: bytes) -> int:
        """Move this contract's whole balance of `token` to the governor."""
        access.require_governor(self, env.sender)
        token = to_address(token)
        if token == self.stablecoin():
            raise ProtectedCollateral(details={"token": to_hex(token)})
        amount = self.host.contract_at(token).balance_of(self.address)
        if amount:
            self._call(token, "transfer", self.governor(), amount)
        log.info("swept %d of %s to governor", amount, to_hex(token))
        return amount


__all__ = ["DEFAULT_NAME", "DEFAULT_SYMBOL", "DollarStoreKids", "EVT_BURNT", "EVT_MINTED"]
