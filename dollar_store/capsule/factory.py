# -*- coding: utf-8 -*-
"""
Capsule factory
===============

Creates capsule collections against a flat native-currency *collection tax*
and keeps the registry of collections it created. The tax is forwarded to the
tax collector in the same transaction.

Storage
-------
    "fac:owner"          protocol owner (deployer)
    "fac:tax"            collection tax (u256, native units)
    "fac:collector"      tax collector address
    "fac:minter"         CapsuleMinter wired into every new collection
    "fac:count"          number of collections created
    "fac:idx:" + n32     collection address by creation index
    "fac:cap:" + addr    registry membership flag
"""
from __future__ import annotations

import logging
from typing import Final, List

from dollar_store.errors import IncorrectTaxAmount, InvalidAddress, NotAuthorized, UnknownContract
from dollar_store.runtime.context import ZERO_ADDRESS, CallEnv, to_hex
from dollar_store.runtime.contract import Contract

from .collection import CapsuleCollection

log = logging.getLogger(__name__)

K_OWNER: Final[bytes] = b"fac:owner"
K_TAX: Final[bytes] = b"fac:tax"
K_COLLECTOR: Final[bytes] = b"fac:collector"
K_MINTER: Final[bytes] = b"fac:minter"
K_COUNT: Final[bytes] = b"fac:count"
_P_INDEX: Final[bytes] = b"fac:idx:"
_P_CAPSULE: Final[bytes] = b"fac:cap:"


class CapsuleFactory(Contract):
    def __init__(self, host, address: bytes, env: CallEnv, collection_tax: int, tax_collector: bytes) -> None:
        super().__init__(host, address, env)
        if bytes(tax_collector) == ZERO_ADDRESS:
            raise InvalidAddress("tax collector is the zero address")
        self._set_bytes(K_OWNER, env.sender)
        self._set_u256(K_TAX, collection_tax)
        self._set_bytes(K_COLLECTOR, tax_collector)

    # views

    def owner(self) -> bytes:
        return self._get_addr(K_OWNER)

    def capsule_collection_tax(self) -> int:
        return self._get_u256(K_TAX)

    def tax_collector(self) -> bytes:
        return self._get_addr(K_COLLECTOR)

    def capsule_minter(self) -> bytes:
        return self._get_addr(K_MINTER)

    def is_capsule(self, addr: bytes) -> bool:
        return self._get_bool(_P_CAPSULE + bytes(addr))

    def get_all_capsule_collections(self) -> List[bytes]:
        n = self._get_u256(K_COUNT)
        return [self._get_addr(_P_INDEX + i.to_bytes(32, "big")) for i in range(n)]

    # protocol administration

    def _require_owner(self, env: CallEnv) -> None:
        if env.sender != self.owner():
            raise NotAuthorized("not factory owner")

    def update_capsule_minter(self, env: CallEnv, minter: bytes) -> None:
        self._require_owner(env)
        if bytes(minter) == ZERO_ADDRESS:
            raise InvalidAddress("minter is the zero address")
        self._set_bytes(K_MINTER, minter)

    def update_capsule_collection_tax(self, env: CallEnv, tax: int) -> None:
        self._require_owner(env)
        self._set_u256(K_TAX, tax)

    def update_tax_collector(self, env: CallEnv, collector: bytes) -> None:
        self._require_owner(env)
        if bytes(collector) == ZERO_ADDRESS:
            raise InvalidAddress("tax collector is the zero address")
        self._set_bytes(K_COLLECTOR, collector)

    # creation

    def create_capsule_collection(
        self, env: CallEnv, name: str, symbol: str, token_uri_owner: bytes, is_private: bool
    ) -> bytes:
        """Create a collection owned by the caller; `env.value` must equal the collection tax."""
        tax = self.capsule_collection_tax()
        if env.value != tax:
            raise IncorrectTaxAmount(expected=tax, actual=env.value)
        minter = self.capsule_minter()
        if minter == ZERO_ADDRESS:
            raise UnknownContract("capsule minter is not configured")

        collection = self.host.create(
            CapsuleCollection,
            self.address,
            name,
            symbol,
            env.sender,
            bytes(token_uri_owner),
            minter,
            bool(is_private),
        )
        n = self._get_u256(K_COUNT)
        self._set_bytes(_P_INDEX + n.to_bytes(32, "big"), collection.address)
        self._set_u256(K_COUNT, n + 1)
        self._set_bool(_P_CAPSULE + collection.address, True)

        self.host.transfer_native(self.address, self.tax_collector(), env.value)
        self._emit("CapsuleCollectionCreated", caller=env.sender, collection=collection.address)
        log.info("capsule collection %s created for %s", to_hex(collection.address), to_hex(env.sender))
        return collection.address


__all__ = ["CapsuleFactory"]
