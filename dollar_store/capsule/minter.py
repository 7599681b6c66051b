# -*- coding: utf-8 -*-
"""
Capsule minter
==============

Wraps fungible collateral into single-token capsules and releases it again.

Minting `mint_single_erc20_capsule(env, collection, token, amount, uri, receiver)`
checks, in order:

1. `env.value` equals the mint tax                      -> IncorrectTaxAmount
2. the collection is one the factory created             -> UnknownContract
3. private collections only mint for their owner         -> NotCollectionOwner
4. the collection still has an unminted id               -> CollectionExhausted
5. `amount` of `token` is pulled from the caller with the
   caller's allowance                                    -> Insufficient*

then mints the unit to `receiver`, records the escrow and forwards the tax to
the factory's tax collector.

Burning `burn_single_erc20_capsule(env, collection, unit_id, burn_from, receiver)`
requires `burn_from` to hold the unit and the caller to be `burn_from` or an
approved spender of it; the escrowed collateral goes to `receiver`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from dollar_store.errors import (CollectionExhausted, IncorrectTaxAmount, InvalidAmount, NotApproved,
                                 NotAuthorized, NotCollectionOwner, NotUnitOwner, UnknownContract,
                                 UnknownUnit)
from dollar_store.runtime.context import ZERO_ADDRESS, CallEnv
from dollar_store.runtime.contract import Contract

K_OWNER: Final[bytes] = b"min:owner"
K_FACTORY: Final[bytes] = b"min:factory"
K_TAX: Final[bytes] = b"min:tax"
_P_TOKEN: Final[bytes] = b"min:tok:"
_P_AMOUNT: Final[bytes] = b"min:amt:"


@dataclass(frozen=True)
class SingleERC20Capsule:
    token: bytes
    amount: int


def _escrow_key(prefix: bytes, collection: bytes, unit_id: int) -> bytes:
    return prefix + bytes(collection) + int(unit_id).to_bytes(32, "big")


class CapsuleMinter(Contract):
    def __init__(self, host, address: bytes, env: CallEnv, factory: bytes, mint_tax: int) -> None:
        super().__init__(host, address, env)
        self._set_bytes(K_OWNER, env.sender)
        self._set_bytes(K_FACTORY, factory)
        self._set_u256(K_TAX, mint_tax)

    # views

    def owner(self) -> bytes:
        return self._get_addr(K_OWNER)

    def factory(self) -> bytes:
        return self._get_addr(K_FACTORY)

    def capsule_mint_tax(self) -> int:
        return self._get_u256(K_TAX)

    def single_erc20_capsule(self, collection: bytes, unit_id: int) -> SingleERC20Capsule:
        """Escrow record of a unit; (zero address, 0) when there is none."""
        token = self._get_addr(_escrow_key(_P_TOKEN, collection, unit_id))
        amount = self._get_u256(_escrow_key(_P_AMOUNT, collection, unit_id))
        return SingleERC20Capsule(token=token, amount=amount)

    # administration

    def update_capsule_mint_tax(self, env: CallEnv, tax: int) -> None:
        if env.sender != self.owner():
            raise NotAuthorized("not minter owner")
        self._set_u256(K_TAX, tax)

    # capsules

    def _collection(self, collection: bytes):
        factory = self.host.contract_at(self.factory())
        if not factory.is_capsule(collection):
            raise UnknownContract("not a capsule collection")
        return self.host.contract_at(collection)

    def mint_single_erc20_capsule(
        self, env: CallEnv, collection: bytes, token: bytes, amount: int, uri: str, receiver: bytes
    ) -> int:
        tax = self.capsule_mint_tax()
        if env.value != tax:
            raise IncorrectTaxAmount(expected=tax, actual=env.value)
        coll = self._collection(collection)
        if coll.is_collection_private() and env.sender != coll.owner():
            raise NotCollectionOwner()
        if not coll.can_mint():
            raise CollectionExhausted(details={"counter": coll.counter(), "max_id": coll.max_id()})
        if not isinstance(amount, int) or amount <= 0:
            raise InvalidAmount("capsule amount must be positive")

        self._call(token, "transfer_from", env.sender, self.address, amount)
        unit_id = self._call(coll, "mint", receiver, uri)

        self._set_bytes(_escrow_key(_P_TOKEN, collection, unit_id), token)
        self._set_u256(_escrow_key(_P_AMOUNT, collection, unit_id), amount)

        factory = self.host.contract_at(self.factory())
        self.host.transfer_native(self.address, factory.tax_collector(), env.value)
        self._emit(
            "SingleERC20CapsuleMinted",
            account=bytes(receiver),
            collection=bytes(collection),
            token=bytes(token),
            amount=amount,
            unit_id=unit_id,
        )
        return unit_id

    def burn_single_erc20_capsule(
        self, env: CallEnv, collection: bytes, unit_id: int, burn_from: bytes, receiver: bytes
    ) -> None:
        coll = self._collection(collection)
        if coll.owner_of(unit_id) != bytes(burn_from):
            raise NotUnitOwner(details={"unit_id": unit_id})
        if env.sender != bytes(burn_from) and not coll.is_approved_or_owner(env.sender, unit_id):
            raise NotApproved(details={"unit_id": unit_id})
        record = self.single_erc20_capsule(collection, unit_id)
        if record.token == ZERO_ADDRESS:
            raise UnknownUnit("unit holds no escrow", details={"unit_id": unit_id})

        self._call(coll, "burn", burn_from, unit_id)
        self._delete(_escrow_key(_P_TOKEN, collection, unit_id))
        self._delete(_escrow_key(_P_AMOUNT, collection, unit_id))
        self._call(record.token, "transfer", receiver, record.amount)
        self._emit(
            "SingleERC20CapsuleBurnt",
            account=bytes(burn_from),
            collection=bytes(collection),
            token=record.token,
            amount=record.amount,
            unit_id=unit_id,
        )


__all__ = ["CapsuleMinter", "SingleERC20Capsule"]
