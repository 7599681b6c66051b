# -*- coding: utf-8 -*-
"""
dollar_store.capsule.collection
===============================

Capsule collection: an ERC-721-like registry of units with metadata authority,
royalty configuration and a lockable size.

State & storage layout
----------------------
    "cap:meta:*"          name, symbol, owner, token-URI owner, base URI,
                          factory, minter, private flag
    "cap:counter"         next unit id (u256, 0-based, never reused)
    "cap:max_id"          highest mintable id once locked (u256)
    "cap:locked"          size lock flag
    "cap:own:" + id32     owner address of a unit
    "cap:uri:" + id32     optional per-unit URI
    "cap:bal:" + addr     number of units held
    "cap:apv:" + id32     single-unit approval
    "cap:op:" + owner|op  operator approval flag
    "cap:roy:*"           royalty receiver and rate (basis points)

Roles
-----
- owner:           lock the size, transfer ownership, royalty config
- token-URI owner: base URI and the token-URI owner role itself
- minter:          the protocol's CapsuleMinter; the only one allowed to
                   mint and burn units

Events
------
- Transfer {sender, recipient, unit_id}
- Approval {owner, approved, unit_id}
- ApprovalForAll {owner, operator, approved}
- OwnershipTransferred {previous, current}
- TokenURIOwnerUpdated {previous, current}
- BaseURIUpdated {previous, current}
- RoyaltyConfigUpdated {old_receiver, new_receiver, old_rate, new_rate}
- CollectionCountLocked {count, max_id}
"""
from __future__ import annotations

from typing import Final, Tuple

from dollar_store.errors import (CollectionExhausted, CollectionLocked, InvalidAddress, InvalidAmount,
                                 InvalidRoyaltyRate, NotApproved, NotCollectionOwner, NotMetaAuthority,
                                 NotMinter, NotUnitOwner, UnknownUnit)
from dollar_store.runtime.context import ZERO_ADDRESS, CallEnv
from dollar_store.runtime.contract import Contract

MAX_BPS: Final[int] = 10_000

K_NAME: Final[bytes] = b"cap:meta:name"
K_SYMBOL: Final[bytes] = b"cap:meta:symbol"
K_OWNER: Final[bytes] = b"cap:meta:owner"
K_URI_OWNER: Final[bytes] = b"cap:meta:uri_owner"
K_BASE_URI: Final[bytes] = b"cap:meta:base_uri"
K_FACTORY: Final[bytes] = b"cap:meta:factory"
K_MINTER: Final[bytes] = b"cap:meta:minter"
K_PRIVATE: Final[bytes] = b"cap:meta:private"
K_COUNTER: Final[bytes] = b"cap:counter"
K_MAX_ID: Final[bytes] = b"cap:max_id"
K_LOCKED: Final[bytes] = b"cap:locked"
K_ROY_RECEIVER: Final[bytes] = b"cap:roy:receiver"
K_ROY_RATE: Final[bytes] = b"cap:roy:rate"

_P_OWNER: Final[bytes] = b"cap:own:"
_P_URI: Final[bytes] = b"cap:uri:"
_P_BAL: Final[bytes] = b"cap:bal:"
_P_APPROVED: Final[bytes] = b"cap:apv:"
_P_OPERATOR: Final[bytes] = b"cap:op:"


def _id32(unit_id: int) -> bytes:
    if not isinstance(unit_id, int) or isinstance(unit_id, bool) or unit_id < 0:
        raise UnknownUnit(details={"unit_id": repr(unit_id)})
    return unit_id.to_bytes(32, "big")


class CapsuleCollection(Contract):
    def __init__(
        self,
        host,
        address: bytes,
        env: CallEnv,
        name: str,
        symbol: str,
        owner: bytes,
        token_uri_owner: bytes,
        minter: bytes,
        is_private: bool,
    ) -> None:
        super().__init__(host, address, env)
        if owner == ZERO_ADDRESS or token_uri_owner == ZERO_ADDRESS:
            raise InvalidAddress("collection owner and token-URI owner must be set")
        self._set_str(K_NAME, name)
        self._set_str(K_SYMBOL, symbol)
        self._set_bytes(K_OWNER, owner)
        self._set_bytes(K_URI_OWNER, token_uri_owner)
        self._set_bytes(K_FACTORY, env.sender)
        self._set_bytes(K_MINTER, minter)
        self._set_bool(K_PRIVATE, is_private)
        self._set_u256(K_COUNTER, 0)

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def name(self) -> str:
        return self._get_str(K_NAME)

    def symbol(self) -> str:
        return self._get_str(K_SYMBOL)

    def owner(self) -> bytes:
        return self._get_addr(K_OWNER)

    def token_uri_owner(self) -> bytes:
        return self._get_addr(K_URI_OWNER)

    def base_uri(self) -> str:
        return self._get_str(K_BASE_URI)

    def factory(self) -> bytes:
        return self._get_addr(K_FACTORY)

    def minter(self) -> bytes:
        return self._get_addr(K_MINTER)

    def is_collection_minter(self, addr: bytes) -> bool:
        return bytes(addr) == self.minter()

    def is_collection_private(self) -> bool:
        return self._get_bool(K_PRIVATE)

    def is_collection_locked(self) -> bool:
        return self._get_bool(K_LOCKED)

    def counter(self) -> int:
        return self._get_u256(K_COUNTER)

    def max_id(self) -> int:
        """Highest mintable id; unbounded (2**256-1) until the size is locked."""
        if not self.is_collection_locked():
            return (1 << 256) - 1
        return self._get_u256(K_MAX_ID)

    def can_mint(self) -> bool:
        return self.counter() <= self.max_id()

    def exists(self, unit_id: int) -> bool:
        return self._get(_P_OWNER + _id32(unit_id)) is not None

    def owner_of(self, unit_id: int) -> bytes:
        v = self._get(_P_OWNER + _id32(unit_id))
        if v is None:
            raise UnknownUnit(details={"unit_id": unit_id})
        return v

    def balance_of(self, addr: bytes) -> int:
        return self._get_u256(_P_BAL + bytes(addr))

    def get_approved(self, unit_id: int) -> bytes:
        self.owner_of(unit_id)
        return self._get_addr(_P_APPROVED + _id32(unit_id))

    def is_approved_for_all(self, owner: bytes, operator: bytes) -> bool:
        return self._get_bool(_P_OPERATOR + bytes(owner) + b"|" + bytes(operator))

    def is_approved_or_owner(self, spender: bytes, unit_id: int) -> bool:
        owner = self.owner_of(unit_id)
        spender = bytes(spender)
        return (
            spender == owner
            or self.get_approved(unit_id) == spender
            or self.is_approved_for_all(owner, spender)
        )

    def token_uri(self, unit_id: int) -> str:
        self.owner_of(unit_id)
        own = self._get_str(_P_URI + _id32(unit_id))
        if own:
            return own
        base = self.base_uri()
        return f"{base}{unit_id}" if base else ""

    def royalty_receiver(self) -> bytes:
        return self._get_addr(K_ROY_RECEIVER)

    def royalty_rate(self) -> int:
        return self._get_u256(K_ROY_RATE)

    def royalty_info(self, unit_id: int, sale_price: int) -> Tuple[bytes, int]:
        """(receiver, royalty amount) for a sale; the unit need not exist."""
        return self.royalty_receiver(), (sale_price * self.royalty_rate()) // MAX_BPS

    # ------------------------------------------------------------------ #
    # Holder operations
    # ------------------------------------------------------------------ #

    def approve(self, env: CallEnv, approved: bytes, unit_id: int) -> None:
        owner = self.owner_of(unit_id)
        if env.sender != owner and not self.is_approved_for_all(owner, env.sender):
            raise NotApproved("approve caller is not token owner or approved for all")
        self._set_bytes(_P_APPROVED + _id32(unit_id), approved)
        self._emit("Approval", owner=owner, approved=bytes(approved), unit_id=unit_id)

    def set_approval_for_all(self, env: CallEnv, operator: bytes, approved: bool) -> None:
        if bytes(operator) == env.sender:
            raise NotApproved("approve to caller")
        self._set_bool(_P_OPERATOR + env.sender + b"|" + bytes(operator), approved)
        self._emit("ApprovalForAll", owner=env.sender, operator=bytes(operator), approved=bool(approved))

    def transfer_from(self, env: CallEnv, frm: bytes, to: bytes, unit_id: int) -> None:
        if self.owner_of(unit_id) != bytes(frm):
            raise NotUnitOwner(details={"unit_id": unit_id})
        if not self.is_approved_or_owner(env.sender, unit_id):
            raise NotApproved(details={"unit_id": unit_id})
        if bytes(to) == ZERO_ADDRESS:
            raise InvalidAddress("transfer to the zero address")
        self._delete(_P_APPROVED + _id32(unit_id))
        self._set_u256(_P_BAL + bytes(frm), self.balance_of(frm) - 1)
        self._set_u256(_P_BAL + bytes(to), self.balance_of(to) + 1)
        self._set_bytes(_P_OWNER + _id32(unit_id), to)
        self._emit("Transfer", sender=bytes(frm), recipient=bytes(to), unit_id=unit_id)

    # ------------------------------------------------------------------ #
    # Minter operations
    # ------------------------------------------------------------------ #

    def _require_minter(self, env: CallEnv) -> None:
        if not self.is_collection_minter(env.sender):
            raise NotMinter()

    def mint(self, env: CallEnv, to: bytes, uri: str = "") -> int:
        self._require_minter(env)
        if bytes(to) == ZERO_ADDRESS:
            raise InvalidAddress("mint to the zero address")
        unit_id = self.counter()
        if unit_id > self.max_id():
            raise CollectionExhausted(details={"counter": unit_id, "max_id": self.max_id()})
        key = _id32(unit_id)
        self._set_bytes(_P_OWNER + key, to)
        if uri:
            self._set_str(_P_URI + key, uri)
        self._set_u256(_P_BAL + bytes(to), self.balance_of(to) + 1)
        self._set_u256(K_COUNTER, unit_id + 1)
        self._emit("Transfer", sender=ZERO_ADDRESS, recipient=bytes(to), unit_id=unit_id)
        return unit_id

    def burn(self, env: CallEnv, owner: bytes, unit_id: int) -> None:
        self._require_minter(env)
        if self.owner_of(unit_id) != bytes(owner):
            raise NotUnitOwner(details={"unit_id": unit_id})
        key = _id32(unit_id)
        self._delete(_P_APPROVED + key)
        self._delete(_P_URI + key)
        self._delete(_P_OWNER + key)
        self._set_u256(_P_BAL + bytes(owner), self.balance_of(owner) - 1)
        self._emit("Transfer", sender=bytes(owner), recipient=ZERO_ADDRESS, unit_id=unit_id)

    # ------------------------------------------------------------------ #
    # Owner / metadata authority
    # ------------------------------------------------------------------ #

    def _require_owner(self, env: CallEnv) -> None:
        if env.sender != self.owner():
            raise NotCollectionOwner()

    def _require_uri_owner(self, env: CallEnv) -> None:
        if env.sender != self.token_uri_owner():
            raise NotMetaAuthority()

    def lock_collection_count(self, env: CallEnv, count: int) -> None:
        """Fix the collection size once: ids `counter .. counter + count - 1` remain mintable."""
        self._require_owner(env)
        if self.is_collection_locked():
            raise CollectionLocked()
        if not isinstance(count, int) or count <= 0:
            raise InvalidAmount("collection count must be positive")
        max_id = self.counter() + count - 1
        self._set_u256(K_MAX_ID, max_id)
        self._set_bool(K_LOCKED, True)
        self._emit("CollectionCountLocked", count=count, max_id=max_id)

    def transfer_ownership(self, env: CallEnv, new_owner: bytes) -> None:
        self._require_owner(env)
        if bytes(new_owner) == ZERO_ADDRESS:
            raise InvalidAddress("new owner is the zero address")
        previous = self.owner()
        self._set_bytes(K_OWNER, new_owner)
        self._emit("OwnershipTransferred", previous=previous, current=bytes(new_owner))

    def update_token_uri_owner(self, env: CallEnv, new_owner: bytes) -> None:
        self._require_uri_owner(env)
        if bytes(new_owner) == ZERO_ADDRESS:
            raise InvalidAddress("token-URI owner is the zero address")
        previous = self.token_uri_owner()
        self._set_bytes(K_URI_OWNER, new_owner)
        self._emit("TokenURIOwnerUpdated", previous=previous, current=bytes(new_owner))

    def set_base_uri(self, env: CallEnv, uri: str) -> None:
        self._require_uri_owner(env)
        previous = self.base_uri()
        self._set_str(K_BASE_URI, uri)
        self._emit("BaseURIUpdated", previous=previous, current=uri)

    def update_royalty_config(self, env: CallEnv, receiver: bytes, rate: int) -> None:
        self._require_owner(env)
        if not isinstance(rate, int) or rate < 0 or rate > MAX_BPS:
            raise InvalidRoyaltyRate(details={"rate": rate})
        old_receiver = self.royalty_receiver()
        old_rate = self.royalty_rate()
        self._set_bytes(K_ROY_RECEIVER, receiver)
        self._set_u256(K_ROY_RATE, rate)
        self._emit(
            "RoyaltyConfigUpdated",
            old_receiver=old_receiver,
            new_receiver=bytes(receiver),
            old_rate=old_rate,
            new_rate=rate,
        )


__all__ = ["CapsuleCollection", "MAX_BPS"]
