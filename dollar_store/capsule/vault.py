"""
dollar_store.capsule.vault — `CollectionIssuance` over the capsule factory and minter.

`CapsuleVault` holds no state of its own; it turns the controller's narrow
issuance calls into host calls against the protocol contracts. Every call is
made *as* `env.sender` (the controller), so the protocol sees the controller
as collection owner, minter customer and escrow receiver.
"""

from __future__ import annotations

from typing import Tuple

from dollar_store.runtime.context import CallEnv
from dollar_store.runtime.host import Host

from .factory import CapsuleFactory
from .minter import CapsuleMinter


class CapsuleVault:
    def __init__(self, host: Host, factory: CapsuleFactory, minter: CapsuleMinter) -> None:
        self.host = host
        self.factory = factory
        self.minter = minter

    @property
    def minter_address(self) -> bytes:
        return self.minter.address

    def mint_tax(self) -> int:
        return self.minter.capsule_mint_tax()

    def register_collection(
        self, env: CallEnv, name: str, symbol: str, max_units: int, base_uri: str
    ) -> bytes:
        """Create a private collection owned by `env.sender`, set its base URI and lock its size."""
        collection = self.host.call(
            env.sender,
            self.factory,
            "create_capsule_collection",
            name,
            symbol,
            env.sender,
            True,
            value=env.value,
        )
        self.host.call(env.sender, collection, "set_base_uri", base_uri)
        self.host.call(env.sender, collection, "lock_collection_count", max_units)
        return collection

    def next_unit_id(self, collection: bytes) -> int:
        return self.host.contract_at(collection).counter()

    def mint_unit(
        self, env: CallEnv, collection: bytes, token: bytes, amount: int, receiver: bytes
    ) -> None:
        self.host.call(
            env.sender,
            self.minter,
            "mint_single_erc20_capsule",
            collection,
            token,
            amount,
            "",
            receiver,
            value=env.value,
        )

    def burn_unit(
        self, env: CallEnv, collection: bytes, unit_id: int, holder: bytes, receiver: bytes
    ) -> None:
        self.host.call(
            env.sender,
            self.minter,
            "burn_single_erc20_capsule",
            collection,
            unit_id,
            holder,
            receiver,
        )

    def escrow_of(self, collection: bytes, unit_id: int) -> Tuple[bytes, int]:
        record = self.minter.single_erc20_capsule(collection, unit_id)
        return record.token, record.amount

    # configuration forwarding

    def transfer_collection_ownership(self, env: CallEnv, collection: bytes, new_owner: bytes) -> None:
        self.host.call(env.sender, collection, "transfer_ownership", new_owner)

    def update_meta_authority(self, env: CallEnv, collection: bytes, authority: bytes) -> None:
        self.host.call(env.sender, collection, "update_token_uri_owner", authority)

    def update_base_uri(self, env: CallEnv, collection: bytes, uri: str) -> None:
        self.host.call(env.sender, collection, "set_base_uri", uri)

    def update_royalty_config(
        self, env: CallEnv, collection: bytes, receiver: bytes, rate_bps: int
    ) -> None:
        self.host.call(env.sender, collection, "update_royalty_config", receiver, rate_bps)


__all__ = ["CapsuleVault"]
