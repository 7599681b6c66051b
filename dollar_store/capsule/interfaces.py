"""
dollar_store.capsule.interfaces — capability surfaces the controller depends on.

The controller never reaches into Vault Protocol internals. It is constructed
with two narrow capabilities:

- `CollectionIssuance`: register a capped collection once, mint/burn one
  collateral-backed unit, and forward configuration changes.
- `FungibleTransfer`:   the reference stablecoin's transfer/approve/balance
  surface.

Both are structural (`typing.Protocol`), so test doubles only need the same
method names. Mutating methods take a `CallEnv` whose `sender` is the
controller itself.
"""

from __future__ import annotations

from typing import Protocol, Tuple, runtime_checkable

from dollar_store.runtime.context import CallEnv


@runtime_checkable
class FungibleTransfer(Protocol):
    address: bytes

    def balance_of(self, addr: bytes) -> int: ...
    def allowance(self, owner: bytes, spender: bytes) -> int: ...
    def transfer(self, env: CallEnv, to: bytes, amount: int) -> bool: ...
    def approve(self, env: CallEnv, spender: bytes, amount: int) -> bool: ...
    def transfer_from(self, env: CallEnv, owner: bytes, to: bytes, amount: int) -> bool: ...


@runtime_checkable
class CollectionIssuance(Protocol):
    @property
    def minter_address(self) -> bytes: ...

    def mint_tax(self) -> int: ...

    # one-time registration
    def register_collection(
        self, env: CallEnv, name: str, symbol: str, max_units: int, base_uri: str
    ) -> bytes: ...

    # issuance
    def next_unit_id(self, collection: bytes) -> int: ...
    def mint_unit(
        self, env: CallEnv, collection: bytes, token: bytes, amount: int, receiver: bytes
    ) -> None: ...
    def burn_unit(
        self, env: CallEnv, collection: bytes, unit_id: int, holder: bytes, receiver: bytes
    ) -> None: ...
    def escrow_of(self, collection: bytes, unit_id: int) -> Tuple[bytes, int]: ...

    # configuration
    def transfer_collection_ownership(self, env: CallEnv, collection: bytes, new_owner: bytes) -> None: ...
    def update_meta_authority(self, env: CallEnv, collection: bytes, authority: bytes) -> None: ...
    def update_base_uri(self, env: CallEnv, collection: bytes, uri: str) -> None: ...
    def update_royalty_config(
        self, env: CallEnv, collection: bytes, receiver: bytes, rate_bps: int
    ) -> None: ...


__all__ = ["CollectionIssuance", "FungibleTransfer"]
