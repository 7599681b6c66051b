"""
dollar_store.runtime.host — single serialized ledger for local runs and tests.

The host owns the journal, the event log and the native-currency ledger, and
executes transactions one at a time. Each top-level operation is atomic:

    host = Host()
    token = host.deploy(FungibleToken, issuer, "USD Coin", "USDC", 6)
    host.transact(issuer, token, "mint", holder, 1_000_000)

- `deploy` / `transact` open a checkpoint, run the call and commit. Any
  `DollarStoreError` reverts the checkpoint (storage, native balances, contract
  creations and events) and is re-raised verbatim.
- `call` is the nested form used by contracts calling each other inside one
  transaction; it has no checkpoint of its own, failures bubble to the
  enclosing transaction.
- Transactions are numbered in submission order (`tx_index`), reverted ones
  included, which gives the total order every event is stamped with.

Host bookkeeping (native balances, deploy nonces, the code registry) lives in
the journal under a reserved namespace, so it is journaled like contract state.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Callable, Dict, Final, List, Type, TypeVar, Union

import cbor2

from dollar_store.errors import DollarStoreError, InsufficientNativeBalance, InvalidAmount, UnknownContract
from dollar_store.runtime.context import CallEnv, derive_address, to_address, to_hex
from dollar_store.runtime.contract import U256_MAX, Contract
from dollar_store.runtime.events import EventLog
from dollar_store.runtime.journal import Journal

log = logging.getLogger(__name__)

C = TypeVar("C", bound=Contract)
T = TypeVar("T")

HOST_NAMESPACE: Final[bytes] = b"\xff" * 20

_K_NATIVE: Final[bytes] = b"native:"
_K_NONCE: Final[bytes] = b"nonce:"
_K_CODE: Final[bytes] = b"code:"

Target = Union[Contract, bytes]


class Host:
    """In-process execution host with atomic transactions."""

    def __init__(self) -> None:
        self.journal = Journal()
        self.events = EventLog()
        self._objects: Dict[bytes, Contract] = {}
        self._created: List[bytes] = []
        self._tx_count = 0

    # ------------------------------------------------------------------ #
    # Native currency
    # ------------------------------------------------------------------ #

    def native_balance(self, addr: bytes) -> int:
        v = self.journal.get(HOST_NAMESPACE, _K_NATIVE + to_address(addr))
        return int.from_bytes(v, "big") if v else 0

    def _set_native(self, addr: bytes, amount: int) -> None:
        if amount < 0 or amount > U256_MAX:
            raise InvalidAmount(f"native balance out of range: {amount}")
        self.journal.set(HOST_NAMESPACE, _K_NATIVE + addr, amount.to_bytes(32, "big"))

    def credit_native(self, addr: bytes, amount: int) -> None:
        """Faucet helper: mint native currency to `addr`."""
        a = to_address(addr)
        if amount < 0:
            raise InvalidAmount("credit amount must be non-negative")
        self._set_native(a, self.native_balance(a) + amount)

    def transfer_native(self, frm: bytes, to: bytes, amount: int) -> None:
        if amount == 0:
            return
        if amount < 0:
            raise InvalidAmount("native transfer amount must be non-negative")
        f = to_address(frm)
        t = to_address(to)
        have = self.native_balance(f)
        if have < amount:
            raise InsufficientNativeBalance(
                details={"account": to_hex(f), "have": have, "need": amount}
            )
        self._set_native(f, have - amount)
        self._set_native(t, self.native_balance(t) + amount)

    # ------------------------------------------------------------------ #
    # Contracts registry
    # ------------------------------------------------------------------ #

    def is_contract(self, addr: bytes) -> bool:
        return self.journal.exists(HOST_NAMESPACE, _K_CODE + bytes(addr))

    def contract_at(self, addr: bytes) -> Contract:
        a = to_address(addr)
        if not self.is_contract(a) or a not in self._objects:
            raise UnknownContract(details={"address": to_hex(a)})
        return self._objects[a]

    def _resolve(self, target: Target) -> Contract:
        if isinstance(target, Contract):
            if not self.is_contract(target.address):
                raise UnknownContract(details={"address": to_hex(target.address)})
            return target
        return self.contract_at(target)

    def _next_address(self, sender: bytes) -> bytes:
        key = _K_NONCE + sender
        v = self.journal.get(HOST_NAMESPACE, key)
        nonce = int.from_bytes(v, "big") if v else 0
        self.journal.set(HOST_NAMESPACE, key, (nonce + 1).to_bytes(8, "big"))
        return derive_address(sender + nonce.to_bytes(8, "big"))

    # ------------------------------------------------------------------ #
    # Execution
    # ------------------------------------------------------------------ #

    def create(self, cls: Type[C], sender: bytes, *args: Any, value: int = 0, **kwargs: Any) -> C:
        """Create a contract inside the current transaction (nested form of `deploy`)."""
        s = to_address(sender)
        addr = self._next_address(s)
        self.journal.set(HOST_NAMESPACE, _K_CODE + addr, cls.__name__.encode("ascii"))
        self.transfer_native(s, addr, value)
        obj = cls(self, addr, CallEnv(s, value), *args, **kwargs)
        self._objects[addr] = obj
        self._created.append(addr)
        log.debug("created %s at %s", cls.__name__, to_hex(addr))
        return obj

    def call(self, sender: bytes, target: Target, method: str, *args: Any, value: int = 0) -> Any:
        """Dispatch `method` on `target` inside the current transaction."""
        contract = self._resolve(target)
        if method.startswith("_"):
            raise AttributeError(f"{type(contract).__name__}.{method} is not callable externally")
        fn = getattr(contract, method)
        env = CallEnv(sender, value)
        self.transfer_native(env.sender, contract.address, value)
        return fn(env, *args)

    def deploy(self, cls: Type[C], sender: bytes, *args: Any, value: int = 0, **kwargs: Any) -> C:
        """Deploy `cls` as its own atomic transaction."""
        return self._atomic(
            f"deploy {cls.__name__}",
            lambda: self.create(cls, sender, *args, value=value, **kwargs),
        )

    def transact(self, sender: bytes, target: Target, method: str, *args: Any, value: int = 0) -> Any:
        """Run one top-level transaction."""
        return self._atomic(method, lambda: self.call(sender, target, method, *args, value=value))

    def _atomic(self, label: str, fn: Callable[[], T]) -> T:
        if self.journal.depth():
            raise RuntimeError("transactions cannot be nested; use Host.call inside a contract")
        tx_index = self._tx_count
        self._tx_count += 1
        mark = self.events.start_tx(tx_index)
        self._created = []
        cid = self.journal.begin()
        try:
            result = fn()
        except DollarStoreError as e:
            self.journal.revert(cid)
            self.events.truncate(mark)
            self._forget_created()
            log.warning("tx %d %s reverted: %s", tx_index, label, e.reason)
            raise
        except Exception:
            self.journal.revert(cid)
            self.events.truncate(mark)
            self._forget_created()
            log.exception("tx %d %s failed unexpectedly", tx_index, label)
            raise
        self.journal.commit(cid)
        log.debug("tx %d %s committed", tx_index, label)
        return result

    def _forget_created(self) -> None:
        """Drop objects created by a reverted transaction; their code keys are already rolled back."""
        for addr in self._created:
            self._objects.pop(addr, None)
        self._created = []

    @property
    def tx_count(self) -> int:
        return self._tx_count

    # ------------------------------------------------------------------ #
    # Commitments
    # ------------------------------------------------------------------ #

    def state_root(self) -> bytes:
        """SHA3-256 over the canonical CBOR encoding of the whole state."""
        rows: List[List[bytes]] = [[a, k, v] for (a, k), v in self.journal.export().items()]
        return hashlib.sha3_256(cbor2.dumps(rows, canonical=True)).digest()


__all__ = ["HOST_NAMESPACE", "Host"]
