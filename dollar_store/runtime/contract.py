"""
dollar_store.runtime.contract — base class for contracts running on the host.

A contract is a plain Python object bound to a `Host` and an address. It keeps
*no* durable state in attributes: everything that must survive (or be undone
by) a transaction is written to the host journal under the contract's address
through the typed helpers below. Attributes are reserved for immutables wired
in by the constructor (references to collaborators).

Conventions
-----------
- The constructor signature is ``(host, address, env, *args)``; it runs
  exactly once, inside the deploying transaction.
- State-changing methods take a `CallEnv` first; read views take none.
- Integers are stored as 32-byte big-endian u256, flags as b"\\x01"/b"\\x00",
  addresses as raw 20-byte values, strings as UTF-8.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final, Optional

from dollar_store.errors import InvalidAmount
from dollar_store.runtime.context import ADDRESS_LEN, ZERO_ADDRESS, CallEnv

if TYPE_CHECKING:  # pragma: no cover
    from dollar_store.runtime.host import Host

U256_MAX: Final[int] = (1 << 256) - 1


class Contract:
    """Storage-backed contract base."""

    def __init__(self, host: "Host", address: bytes, env: CallEnv) -> None:
        self.host = host
        self.address = bytes(address)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"<{type(self).__name__} 0x{self.address.hex()}>"

    # ------------------------------------------------------------------ #
    # Raw storage
    # ------------------------------------------------------------------ #

    def _get(self, key: bytes) -> Optional[bytes]:
        return self.host.journal.get(self.address, key)

    def _set(self, key: bytes, value: bytes) -> None:
        self.host.journal.set(self.address, key, value)

    def _delete(self, key: bytes) -> None:
        self.host.journal.delete(self.address, key)

    # ------------------------------------------------------------------ #
    # Typed storage
    # ------------------------------------------------------------------ #

    def _get_u256(self, key: bytes) -> int:
        v = self._get(key)
        return int.from_bytes(v, "big") if v else 0

    def _set_u256(self, key: bytes, n: int) -> None:
        if not isinstance(n, int) or isinstance(n, bool) or n < 0 or n > U256_MAX:
            raise InvalidAmount(f"value out of u256 range: {n!r}")
        self._set(key, int(n).to_bytes(32, "big"))

    def _get_bool(self, key: bytes) -> bool:
        return self._get(key) == b"\x01"

    def _set_bool(self, key: bytes, flag: bool) -> None:
        self._set(key, b"\x01" if flag else b"\x00")

    def _get_bytes(self, key: bytes) -> bytes:
        v = self._get(key)
        return v if v else b""

    def _set_bytes(self, key: bytes, value: bytes) -> None:
        self._set(key, bytes(value))

    def _get_addr(self, key: bytes) -> bytes:
        v = self._get(key)
        return v if v and len(v) == ADDRESS_LEN else ZERO_ADDRESS

    def _get_str(self, key: bytes) -> str:
        return self._get_bytes(key).decode("utf-8")

    def _set_str(self, key: bytes, value: str) -> None:
        self._set(key, value.encode("utf-8"))

    # ------------------------------------------------------------------ #
    # Events & calls
    # ------------------------------------------------------------------ #

    def _emit(self, name: str, **args: Any) -> None:
        self.host.events.emit(self.address, name, args)

    def _env(self, value: int = 0) -> CallEnv:
        """Environment for a call made *by* this contract."""
        return CallEnv(self.address, value)

    def _call(self, target: Any, method: str, *args: Any, value: int = 0) -> Any:
        """Call another contract inside the current transaction."""
        return self.host.call(self.address, target, method, *args, value=value)


__all__ = ["Contract", "U256_MAX"]
