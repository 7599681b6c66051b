"""
dollar_store.runtime.journal — journaling key/value state with checkpoints.

All durable state on the local host (every contract's storage plus native
balances) lives in one mapping keyed by ``(address, key) -> value``. Writes are
recorded in a stack of checkpoints using a *first-write log*: the first time a
slot is touched inside a checkpoint, its previous value (or a MISSING marker)
is remembered.

- ``commit(cid)`` folds the checkpoint's log into its parent without
  overwriting entries the parent already recorded.
- ``revert(cid)`` restores every touched slot to its pre-checkpoint value.

Reads are always served from the live mapping, so nested calls inside one
transaction see each other's writes immediately.

Deterministic: no clocks, no randomness, iteration order sorted where exposed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

Slot = Tuple[bytes, bytes]

_MISSING = object()


@dataclass
class _Checkpoint:
    id: int
    # first-write log: slot -> previous value (or _MISSING)
    prev: Dict[Slot, object] = field(default_factory=dict)


def _b(x: bytes | bytearray | memoryview, *, name: str) -> bytes:
    if not isinstance(x, (bytes, bytearray, memoryview)):
        raise TypeError(f"{name} must be bytes-like")
    return bytes(x)


class Journal:
    """
    A write journal with nested checkpoints over a flat slot mapping.

    API highlights
    --------------
    - get(addr, key) / set(addr, key, value) / delete(addr, key)
    - begin() -> id / commit(id) / revert(id) / depth()
    - items(addr) for inspection, export() for state commitments
    """

    def __init__(self, base: Optional[Dict[Slot, bytes]] = None) -> None:
        self._state: Dict[Slot, bytes] = dict(base or {})
        self._stack: List[_Checkpoint] = []
        self._next_id = 1

    # --------------------------------------------------------------------- #
    # Reads
    # --------------------------------------------------------------------- #

    def get(self, addr: bytes, key: bytes) -> Optional[bytes]:
        return self._state.get((_b(addr, name="addr"), _b(key, name="key")))

    def exists(self, addr: bytes, key: bytes) -> bool:
        return (_b(addr, name="addr"), _b(key, name="key")) in self._state

    def items(self, addr: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """Yield (key, value) pairs for one address in key order."""
        a = _b(addr, name="addr")
        for (sa, k), v in sorted(self._state.items()):
            if sa == a:
                yield k, v

    def export(self) -> Dict[Slot, bytes]:
        """Return a copy of the live state (sorted by slot)."""
        return dict(sorted(self._state.items()))

    # --------------------------------------------------------------------- #
    # Writes
    # --------------------------------------------------------------------- #

    def _touch(self, slot: Slot) -> None:
        if self._stack:
            top = self._stack[-1]
            if slot not in top.prev:
                top.prev[slot] = self._state.get(slot, _MISSING)

    def set(self, addr: bytes, key: bytes, value: bytes) -> None:
        slot = (_b(addr, name="addr"), _b(key, name="key"))
        self._touch(slot)
        self._state[slot] = _b(value, name="value")

    def delete(self, addr: bytes, key: bytes) -> None:
        slot = (_b(addr, name="addr"), _b(key, name="key"))
        if slot in self._state:
            self._touch(slot)
            del self._state[slot]

    # --------------------------------------------------------------------- #
    # Checkpointing
    # --------------------------------------------------------------------- #

    def depth(self) -> int:
        """Number of open checkpoints (0 when idle)."""
        return len(self._stack)

    def begin(self) -> int:
        cid = self._next_id
        self._next_id += 1
        self._stack.append(_Checkpoint(cid))
        return cid

    def _pop(self, cid: int) -> _Checkpoint:
        if not self._stack or self._stack[-1].id != cid:
            raise RuntimeError(f"checkpoint {cid} is not the innermost open checkpoint")
        return self._stack.pop()

    def commit(self, cid: int) -> None:
        cp = self._pop(cid)
        if self._stack:
            parent = self._stack[-1]
            for slot, prev in cp.prev.items():
                parent.prev.setdefault(slot, prev)

    def revert(self, cid: int) -> None:
        cp = self._pop(cid)
        for slot, prev in cp.prev.items():
            if prev is _MISSING:
                self._state.pop(slot, None)
            else:
                self._state[slot] = prev  # type: ignore[assignment]


__all__ = ["Journal", "Slot"]
