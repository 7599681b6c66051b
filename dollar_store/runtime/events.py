from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

from dollar_store.errors import DollarStoreError

# Basic bounds; contracts only emit small events.
MAX_EVENT_NAME_LEN = 64
MAX_KEY_LEN = 64
MAX_BYTES_LEN = 4096
MAX_INT_BITS = 256

# Names and keys are identifier-like: letters/underscore, then letters/digits/underscore.
_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

ArgValue = Any  # constrained at runtime: bytes | int | bool | str


class EventError(DollarStoreError):
    code = "HOST_EVENT_INVALID"
    reason = "invalid event"


@dataclass(frozen=True)
class EventRecord:
    """
    One emitted event with its position in the host's total order.

    tx_index:  0-based index of the transaction that emitted it.
    log_index: 0-based index of the event inside that transaction.
    address:   emitting contract.
    """

    tx_index: int
    log_index: int
    address: bytes
    name: str
    args: Mapping[str, ArgValue]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_index": self.tx_index,
            "log_index": self.log_index,
            "address": "0x" + self.address.hex(),
            "name": self.name,
            "args": {k: ("0x" + v.hex() if isinstance(v, bytes) else v) for k, v in self.args.items()},
        }


def _check_ident(what: str, s: Any, max_len: int) -> str:
    if not isinstance(s, str) or not s:
        raise EventError(f"event {what} must be a non-empty str")
    if len(s) > max_len:
        raise EventError(f"event {what} too long", details={"len": len(s)})
    if not _IDENT_RE.match(s):
        raise EventError(f"event {what} has invalid characters", details={what: s})
    return s


def _check_value(value: Any) -> ArgValue:
    if isinstance(value, (bytes, bytearray)):
        b = bytes(value)
        if len(b) > MAX_BYTES_LEN:
            raise EventError("event bytes arg too long", details={"len": len(b)})
        return b
    if isinstance(value, bool):
        # bool is a subclass of int, so check it before int.
        return value
    if isinstance(value, int):
        if value.bit_length() > MAX_INT_BITS:
            raise EventError("event int arg out of range")
        return value
    if isinstance(value, str):
        if len(value.encode("utf-8")) > MAX_BYTES_LEN:
            raise EventError("event str arg too long")
        return value
    raise EventError(f"unsupported event arg type {type(value).__name__}")


class EventLog:
    """
    Append-only event log with truncate-on-revert.

    The host takes a `mark()` when a transaction begins and calls
    `truncate(mark)` if it reverts, so reverted transactions leave no events.
    """

    def __init__(self) -> None:
        self._records: List[EventRecord] = []
        self._tx_index = 0
        self._log_index = 0

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[EventRecord]:
        return iter(list(self._records))

    def start_tx(self, tx_index: int) -> int:
        self._tx_index = tx_index
        self._log_index = 0
        return len(self._records)

    def mark(self) -> int:
        return len(self._records)

    def truncate(self, mark: int) -> None:
        del self._records[mark:]

    def emit(self, address: bytes, name: str, args: Optional[Mapping[str, Any]] = None) -> EventRecord:
        n = _check_ident("name", name, MAX_EVENT_NAME_LEN)
        checked: Dict[str, ArgValue] = {}
        for k, v in (args or {}).items():
            checked[_check_ident("key", k, MAX_KEY_LEN)] = _check_value(v)
        rec = EventRecord(
            tx_index=self._tx_index,
            log_index=self._log_index,
            address=bytes(address),
            name=n,
            args=checked,
        )
        self._records.append(rec)
        self._log_index += 1
        return rec

    def filter(self, *, address: Optional[bytes] = None, name: Optional[str] = None) -> List[EventRecord]:
        out = []
        for r in self._records:
            if address is not None and r.address != address:
                continue
            if name is not None and r.name != name:
                continue
            out.append(r)
        return out

    def last(self, *, address: Optional[bytes] = None, name: Optional[str] = None) -> Optional[EventRecord]:
        found = self.filter(address=address, name=name)
        return found[-1] if found else None


__all__ = ["EventError", "EventLog", "EventRecord"]
