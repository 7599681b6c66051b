"""
dollar_store.runtime.context — call environment passed to contracts (deterministic)

Every state-changing contract method receives a `CallEnv` as its first
argument instead of reading an ambient `msg.sender`. The environment carries
only pure data:

- `sender`: the immediate caller address (an account, or a contract when one
  contract calls another inside the same transaction)
- `value`:  native currency attached to the call

Addresses are raw 20-byte `bytes`. Hex strings (with or without "0x") are
accepted by the helpers and normalized to bytes.
"""

from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass
from typing import Any, Dict, Union

from dollar_store.errors import InvalidAddress

ADDRESS_LEN = 20
ZERO_ADDRESS = b"\x00" * ADDRESS_LEN

AddressLike = Union[bytes, bytearray, memoryview, str]


# ----------------------------- helpers ----------------------------- #


def _strip_0x(s: str) -> str:
    return s[2:] if s.startswith(("0x", "0X")) else s


def to_bytes(value: AddressLike) -> bytes:
    """
    Coerce `value` to bytes.
    - If str, interpret as hex (with or without '0x'); odd-length hex is rejected.
    - If a bytes-like object, copy to immutable bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        h = _strip_0x(value.strip())
        if len(h) % 2 != 0:
            raise InvalidAddress(f"hex string must have even length, got {len(h)}")
        try:
            return bytes.fromhex(h)
        except ValueError as e:
            raise InvalidAddress(f"invalid hex string: {value!r}") from e
    raise InvalidAddress(f"cannot convert type {type(value).__name__} to bytes")


def to_hex(b: Union[bytes, bytearray, memoryview]) -> str:
    """Encode bytes as 0x-prefixed lowercase hex."""
    return "0x" + bytes(b).hex()


def to_address(value: AddressLike) -> bytes:
    """Normalize and length-check an address."""
    b = to_bytes(value)
    if len(b) != ADDRESS_LEN:
        raise InvalidAddress(f"address must be exactly {ADDRESS_LEN} bytes, got {len(b)}")
    return b


def derive_address(tag: Union[str, bytes]) -> bytes:
    """
    Produce a stable 20-byte address from a tag (account labels in tests,
    deployer|nonce for contracts).
    """
    raw = tag.encode("utf-8") if isinstance(tag, str) else bytes(tag)
    return hashlib.sha3_256(b"dsk-address|" + raw).digest()[:ADDRESS_LEN]


def _require_non_negative_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise TypeError(f"{name} must be int, got {type(v).__name__}")
    if v < 0:
        raise ValueError(f"{name} must be non-negative, got {v}")
    return v


# ----------------------------- model ------------------------------- #


@dataclass(frozen=True)
class CallEnv:
    """
    Per-call environment.

    Fields
    ------
    sender: Immediate caller address (bytes).
    value:  Native value attached to this call (int).
    """
    sender: bytes
    value: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", to_address(self.sender))
        object.__setattr__(self, "value", _require_non_negative_int("value", self.value))

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["sender"] = to_hex(self.sender)
        return d


__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "AddressLike",
    "CallEnv",
    "derive_address",
    "to_address",
    "to_bytes",
    "to_hex",
]
