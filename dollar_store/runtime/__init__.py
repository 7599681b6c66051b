"""
dollar_store.runtime — deterministic local execution host.

Re-exports the pieces contracts and tests use most:

    from dollar_store.runtime import CallEnv, Contract, Host
"""

from __future__ import annotations

from .context import ADDRESS_LEN, ZERO_ADDRESS, CallEnv, derive_address, to_address, to_bytes, to_hex
from .contract import U256_MAX, Contract
from .events import EventLog, EventRecord
from .host import Host
from .journal import Journal

__all__ = [
    "ADDRESS_LEN",
    "ZERO_ADDRESS",
    "U256_MAX",
    "CallEnv",
    "Contract",
    "EventLog",
    "EventRecord",
    "Host",
    "Journal",
    "derive_address",
    "to_address",
    "to_bytes",
    "to_hex",
]
