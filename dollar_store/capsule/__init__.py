"""
dollar_store.capsule — reference Vault Protocol (capsule collections).

    CapsuleFactory     creates collections against a collection tax
    CapsuleCollection  unit registry with metadata authority and royalties
    CapsuleMinter      wraps/unwraps fungible collateral against a mint tax
    CapsuleVault       `CollectionIssuance` facade the controller is built on
"""

from __future__ import annotations

from .collection import MAX_BPS, CapsuleCollection
from .factory import CapsuleFactory
from .interfaces import CollectionIssuance, FungibleTransfer
from .minter import CapsuleMinter, SingleERC20Capsule
from .vault import CapsuleVault

__all__ = [
    "MAX_BPS",
    "CapsuleCollection",
    "CapsuleFactory",
    "CapsuleMinter",
    "CapsuleVault",
    "CollectionIssuance",
    "FungibleTransfer",
    "SingleERC20Capsule",
]
