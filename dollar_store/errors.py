"""
Error types for the Dollar Store Kids controller and its local host.

Every failure surfaces as a typed exception carrying a stable machine `code`,
the human-readable revert `reason` (kept identical to the on-chain strings so
callers can match either) and optional structured `details`.

Hierarchy
---------
DollarStoreError (base)
 ├─ AuthorizationError      : wrong caller for a guarded operation
 │   ├─ NotAuthorized          ("not governor")
 │   ├─ ProtectedCollateral    (sweep of the reserve asset)
 │   ├─ NotCollectionOwner
 │   ├─ NotMetaAuthority
 │   └─ NotMinter
 ├─ StateGateError          : operation attempted while a gate is closed
 │   └─ MintingDisabled        ("mint-is-not-enabled")
 ├─ PaymentError            : wrong native payment
 │   ├─ IncorrectTaxAmount     ("19")
 │   └─ InsufficientNativeBalance
 ├─ EligibilityError        : single-shot eligibility already used
 │   └─ AlreadyMinted          ("already-minted-dsk")
 └─ ExternalCallFailure     : failure bubbling up from a collaborator
     ├─ InvalidRoyaltyRate, NotUnitOwner, NotApproved, UnknownUnit,
     │  CollectionLocked, InvalidAddress, InvalidAmount, UnknownContract
     └─ ResourceExhaustionError
         ├─ InsufficientCollateralBalance ("ERC20: transfer amount exceeds balance")
         ├─ InsufficientAllowance
         └─ CollectionExhausted

ConfigError is separate (a ValueError) and never raised inside a transaction.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional


class DollarStoreError(Exception):
    """Base class for every revert raised by contracts running on the host."""

    code: str = "DSK_ERROR"
    reason: str = "reverted"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.reason
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "reason": self.reason,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=_hexify)
            except (TypeError, ValueError):
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


def _hexify(v: Any) -> Any:
    if isinstance(v, (bytes, bytearray)):
        return "0x" + bytes(v).hex()
    return str(v)


# ------------------------------ categories ---------------------------------


class AuthorizationError(DollarStoreError):
    code = "DSK_UNAUTHORIZED"
    reason = "unauthorized"


class StateGateError(DollarStoreError):
    code = "DSK_GATE_CLOSED"
    reason = "gate closed"


class PaymentError(DollarStoreError):
    code = "DSK_PAYMENT"
    reason = "bad payment"


class EligibilityError(DollarStoreError):
    code = "DSK_INELIGIBLE"
    reason = "not eligible"


class ExternalCallFailure(DollarStoreError):
    code = "DSK_EXTERNAL"
    reason = "external call failed"


class ResourceExhaustionError(ExternalCallFailure):
    code = "DSK_EXHAUSTED"
    reason = "resource exhausted"


# ------------------------------ authorization ------------------------------


class NotAuthorized(AuthorizationError):
    """Caller is not the governor of the controller."""
    code = "DSK_NOT_AUTHORIZED"
    reason = "not governor"


class ProtectedCollateral(AuthorizationError):
    """The reserve stablecoin can never be swept out of the controller."""
    code = "DSK_PROTECTED_COLLATERAL"
    reason = "protected-collateral"


class NotCollectionOwner(AuthorizationError):
    code = "CAPSULE_NOT_OWNER"
    reason = "not-collection-owner"


class NotMetaAuthority(AuthorizationError):
    code = "CAPSULE_NOT_META_AUTHORITY"
    reason = "not-token-uri-owner"


class NotMinter(AuthorizationError):
    code = "CAPSULE_NOT_MINTER"
    reason = "not-minter"


# ------------------------------ gates & payment ----------------------------


class MintingDisabled(StateGateError):
    code = "DSK_MINTING_DISABLED"
    reason = "mint-is-not-enabled"


class IncorrectTaxAmount(PaymentError):
    """Native payment differs from the required tax (Capsule error code 19)."""
    code = "DSK_INCORRECT_TAX_AMOUNT"
    reason = "19"

    def __init__(self, *, expected: int, actual: int, message: str = "") -> None:
        super().__init__(message, details={"expected": int(expected), "actual": int(actual)})


class InsufficientNativeBalance(PaymentError):
    code = "HOST_INSUFFICIENT_NATIVE"
    reason = "insufficient native balance"


class AlreadyMinted(EligibilityError):
    code = "DSK_ALREADY_MINTED"
    reason = "already-minted-dsk"


# ------------------------------ external -----------------------------------


class InvalidRoyaltyRate(ExternalCallFailure):
    code = "CAPSULE_INVALID_ROYALTY_RATE"
    reason = "royalty-rate-too-high"


class NotUnitOwner(ExternalCallFailure):
    code = "CAPSULE_NOT_UNIT_OWNER"
    reason = "not-capsule-owner"


class NotApproved(ExternalCallFailure):
    code = "CAPSULE_NOT_APPROVED"
    reason = "caller is not token owner or approved"


class UnknownUnit(ExternalCallFailure):
    code = "CAPSULE_UNKNOWN_UNIT"
    reason = "invalid token ID"


class CollectionLocked(ExternalCallFailure):
    code = "CAPSULE_COLLECTION_LOCKED"
    reason = "collection-is-locked"


class InvalidAddress(ExternalCallFailure):
    code = "DSK_INVALID_ADDRESS"
    reason = "invalid address"


class InvalidAmount(ExternalCallFailure):
    code = "DSK_INVALID_AMOUNT"
    reason = "invalid amount"


class UnknownContract(ExternalCallFailure):
    code = "HOST_UNKNOWN_CONTRACT"
    reason = "no contract at address"


class InsufficientCollateralBalance(ResourceExhaustionError):
    code = "DSK_INSUFFICIENT_BALANCE"
    reason = "ERC20: transfer amount exceeds balance"


class InsufficientAllowance(ResourceExhaustionError):
    code = "DSK_INSUFFICIENT_ALLOWANCE"
    reason = "ERC20: insufficient allowance"


class CollectionExhausted(ResourceExhaustionError):
    code = "CAPSULE_COLLECTION_EXHAUSTED"
    reason = "token-id-too-high"


# ------------------------------ configuration ------------------------------


class ConfigError(ValueError):
    """Invalid or inconsistent configuration values."""


__all__ = [
    "DollarStoreError",
    "AuthorizationError",
    "StateGateError",
    "PaymentError",
    "EligibilityError",
    "ExternalCallFailure",
    "ResourceExhaustionError",
    "NotAuthorized",
    "ProtectedCollateral",
    "NotCollectionOwner",
    "NotMetaAuthority",
    "NotMinter",
    "MintingDisabled",
    "IncorrectTaxAmount",
    "InsufficientNativeBalance",
    "AlreadyMinted",
    "InvalidRoyaltyRate",
    "NotUnitOwner",
    "NotApproved",
    "UnknownUnit",
    "CollectionLocked",
    "InvalidAddress",
    "InvalidAmount",
    "UnknownContract",
    "InsufficientCollateralBalance",
    "InsufficientAllowance",
    "CollectionExhausted",
    "ConfigError",
]
