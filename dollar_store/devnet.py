"""
dollar_store.devnet — deploy the whole stack on a fresh in-process host.

    stack = deploy_local_stack()
    stack.host.transact(stack.governor, stack.controller, "toggle_mint")
    fund_reserve(stack)
    unit_id = mint_for(stack, derive_address("alice"))

Deployment order: stablecoin, capsule factory, capsule minter (wired into the
factory), then the controller, paid for with exactly the collection tax. Every
step is its own transaction on the returned `Host`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dollar_store.capsule import CapsuleCollection, CapsuleFactory, CapsuleMinter, CapsuleVault
from dollar_store.config import Config, load_config
from dollar_store.kids import DollarStoreKids
from dollar_store.runtime import Host, derive_address, to_hex
from dollar_store.token.fungible import FungibleToken

log = logging.getLogger(__name__)


@dataclass
class LocalStack:
    config: Config
    host: Host
    governor: bytes
    protocol_owner: bytes
    tax_collector: bytes
    stablecoin_issuer: bytes
    stablecoin: FungibleToken
    factory: CapsuleFactory
    minter: CapsuleMinter
    vault: CapsuleVault
    controller: DollarStoreKids
    collection: CapsuleCollection

    def addresses(self) -> Dict[str, str]:
        return {
            "governor": to_hex(self.governor),
            "stablecoin": to_hex(self.stablecoin.address),
            "factory": to_hex(self.factory.address),
            "minter": to_hex(self.minter.address),
            "controller": to_hex(self.controller.address),
            "collection": to_hex(self.collection.address),
            "tax_collector": to_hex(self.tax_collector),
        }


def deploy_local_stack(
    config: Optional[Config] = None,
    *,
    governor: Optional[bytes] = None,
    host: Optional[Host] = None,
) -> LocalStack:
    cfg = config or load_config()
    cfg.validate()
    host = host or Host()

    governor = governor or derive_address("governor")
    protocol_owner = derive_address("capsule-protocol")
    tax_collector = derive_address("capsule-tax-collector")
    issuer = derive_address("stablecoin-issuer")

    stablecoin = host.deploy(
        FungibleToken,
        issuer,
        cfg.collateral.token_name,
        cfg.collateral.token_symbol,
        cfg.collateral.decimals,
    )
    factory = host.deploy(CapsuleFactory, protocol_owner, cfg.fees.collection_tax, tax_collector)
    minter = host.deploy(CapsuleMinter, protocol_owner, factory.address, cfg.fees.mint_tax)
    host.transact(protocol_owner, factory, "update_capsule_minter", minter.address)
    vault = CapsuleVault(host, factory, minter)

    host.credit_native(governor, cfg.fees.collection_tax)
    controller = host.deploy(
        DollarStoreKids,
        governor,
        vault,
        stablecoin,
        cfg.collection.base_uri,
        max_units=cfg.collection.max_units,
        face_value=cfg.collateral.face_value,
        name=cfg.collection.name,
        symbol=cfg.collection.symbol,
        value=cfg.fees.collection_tax,
    )
    collection = host.contract_at(controller.capsule_collection())
    log.info("local stack deployed: controller=%s", to_hex(controller.address))
    return LocalStack(
        config=cfg,
        host=host,
        governor=governor,
        protocol_owner=protocol_owner,
        tax_collector=tax_collector,
        stablecoin_issuer=issuer,
        stablecoin=stablecoin,
        factory=factory,
        minter=minter,
        vault=vault,
        controller=controller,
        collection=collection,
    )


def fund_reserve(stack: LocalStack, amount: Optional[int] = None) -> int:
    """Issue stablecoin straight into the controller (defaults to the full cap's collateral)."""
    amount = stack.controller.max_collateral() if amount is None else amount
    stack.host.transact(stack.stablecoin_issuer, stack.stablecoin, "mint", stack.controller.address, amount)
    return amount


def mint_for(stack: LocalStack, account: bytes) -> int:
    """Credit `account` with the mint tax and mint one unit from it."""
    tax = stack.minter.capsule_mint_tax()
    stack.host.credit_native(account, tax)
    return stack.host.transact(account, stack.controller, "mint", value=tax)


def burn_for(stack: LocalStack, account: bytes, unit_id: int) -> None:
    """Approve the controller for `unit_id` and burn it on behalf of `account`."""
    stack.host.transact(account, stack.collection, "approve", stack.controller.address, unit_id)
    stack.host.transact(account, stack.controller, "burn", unit_id)


def summary(stack: LocalStack) -> Dict[str, Any]:
    """Collateral and supply figures for the current state."""
    controller = stack.controller
    collection = stack.collection
    minted = collection.counter()
    return {
        "max_units": controller.max_dsk(),
        "face_value": controller.face_value(),
        "mint_enabled": controller.is_mint_enabled(),
        "minted": minted,
        "reserve_balance": stack.stablecoin.balance_of(controller.address),
        "escrow_balance": stack.stablecoin.balance_of(stack.minter.address),
        "allowance": stack.stablecoin.allowance(controller.address, stack.minter.address),
        "taxes_collected": stack.host.native_balance(stack.tax_collector),
        "transactions": stack.host.tx_count,
        "state_root": to_hex(stack.host.state_root()),
    }


__all__ = ["LocalStack", "burn_for", "deploy_local_stack", "fund_reserve", "mint_for", "summary"]
