from __future__ import annotations

from types import SimpleNamespace

import pytest

from dollar_store.capsule import CapsuleFactory, CapsuleMinter
from dollar_store.errors import (CollectionExhausted, CollectionLocked, IncorrectTaxAmount, InvalidAddress,
                                 InvalidRoyaltyRate, NotApproved, NotAuthorized, NotCollectionOwner,
                                 NotMetaAuthority, NotMinter, NotUnitOwner, UnknownContract, UnknownUnit)
from dollar_store.runtime import ZERO_ADDRESS, Host, derive_address
from dollar_store.token.fungible import FungibleToken

COLLECTION_TAX = 100
MINT_TAX = 7

OWNER = derive_address("protocol-owner")
COLLECTOR = derive_address("collector")
CREATOR = derive_address("creator")
ALICE = derive_address("alice")
BOB = derive_address("bob")


@pytest.fixture
def protocol():
    host = Host()
    factory = host.deploy(CapsuleFactory, OWNER, COLLECTION_TAX, COLLECTOR)
    minter = host.deploy(CapsuleMinter, OWNER, factory.address, MINT_TAX)
    host.transact(OWNER, factory, "update_capsule_minter", minter.address)
    token = host.deploy(FungibleToken, CREATOR, "USD Coin", "USDC", 6, 10_000_000)
    host.credit_native(CREATOR, 10**6)
    host.credit_native(ALICE, 10**6)
    return SimpleNamespace(host=host, factory=factory, minter=minter, token=token)


def _create(p, *, private=False, sender=CREATOR):
    addr = p.host.transact(
        sender, p.factory, "create_capsule_collection", "Kids", "KID", sender, private, value=COLLECTION_TAX
    )
    return p.host.contract_at(addr)


def _wrap(p, collection, amount=1_000_000, *, sender=CREATOR, receiver=None):
    p.host.transact(sender, p.token, "approve", p.minter.address, amount)
    return p.host.transact(
        sender,
        p.minter,
        "mint_single_erc20_capsule",
        collection.address,
        p.token.address,
        amount,
        "",
        receiver or sender,
        value=MINT_TAX,
    )


def test_factory_collects_exact_tax_and_registers_collection(protocol):
    p = protocol
    with pytest.raises(IncorrectTaxAmount) as ei:
        p.host.transact(CREATOR, p.factory, "create_capsule_collection", "K", "K", CREATOR, False, value=1)
    assert ei.value.reason == "19"

    c = _create(p)
    assert p.factory.is_capsule(c.address)
    assert p.factory.get_all_capsule_collections() == [c.address]
    assert p.host.native_balance(COLLECTOR) == COLLECTION_TAX
    assert c.owner() == CREATOR
    assert c.token_uri_owner() == CREATOR
    assert c.minter() == p.minter.address
    assert c.factory() == p.factory.address


def test_lock_collection_count_fixes_max_id_once(protocol):
    p = protocol
    c = _create(p)
    assert not c.is_collection_locked()
    p.host.transact(CREATOR, c, "lock_collection_count", 2)
    assert c.max_id() == 1
    with pytest.raises(CollectionLocked):
        p.host.transact(CREATOR, c, "lock_collection_count", 5)
    with pytest.raises(NotCollectionOwner):
        p.host.transact(ALICE, c, "lock_collection_count", 1)

    assert _wrap(p, c) == 0
    assert _wrap(p, c) == 1
    with pytest.raises(CollectionExhausted):
        _wrap(p, c)
    assert c.counter() == 2


def test_only_the_minter_mints_and_burns(protocol):
    p = protocol
    c = _create(p)
    with pytest.raises(NotMinter):
        p.host.transact(CREATOR, c, "mint", CREATOR, "")
    unit_id = _wrap(p, c)
    with pytest.raises(NotMinter):
        p.host.transact(CREATOR, c, "burn", CREATOR, unit_id)


def test_private_collection_mints_only_for_owner(protocol):
    p = protocol
    c = _create(p, private=True)
    assert c.is_collection_private()
    p.host.transact(CREATOR, p.token, "transfer", ALICE, 1_000_000)
    with pytest.raises(NotCollectionOwner):
        _wrap(p, c, sender=ALICE)
    assert _wrap(p, c, receiver=ALICE) == 0
    assert c.owner_of(0) == ALICE


def test_mint_tax_is_exact_and_forwarded(protocol):
    p = protocol
    c = _create(p)
    p.host.transact(CREATOR, p.token, "approve", p.minter.address, 1)
    for wrong in (0, MINT_TAX - 1, MINT_TAX + 1):
        with pytest.raises(IncorrectTaxAmount):
            p.host.transact(
                CREATOR, p.minter, "mint_single_erc20_capsule",
                c.address, p.token.address, 1, "", CREATOR, value=wrong,
            )
    before = p.host.native_balance(COLLECTOR)
    _wrap(p, c, amount=1)
    assert p.host.native_balance(COLLECTOR) == before + MINT_TAX
    assert p.host.native_balance(p.minter.address) == 0


def test_owner_updates_collection_tax_and_collector(protocol):
    p = protocol
    with pytest.raises(NotAuthorized):
        p.host.transact(CREATOR, p.factory, "update_capsule_collection_tax", 1)
    p.host.transact(OWNER, p.factory, "update_capsule_collection_tax", 250)
    assert p.factory.capsule_collection_tax() == 250

    with pytest.raises(IncorrectTaxAmount):
        _create(p)
    addr = p.host.transact(
        CREATOR, p.factory, "create_capsule_collection", "Kids", "KID", CREATOR, False, value=250
    )
    assert p.factory.is_capsule(addr)
    assert p.host.native_balance(COLLECTOR) == 250

    new_collector = derive_address("new-collector")
    with pytest.raises(NotAuthorized):
        p.host.transact(CREATOR, p.factory, "update_tax_collector", new_collector)
    with pytest.raises(InvalidAddress):
        p.host.transact(OWNER, p.factory, "update_tax_collector", ZERO_ADDRESS)
    p.host.transact(OWNER, p.factory, "update_tax_collector", new_collector)
    assert p.factory.tax_collector() == new_collector
    p.host.transact(
        CREATOR, p.factory, "create_capsule_collection", "More", "MOR", CREATOR, False, value=250
    )
    assert p.host.native_balance(new_collector) == 250
    assert p.host.native_balance(COLLECTOR) == 250


def test_owner_updates_mint_tax(protocol):
    p = protocol
    c = _create(p)
    with pytest.raises(NotAuthorized):
        p.host.transact(CREATOR, p.minter, "update_capsule_mint_tax", 0)
    p.host.transact(OWNER, p.minter, "update_capsule_mint_tax", 11)
    assert p.minter.capsule_mint_tax() == 11

    with pytest.raises(IncorrectTaxAmount):
        _wrap(p, c, amount=1)
    p.host.transact(CREATOR, p.token, "approve", p.minter.address, 1)
    before = p.host.native_balance(COLLECTOR)
    p.host.transact(
        CREATOR, p.minter, "mint_single_erc20_capsule",
        c.address, p.token.address, 1, "", CREATOR, value=11,
    )
    assert p.host.native_balance(COLLECTOR) == before + 11


def test_unregistered_collection_is_rejected(protocol):
    p = protocol
    with pytest.raises(UnknownContract):
        p.host.transact(
            CREATOR, p.minter, "mint_single_erc20_capsule",
            p.token.address, p.token.address, 1, "", CREATOR, value=MINT_TAX,
        )


def test_escrow_round_trip_releases_to_receiver(protocol):
    p = protocol
    c = _create(p)
    unit_id = _wrap(p, c, amount=1_000_000)
    record = p.minter.single_erc20_capsule(c.address, unit_id)
    assert (record.token, record.amount) == (p.token.address, 1_000_000)
    assert p.token.balance_of(p.minter.address) == 1_000_000

    before = p.token.balance_of(BOB)
    p.host.transact(CREATOR, p.minter, "burn_single_erc20_capsule", c.address, unit_id, CREATOR, BOB)
    assert p.token.balance_of(BOB) == before + 1_000_000
    assert p.token.balance_of(p.minter.address) == 0
    assert not c.exists(unit_id)
    assert p.minter.single_erc20_capsule(c.address, unit_id).token == ZERO_ADDRESS
    ev = p.host.events.last(name="SingleERC20CapsuleBurnt")
    assert ev.args["unit_id"] == unit_id and ev.args["amount"] == 1_000_000


def test_burn_requires_owner_and_approval(protocol):
    p = protocol
    c = _create(p)
    unit_id = _wrap(p, c)
    with pytest.raises(NotUnitOwner):
        p.host.transact(ALICE, p.minter, "burn_single_erc20_capsule", c.address, unit_id, ALICE, ALICE)
    with pytest.raises(NotApproved):
        p.host.transact(ALICE, p.minter, "burn_single_erc20_capsule", c.address, unit_id, CREATOR, ALICE)

    p.host.transact(CREATOR, c, "approve", ALICE, unit_id)
    assert c.get_approved(unit_id) == ALICE
    p.host.transact(ALICE, p.minter, "burn_single_erc20_capsule", c.address, unit_id, CREATOR, ALICE)
    assert p.token.balance_of(ALICE) == 1_000_000
    with pytest.raises(UnknownUnit):
        c.owner_of(unit_id)


def test_transfer_and_operator_approval(protocol):
    p = protocol
    c = _create(p)
    unit_id = _wrap(p, c)
    with pytest.raises(NotApproved):
        p.host.transact(ALICE, c, "transfer_from", CREATOR, ALICE, unit_id)
    p.host.transact(CREATOR, c, "set_approval_for_all", ALICE, True)
    assert c.is_approved_for_all(CREATOR, ALICE)
    p.host.transact(ALICE, c, "transfer_from", CREATOR, BOB, unit_id)
    assert c.owner_of(unit_id) == BOB
    assert c.balance_of(BOB) == 1 and c.balance_of(CREATOR) == 0


def test_metadata_authority_and_token_uri(protocol):
    p = protocol
    c = _create(p)
    with pytest.raises(NotMetaAuthority):
        p.host.transact(ALICE, c, "set_base_uri", "https://x/")
    p.host.transact(CREATOR, c, "set_base_uri", "https://x/")
    unit_id = _wrap(p, c)
    assert c.token_uri(unit_id) == f"https://x/{unit_id}"
    ev = p.host.events.last(name="BaseURIUpdated")
    assert ev.args == {"previous": "", "current": "https://x/"}

    p.host.transact(CREATOR, c, "update_token_uri_owner", ALICE)
    assert c.token_uri_owner() == ALICE
    with pytest.raises(NotMetaAuthority):
        p.host.transact(CREATOR, c, "set_base_uri", "https://y/")
    with pytest.raises(UnknownUnit):
        c.token_uri(99)


def test_royalty_config_bounds_and_info(protocol):
    p = protocol
    c = _create(p)
    assert c.royalty_info(0, 0) == (ZERO_ADDRESS, 0)
    with pytest.raises(InvalidRoyaltyRate):
        p.host.transact(CREATOR, c, "update_royalty_config", BOB, 10_001)
    with pytest.raises(NotCollectionOwner):
        p.host.transact(ALICE, c, "update_royalty_config", BOB, 100)

    p.host.transact(CREATOR, c, "update_royalty_config", BOB, 100)
    assert c.royalty_info(0, 500) == (BOB, 5)
    ev = p.host.events.last(name="RoyaltyConfigUpdated")
    assert ev.args == {"old_receiver": ZERO_ADDRESS, "new_receiver": BOB, "old_rate": 0, "new_rate": 100}

    p.host.transact(CREATOR, c, "update_royalty_config", BOB, 10_000)
    assert c.royalty_info(3, 1234) == (BOB, 1234)
