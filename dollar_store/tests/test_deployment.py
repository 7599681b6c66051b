from __future__ import annotations

import pytest

from dollar_store.config import Config
from dollar_store.devnet import deploy_local_stack
from dollar_store.errors import IncorrectTaxAmount, InvalidAmount
from dollar_store.kids import DollarStoreKids

from .conftest import BASE_URI, COLLECTION_TAX, FACE, TEST_CAP


def test_deployment_state(stack):
    c = stack.controller
    coll = stack.collection

    assert c.governor() == stack.governor
    assert c.max_dsk() == TEST_CAP
    assert c.face_value() == FACE
    assert c.max_collateral() == TEST_CAP * FACE
    assert c.is_mint_enabled() is False
    assert c.capsule_minter() == stack.minter.address
    assert c.capsule_collection() == coll.address
    assert c.stablecoin() == stack.stablecoin.address

    # collection is locked to exactly the cap; ids start at 0
    assert coll.is_collection_locked()
    assert coll.max_id() == TEST_CAP - 1
    assert coll.counter() == 0
    assert coll.is_collection_private()
    assert coll.owner() == c.address
    assert coll.token_uri_owner() == c.address
    assert coll.base_uri() == BASE_URI
    assert (coll.name(), coll.symbol()) == ("Dollar Store Kids", "DSK")


def test_allowance_covers_the_whole_cap(stack):
    allowance = stack.stablecoin.allowance(stack.controller.address, stack.minter.address)
    assert allowance == TEST_CAP * FACE


def test_collection_tax_is_forwarded_to_the_collector(stack):
    assert stack.host.native_balance(stack.tax_collector) == COLLECTION_TAX
    assert stack.host.native_balance(stack.controller.address) == 0
    assert stack.host.native_balance(stack.factory.address) == 0


def test_construction_requires_exact_collection_tax(stack, accounts):
    deployer = accounts["mallory"]
    stack.host.credit_native(deployer, COLLECTION_TAX * 2)
    for wrong in (0, COLLECTION_TAX + 1):
        with pytest.raises(IncorrectTaxAmount):
            stack.host.deploy(
                DollarStoreKids,
                deployer,
                stack.vault,
                stack.stablecoin,
                BASE_URI,
                max_units=3,
                face_value=FACE,
                value=wrong,
            )
    assert stack.host.native_balance(deployer) == COLLECTION_TAX * 2
    assert len(stack.factory.get_all_capsule_collections()) == 1


def test_construction_rejects_non_positive_parameters(stack, accounts):
    deployer = accounts["mallory"]
    stack.host.credit_native(deployer, COLLECTION_TAX)
    with pytest.raises(InvalidAmount):
        stack.host.deploy(
            DollarStoreKids,
            deployer,
            stack.vault,
            stack.stablecoin,
            BASE_URI,
            max_units=0,
            face_value=FACE,
            value=COLLECTION_TAX,
        )


def test_deploys_with_default_configuration():
    stack = deploy_local_stack(Config())
    assert stack.controller.max_dsk() == 1000
    assert stack.collection.max_id() == 999
    assert stack.controller.max_collateral() == 1000 * 1_000_000
