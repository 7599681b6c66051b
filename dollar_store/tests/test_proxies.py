from __future__ import annotations

import pytest

from dollar_store.devnet import mint_for
from dollar_store.errors import InvalidRoyaltyRate, NotCollectionOwner, NotMetaAuthority
from dollar_store.runtime import ZERO_ADDRESS

from .conftest import BASE_URI, MINT_TAX


def test_transfer_collection_ownership(stack, accounts):
    alice = accounts["alice"]
    assert stack.collection.owner() == stack.controller.address
    stack.host.transact(stack.governor, stack.controller, "transfer_collection_ownership", alice)
    assert stack.collection.owner() == alice
    ev = stack.host.events.last(address=stack.collection.address, name="OwnershipTransferred")
    assert ev.args == {"previous": stack.controller.address, "current": alice}

    # the controller no longer owns the collection, so further owner-only forwards fail downstream
    with pytest.raises(NotCollectionOwner):
        stack.host.transact(stack.governor, stack.controller, "update_royalty_config", alice, 100)


def test_minting_stops_once_collection_ownership_moves(live_stack, accounts):
    s = live_stack
    s.host.transact(s.governor, s.controller, "transfer_collection_ownership", accounts["alice"])
    s.host.credit_native(accounts["bob"], MINT_TAX)
    with pytest.raises(NotCollectionOwner):
        s.host.transact(accounts["bob"], s.controller, "mint", value=MINT_TAX)
    assert not s.controller.has_minted(accounts["bob"])


def test_update_meta_authority(stack, accounts):
    alice = accounts["alice"]
    assert stack.collection.token_uri_owner() == stack.controller.address
    stack.host.transact(stack.governor, stack.controller, "update_meta_authority", alice)
    assert stack.collection.token_uri_owner() == alice

    with pytest.raises(NotMetaAuthority):
        stack.host.transact(stack.governor, stack.controller, "update_base_uri", "https://x/")
    stack.host.transact(alice, stack.collection, "set_base_uri", "https://x/")
    assert stack.collection.base_uri() == "https://x/"


def test_update_base_uri(live_stack, accounts):
    s = live_stack
    unit_id = mint_for(s, accounts["alice"])
    assert s.collection.base_uri() == BASE_URI
    s.host.transact(s.governor, s.controller, "update_base_uri", "https://www.example.org/")
    assert s.collection.base_uri() == "https://www.example.org/"
    assert s.collection.token_uri(unit_id) == f"https://www.example.org/{unit_id}"


def test_update_royalty_config(stack, accounts):
    bob = accounts["bob"]
    coll = stack.collection
    assert coll.royalty_receiver() == ZERO_ADDRESS
    assert coll.royalty_rate() == 0

    stack.host.transact(stack.governor, stack.controller, "update_royalty_config", bob, 200)

    assert coll.royalty_receiver() == bob
    assert coll.royalty_rate() == 200
    ev = stack.host.events.last(address=coll.address, name="RoyaltyConfigUpdated")
    assert ev.args == {"old_receiver": ZERO_ADDRESS, "new_receiver": bob, "old_rate": 0, "new_rate": 200}


def test_royalty_info(stack, accounts):
    coll = stack.collection
    assert coll.royalty_info(0, 0) == (ZERO_ADDRESS, 0)
    stack.host.transact(stack.governor, stack.controller, "update_royalty_config", accounts["bob"], 100)
    assert coll.royalty_info(0, 500) == (accounts["bob"], 5)


@pytest.mark.parametrize("rate", [10_001, 20_000])
def test_royalty_rate_above_100_percent_is_rejected(stack, accounts, rate):
    root = stack.host.state_root()
    with pytest.raises(InvalidRoyaltyRate):
        stack.host.transact(stack.governor, stack.controller, "update_royalty_config", accounts["bob"], rate)
    assert stack.host.state_root() == root
    assert stack.collection.royalty_rate() == 0


def test_full_rate_is_accepted(stack, accounts):
    stack.host.transact(stack.governor, stack.controller, "update_royalty_config", accounts["bob"], 10_000)
    assert stack.collection.royalty_rate() == 10_000
