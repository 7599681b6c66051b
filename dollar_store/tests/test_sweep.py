from __future__ import annotations

import pytest

from dollar_store.devnet import mint_for
from dollar_store.errors import ProtectedCollateral
from dollar_store.runtime import derive_address
from dollar_store.token.fungible import FungibleToken

from .conftest import FACE, TEST_CAP

DAI_AMOUNT = 1500 * 10**18


@pytest.fixture
def dai(stack):
    whale = derive_address("dai-whale")
    token = stack.host.deploy(FungibleToken, whale, "Dai Stablecoin", "DAI", 18, DAI_AMOUNT)
    stack.host.transact(whale, token, "transfer", stack.controller.address, DAI_AMOUNT)
    return token


def test_sweep_moves_full_foreign_balance_to_governor(stack, dai):
    assert dai.balance_of(stack.controller.address) == DAI_AMOUNT
    assert dai.balance_of(stack.governor) == 0

    swept = stack.host.transact(stack.governor, stack.controller, "sweep", dai.address)

    assert swept == DAI_AMOUNT
    assert dai.balance_of(stack.controller.address) == 0
    assert dai.balance_of(stack.governor) == DAI_AMOUNT


def test_sweep_leaves_collateral_untouched(live_stack, accounts, dai):
    s = live_stack
    mint_for(s, accounts["alice"])
    reserve = s.stablecoin.balance_of(s.controller.address)
    escrow = s.stablecoin.balance_of(s.minter.address)

    s.host.transact(s.governor, s.controller, "sweep", dai.address)

    assert s.stablecoin.balance_of(s.controller.address) == reserve == (TEST_CAP - 1) * FACE
    assert s.stablecoin.balance_of(s.minter.address) == escrow == FACE


def test_sweeping_the_reserve_stablecoin_is_refused(live_stack):
    s = live_stack
    reserve = s.stablecoin.balance_of(s.controller.address)
    with pytest.raises(ProtectedCollateral):
        s.host.transact(s.governor, s.controller, "sweep", s.stablecoin.address)
    assert s.stablecoin.balance_of(s.controller.address) == reserve
    assert s.stablecoin.balance_of(s.governor) == 0


def test_sweep_of_empty_balance_is_a_no_op(stack):
    other = stack.host.deploy(FungibleToken, derive_address("someone"), "Other", "OTH", 18)
    assert stack.host.transact(stack.governor, stack.controller, "sweep", other.address) == 0
    assert other.balance_of(stack.governor) == 0
