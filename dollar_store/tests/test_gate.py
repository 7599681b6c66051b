from __future__ import annotations

import pytest

from dollar_store.errors import MintingDisabled, StateGateError
from dollar_store.kids import EVT_MINT_TOGGLED

from .conftest import MINT_TAX


def test_toggle_flips_and_emits_every_time(stack):
    c = stack.controller
    seen = []
    for expected in (True, False, True, False):
        result = stack.host.transact(stack.governor, c, "toggle_mint")
        assert result is expected
        assert c.is_mint_enabled() is expected
        seen.append(stack.host.events.last(address=c.address, name=EVT_MINT_TOGGLED).args["enabled"])
    assert seen == [True, False, True, False]
    assert len(stack.host.events.filter(address=c.address, name=EVT_MINT_TOGGLED)) == 4


def test_mint_is_refused_while_disabled(stack, accounts):
    alice = accounts["alice"]
    stack.host.credit_native(alice, MINT_TAX)
    with pytest.raises(MintingDisabled) as ei:
        stack.host.transact(alice, stack.controller, "mint", value=MINT_TAX)
    assert ei.value.reason == "mint-is-not-enabled"
    assert isinstance(ei.value, StateGateError)
    assert not stack.controller.has_minted(alice)
    assert stack.host.native_balance(alice) == MINT_TAX


def test_mint_is_refused_again_after_disabling(live_stack, accounts):
    live_stack.host.transact(live_stack.governor, live_stack.controller, "toggle_mint")
    bob = accounts["bob"]
    live_stack.host.credit_native(bob, MINT_TAX)
    with pytest.raises(MintingDisabled):
        live_stack.host.transact(bob, live_stack.controller, "mint", value=MINT_TAX)
