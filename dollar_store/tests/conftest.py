# -*- coding: utf-8 -*-
"""
dollar_store.tests.conftest
===========================

Pytest fixtures for the controller and its local host.

- Deterministic account addresses derived from labels (``accounts["alice"]``).
- A small-cap configuration so exhaustion is reachable in a few mints.
- ``stack``: a freshly deployed local stack (mint disabled, reserve empty).
- ``live_stack``: minting enabled and the reserve funded for the full cap.

Usage (inside a test file):
    def test_flow(live_stack, accounts):
        unit_id = mint_for(live_stack, accounts["alice"])
        assert unit_id == 0
"""
from __future__ import annotations

import os
from typing import Dict

import pytest

from dollar_store.config import CollateralParams, CollectionParams, Config, FeeParams, load_config
from dollar_store.devnet import LocalStack, deploy_local_stack, fund_reserve
from dollar_store.runtime import derive_address

# Keep configuration independent of the developer's shell.
for _k in [k for k in os.environ if k.startswith("DSK_")]:
    del os.environ[_k]

TEST_CAP = 5
FACE = 1_000_000
COLLECTION_TAX = 25_000_000_000_000_000
MINT_TAX = 1_000_000_000_000_000
BASE_URI = "http://localhost/"

ACCOUNT_LABELS = ("alice", "bob", "carol", "dave", "erin", "frank", "mallory")


@pytest.fixture(autouse=True)
def _fresh_config_cache():
    load_config.cache_clear()
    yield
    load_config.cache_clear()


@pytest.fixture
def accounts() -> Dict[str, bytes]:
    return {label: derive_address(label) for label in ACCOUNT_LABELS}


@pytest.fixture
def config() -> Config:
    return Config(
        collection=CollectionParams(max_units=TEST_CAP, base_uri=BASE_URI),
        collateral=CollateralParams(face_value=FACE, decimals=6),
        fees=FeeParams(collection_tax=COLLECTION_TAX, mint_tax=MINT_TAX),
    )


@pytest.fixture
def stack(config: Config) -> LocalStack:
    return deploy_local_stack(config)


@pytest.fixture
def live_stack(stack: LocalStack) -> LocalStack:
    stack.host.transact(stack.governor, stack.controller, "toggle_mint")
    fund_reserve(stack)
    return stack
