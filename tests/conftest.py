"""Shared fixtures for marketsim tests."""

import os
import random

import pytest

from marketsim.config import SimulationConfiguration
from marketsim.models.instrument import Instrument
from marketsim.models.ledger import Ledger
from marketsim.services.instrument_registry import InstrumentRegistry
from marketsim.services.ledger_registry import LedgerRegistry


@pytest.fixture(autouse=True)
def clean_sim_env(monkeypatch):
    """Keep SIM_* / MARKETSIM_* variables from the outer environment out of tests."""
    for name in list(os.environ):
        if name.startswith("SIM_") or name.startswith("MARKETSIM_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ledger():
    return Ledger("trader1", 1000.0)


@pytest.fixture
def instrument():
    return Instrument("YNDX", 100.0, 1000, 10)


@pytest.fixture
def instruments():
    return InstrumentRegistry.from_seeds([
        {"symbol": "YNDX", "price": 100.0, "volume": 1000, "depth": 10},
        {"symbol": "TATN", "price": 50.0, "volume": 500, "depth": 10},
    ])


@pytest.fixture
def ledgers():
    return LedgerRegistry(starting_cash=1000.0)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fast_config():
    """Config that runs in well under a second."""
    return SimulationConfiguration(
        trade_interval=0.0,
        feed_interval=0.01,
        seed=7,
    )
