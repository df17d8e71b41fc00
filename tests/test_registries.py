"""Tests for the instrument and ledger registries."""

import threading

import pytest

from marketsim.exceptions import RegistryFrozen, UnknownInstrument
from marketsim.models.instrument import Instrument
from marketsim.services.instrument_registry import InstrumentRegistry
from marketsim.services.ledger_registry import LedgerRegistry


def test_from_seeds_builds_frozen_registry(instruments):
    assert instruments.frozen
    assert instruments.symbols() == ["YNDX", "TATN"]
    assert len(instruments) == 2
    assert "TATN" in instruments
    assert instruments.get("TATN").snapshot() == (50.0, 500)


def test_frozen_registry_rejects_additions(instruments):
    with pytest.raises(RegistryFrozen):
        instruments.add(Instrument("MGNT", 100.0, 1000, 10))
    assert not instruments.has_instrument("MGNT")


def test_unknown_symbol(instruments):
    with pytest.raises(UnknownInstrument):
        instruments.get("NOPE")
    # Also usable where a plain mapping miss is expected.
    with pytest.raises(KeyError):
        instruments.get("NOPE")


def test_duplicate_symbol_rejected():
    registry = InstrumentRegistry([Instrument("X", 1.0, 1)])
    with pytest.raises(ValueError):
        registry.add(Instrument("X", 2.0, 2))


def test_empty_registry_cannot_freeze():
    with pytest.raises(ValueError):
        InstrumentRegistry().freeze()


def test_current_prices(instruments):
    assert instruments.current_prices() == {"YNDX": 100.0, "TATN": 50.0}


def test_get_or_create_returns_same_ledger(ledgers):
    first = ledgers.get_or_create("trader1")
    assert first.cash == 1000.0
    assert ledgers.get_or_create("trader1") is first
    assert ledgers.get("trader2") is None
    assert ledgers.usernames() == ["trader1"]


def test_concurrent_first_touch_creates_one_ledger(ledgers):
    barrier = threading.Barrier(32)
    seen = []
    seen_lock = threading.Lock()

    def touch():
        barrier.wait()
        ledger = ledgers.get_or_create("trader1")
        with seen_lock:
            seen.append(ledger)

    threads = [threading.Thread(target=touch) for _ in range(32)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(ledgers) == 1
    assert len(seen) == 32
    assert all(ledger is seen[0] for ledger in seen)


def test_total_value(ledgers):
    ledgers.get_or_create("trader1").buy("X", 10.0, 5)
    ledgers.get_or_create("trader2")
    assert ledgers.total_value({"X": 20.0}) == pytest.approx(950.0 + 100.0 + 1000.0)


def test_negative_starting_cash_rejected():
    with pytest.raises(ValueError):
        LedgerRegistry(starting_cash=-5.0)
