"""Benchmark ledger and instrument lock paths, alone and under contention."""

import random
from concurrent.futures import ThreadPoolExecutor

import pytest

from marketsim.exceptions import InsufficientFunds, InsufficientPosition
from marketsim.models.instrument import Instrument
from marketsim.models.ledger import Ledger
from marketsim.services.ledger_registry import LedgerRegistry
from marketsim.services.market_feed import next_price, next_volume


def test_buy_sell_cycle(benchmark):
    """Benchmark an uncontended buy followed by a sell."""
    ledger = Ledger("bench", 1_000_000.0)

    def cycle():
        ledger.buy("X", 10.0, 5)
        return ledger.sell("X", 10.0, 5)

    trade = benchmark(cycle)
    assert trade.side == "sell"
    assert ledger.get_position("X") is None


def test_instrument_update(benchmark):
    """Benchmark one feed update under the instrument lock."""
    instrument = Instrument("X", 100.0, 1000, 10)
    rng = random.Random(0)

    def update():
        return instrument.update(lambda p: next_price(p, rng), lambda v: next_volume(v, rng))

    price, volume = benchmark(update)
    assert price > 0
    assert volume >= 0


def test_instrument_snapshot(benchmark):
    """Benchmark a consistent price/volume read."""
    instrument = Instrument("X", 100.0, 1000, 10)
    assert benchmark(instrument.snapshot) == (100.0, 1000)


def test_contended_single_ledger(benchmark):
    """Benchmark many threads trading against the same ledger."""
    ledger = Ledger("bench", 1_000_000.0)

    def trade(i):
        try:
            if i % 2 == 0:
                ledger.buy("X", 1.0, 1)
            else:
                ledger.sell("X", 1.0, 1)
            return True
        except (InsufficientFunds, InsufficientPosition):
            return False

    def contended():
        with ThreadPoolExecutor(max_workers=10) as executor:
            return sum(executor.map(trade, range(200)))

    result = benchmark(contended)
    assert 0 < result <= 200


def test_independent_ledgers(benchmark):
    """Benchmark many threads each trading against their own ledger."""
    ledgers = LedgerRegistry(starting_cash=1_000_000.0)

    def trade(i):
        ledger = ledgers.get_or_create(f"trader{i % 10}")
        ledger.buy("X", 1.0, 1)
        ledger.sell("X", 1.0, 1)
        return True

    def independent():
        with ThreadPoolExecutor(max_workers=10) as executor:
            return sum(executor.map(trade, range(200)))

    result = benchmark(independent)
    assert result == 200


if __name__ == '__main__':
    pytest.main([__file__, '-v', '--benchmark-only'])
