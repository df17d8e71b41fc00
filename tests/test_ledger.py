"""Tests for ledger buy/sell semantics and their atomicity under threads."""

import random
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor

import pytest

from marketsim.exceptions import InsufficientFunds, InsufficientPosition, InvalidOrder, LedgerError
from marketsim.models.ledger import Ledger


def test_buy_then_sell_at_higher_price(ledger):
    trade = ledger.buy("X", 10.0, 5)
    assert trade.side == "buy"
    assert trade.cash_after == 950.0
    assert ledger.cash == 950.0
    pos = ledger.get_position("X")
    assert pos.volume == 5
    assert pos.price == 10.0

    ledger.sell("X", 12.0, 5)
    assert ledger.cash == 1010.0
    assert ledger.get_position("X") is None


def test_buy_beyond_cash_is_rejected():
    ledger = Ledger("trader1", 100.0)
    with pytest.raises(InsufficientFunds) as exc_info:
        ledger.buy("X", 50.0, 3)
    assert exc_info.value.required == 150.0
    assert exc_info.value.available == 100.0
    assert ledger.cash == 100.0
    assert ledger.get_position("X") is None
    assert ledger.trades() == []


def test_sell_without_position_is_rejected(ledger):
    with pytest.raises(InsufficientPosition) as exc_info:
        ledger.sell("Y", 10.0, 1)
    assert exc_info.value.held == 0
    assert ledger.cash == 1000.0


def test_sell_more_than_held_leaves_position_untouched(ledger):
    ledger.buy("X", 10.0, 3)
    with pytest.raises(InsufficientPosition):
        ledger.sell("X", 10.0, 5)
    assert ledger.get_position("X").volume == 3
    assert ledger.cash == 970.0


def test_round_trip_restores_cash(ledger):
    ledger.buy("X", 25.5, 4)
    ledger.sell("X", 25.5, 4)
    assert ledger.cash == pytest.approx(1000.0)
    assert ledger.positions() == {}


def test_partial_sell_keeps_position_and_updates_price(ledger):
    ledger.buy("X", 10.0, 5)
    ledger.sell("X", 11.0, 2)
    pos = ledger.get_position("X")
    assert pos.volume == 3
    assert pos.price == 11.0


def test_buy_exactly_all_cash(ledger):
    ledger.buy("X", 100.0, 10)
    assert ledger.cash == 0.0
    with pytest.raises(InsufficientFunds):
        ledger.buy("X", 0.01, 1)


def test_zero_price_is_allowed(ledger):
    ledger.buy("X", 0.0, 3)
    assert ledger.cash == 1000.0
    assert ledger.get_position("X").volume == 3


@pytest.mark.parametrize("price,quantity", [(10.0, 0), (10.0, -1), (-1.0, 1)])
def test_invalid_orders_raise_without_side_effects(ledger, price, quantity):
    with pytest.raises(InvalidOrder):
        ledger.buy("X", price, quantity)
    with pytest.raises(ValueError):
        ledger.sell("X", price, quantity)
    assert ledger.cash == 1000.0
    assert ledger.positions() == {}


def test_ledger_errors_share_a_base_class():
    assert issubclass(InsufficientFunds, LedgerError)
    assert issubclass(InsufficientPosition, LedgerError)


def test_snapshot_is_detached_from_ledger(ledger):
    ledger.buy("X", 10.0, 5)
    snap = ledger.snapshot()
    snap.positions["X"].volume = 999
    assert ledger.get_position("X").volume == 5
    assert snap.cash == 950.0
    assert [t.side for t in snap.trades] == ["buy"]


def test_market_value_marks_positions(ledger):
    ledger.buy("X", 10.0, 5)
    ledger.buy("Y", 20.0, 1)
    # Y has no supplied price and falls back to its last traded price.
    assert ledger.market_value({"X": 12.0}) == pytest.approx(930.0 + 60.0 + 20.0)


def test_to_dict(ledger):
    ledger.buy("X", 10.0, 5)
    data = ledger.to_dict()
    assert data["username"] == "trader1"
    assert data["positions"]["X"] == {"symbol": "X", "price": 10.0, "volume": 5}
    assert data["trades"][0]["side"] == "buy"


def test_negative_starting_cash_rejected():
    with pytest.raises(ValueError):
        Ledger("trader1", -1.0)


def _random_trader(ledger, seed, calls):
    rng = random.Random(seed)
    for _ in range(calls):
        symbol = rng.choice(["A", "B", "C"])
        price = float(rng.randint(1, 20))
        quantity = rng.randint(1, 10)
        try:
            if rng.random() < 0.5:
                ledger.buy(symbol, price, quantity)
            else:
                ledger.sell(symbol, price, quantity)
        except (InsufficientFunds, InsufficientPosition):
            pass


def test_concurrent_trading_never_loses_an_update():
    """Final cash and volumes equal the sum of every committed trade."""
    ledger = Ledger("shared", 5000.0)
    threads = [
        threading.Thread(target=_random_trader, args=(ledger, seed, 300))
        for seed in range(16)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    trades = ledger.trades()
    assert trades
    assert ledger.cash == pytest.approx(5000.0 + sum(t.cash_delta for t in trades))
    assert ledger.cash >= 0

    expected = defaultdict(int)
    for trade in trades:
        expected[trade.symbol] += trade.quantity if trade.side == "buy" else -trade.quantity
    held = {symbol: pos.volume for symbol, pos in ledger.positions().items()}
    assert held == {symbol: vol for symbol, vol in expected.items() if vol != 0}
    assert all(volume > 0 for volume in held.values())


def test_concurrent_sells_cannot_oversell(ledger):
    ledger.buy("X", 1.0, 100)

    def sell():
        try:
            ledger.sell("X", 1.0, 3)
            return True
        except InsufficientPosition:
            return False

    with ThreadPoolExecutor(max_workers=16) as executor:
        results = list(executor.map(lambda _: sell(), range(50)))

    assert sum(results) == 33
    assert ledger.get_position("X").volume == 1
    assert ledger.cash == pytest.approx(900.0 + 99.0)


def test_concurrent_buys_cannot_overspend():
    ledger = Ledger("trader1", 1000.0)

    def buy():
        try:
            ledger.buy("X", 30.0, 1)
            return True
        except InsufficientFunds:
            return False

    with ThreadPoolExecutor(max_workers=16) as executor:
        results = list(executor.map(lambda _: buy(), range(100)))

    assert sum(results) == 33
    assert ledger.cash == pytest.approx(10.0)
    assert ledger.get_position("X").volume == 33


def test_different_ledgers_do_not_block_each_other():
    busy = Ledger("busy", 1000.0)
    free = Ledger("free", 1000.0)
    done = threading.Event()

    def trade_on_free():
        free.buy("X", 10.0, 1)
        done.set()

    with busy._lock:
        worker = threading.Thread(target=trade_on_free)
        worker.start()
        assert done.wait(2.0)
    worker.join()
    assert free.cash == 990.0
